"""Runtime infrastructure helpers for settings, tracing, and session wiring."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import cast

from langsmith.run_trees import get_cached_client

from mcp_chat.connectors import build_default_registry
from mcp_chat.constants import (
    ACTIVE_CONNECTORS_ENV,
    DEFAULT_ACTIVE_CONNECTORS,
    DEFAULT_MODEL,
    DEFAULT_MODEL_ENV,
    DEFAULT_RESPONSE_TIMEOUT_SECONDS,
    DEFAULT_SIMULATED_DELAY_SECONDS,
    LANGSMITH_PROJECT,
    LOG_LEVEL_ENV,
    MODEL_CATEGORIES,
    ORCHESTRATOR_ENV,
    ORCHESTRATOR_OPTIONS,
    RESPONSE_TIMEOUT_ENV,
    SEARCH_COUNTING_ENV,
    SEARCH_COUNTING_OPTIONS,
    SIMULATED_DELAY_ENV,
    OrchestratorKind,
    SearchCounting,
)
from mcp_chat.model_registry import ModelCatalog, build_default_catalog
from mcp_chat.orchestration.direct import DirectResponseRouter
from mcp_chat.orchestration.langgraph_flow import LangGraphResponseRouter
from mcp_chat.providers.base import ResponseProvider
from mcp_chat.providers.simulated import SimulatedResponseProvider
from mcp_chat.services.chat_session import ChatSession
from mcp_chat.services.dispatch_controller import DispatchController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    default_model_id: str = DEFAULT_MODEL
    response_timeout_seconds: float | None = DEFAULT_RESPONSE_TIMEOUT_SECONDS
    simulated_delay_seconds: float = DEFAULT_SIMULATED_DELAY_SECONDS
    search_counting: SearchCounting = "web_connector"
    orchestrator: OrchestratorKind = "direct"
    active_connectors: tuple[str, ...] = DEFAULT_ACTIVE_CONNECTORS
    log_level: str = "INFO"
    langsmith_api_key: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        search_counting = env.get(SEARCH_COUNTING_ENV, "web_connector")
        if search_counting not in SEARCH_COUNTING_OPTIONS:
            options = ", ".join(SEARCH_COUNTING_OPTIONS)
            raise ValueError(f"Invalid {SEARCH_COUNTING_ENV}: {search_counting}. Options: {options}")

        orchestrator = env.get(ORCHESTRATOR_ENV, "direct")
        if orchestrator not in ORCHESTRATOR_OPTIONS:
            options = ", ".join(ORCHESTRATOR_OPTIONS)
            raise ValueError(f"Invalid {ORCHESTRATOR_ENV}: {orchestrator}. Options: {options}")

        connectors = env.get(ACTIVE_CONNECTORS_ENV)
        active_connectors = (
            DEFAULT_ACTIVE_CONNECTORS
            if connectors is None
            else tuple(c.strip() for c in connectors.split(",") if c.strip())
        )

        log_level = env.get(LOG_LEVEL_ENV, "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Invalid {LOG_LEVEL_ENV}: {log_level}")

        return cls(
            default_model_id=env.get(DEFAULT_MODEL_ENV, DEFAULT_MODEL),
            response_timeout_seconds=_parse_timeout(env.get(RESPONSE_TIMEOUT_ENV)),
            simulated_delay_seconds=_parse_seconds(
                SIMULATED_DELAY_ENV,
                env.get(SIMULATED_DELAY_ENV),
                DEFAULT_SIMULATED_DELAY_SECONDS,
            ),
            search_counting=cast("SearchCounting", search_counting),
            orchestrator=cast("OrchestratorKind", orchestrator),
            active_connectors=active_connectors,
            log_level=log_level,
            langsmith_api_key=env.get("LANGSMITH_API_KEY") or None,
        )


def _parse_seconds(name: str, raw: str | None, default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {raw!r}")
    return value


def _parse_timeout(raw: str | None) -> float | None:
    if raw is not None and raw.strip().lower() == "none":
        return None
    value = _parse_seconds(RESPONSE_TIMEOUT_ENV, raw, DEFAULT_RESPONSE_TIMEOUT_SECONDS)
    return value or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(settings: Settings) -> None:
    logging.getLogger("mcp_chat").setLevel(settings.log_level)


def configure_langsmith(langsmith_api_key: str | None) -> None:
    if not langsmith_api_key:
        os.environ.pop("LANGSMITH_TRACING", None)
        logger.info("LangSmith tracing disabled because API key is unavailable")
        return

    os.environ["LANGSMITH_TRACING"] = "true"
    os.environ["LANGSMITH_API_KEY"] = langsmith_api_key
    os.environ.setdefault("LANGSMITH_PROJECT", LANGSMITH_PROJECT)


def flush_langsmith_traces() -> None:
    if os.environ.get("LANGSMITH_TRACING", "").lower() != "true":
        return
    if not os.environ.get("LANGSMITH_API_KEY"):
        return
    try:
        get_cached_client().flush()
    except Exception:
        logger.warning("Failed to flush LangSmith traces", exc_info=True)


def build_response_provider(settings: Settings, catalog: ModelCatalog) -> ResponseProvider:
    simulated = SimulatedResponseProvider(catalog, settings.simulated_delay_seconds)
    routes = dict.fromkeys(MODEL_CATEGORIES, simulated)
    if settings.orchestrator == "langgraph":
        return LangGraphResponseRouter(catalog, routes)
    return DirectResponseRouter(catalog, routes)


def build_chat_session(settings: Settings) -> ChatSession:
    configure_logging(settings)
    configure_langsmith(settings.langsmith_api_key)

    catalog = build_default_catalog(settings.default_model_id)
    connectors = build_default_registry(settings.active_connectors)
    controller = DispatchController(
        catalog,
        connectors,
        build_response_provider(settings, catalog),
        response_timeout=settings.response_timeout_seconds,
        search_counting=settings.search_counting,
    )
    logger.info(
        "Chat session initialized",
        extra={
            "default_model": settings.default_model_id,
            "orchestrator": settings.orchestrator,
            "search_counting": settings.search_counting,
        },
    )
    return ChatSession(catalog, connectors, controller)
