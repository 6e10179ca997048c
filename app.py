"""MCP chat client backend exposing the session controller over FastAPI."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Response

from mcp_chat.constants import ModelCategory, Panel, RequestState
from mcp_chat.errors import BadRequestError, ModelNotFoundError
from mcp_chat.infra.runtime import build_chat_session, flush_langsmith_traces, get_settings
from mcp_chat.schemas import (
    CancelResponse,
    ConnectorMetadata,
    ModelGroup,
    ModelMetadata,
    SelectModelRequest,
    SendMessageRequest,
    SendMessageResponse,
    TurnPayload,
    UiStatePayload,
)
from mcp_chat.services.chat_session import ChatSession
from mcp_chat.session_log import Turn

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@lru_cache(maxsize=1)
def get_chat_session() -> ChatSession:
    return build_chat_session(get_settings())


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    if get_chat_session.cache_info().currsize:
        await get_chat_session().aclose()


app = FastAPI(lifespan=lifespan)
router = APIRouter(prefix="/api")


def _turn_payload(session: ChatSession, turn: Turn) -> TurnPayload:
    return TurnPayload.from_turn(turn, session.display_name(turn.model_id))


def _ui_state_payload(session: ChatSession) -> UiStatePayload:
    state = session.ui_state
    return UiStatePayload.from_state(state, session.display_name(state.selected_model_id))


def _connector_payloads(session: ChatSession) -> list[ConnectorMetadata]:
    return [ConnectorMetadata.from_connector(c) for c in session.connectors()]


@router.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/models", response_model=list[ModelGroup])
async def list_models(category: ModelCategory | None = None) -> list[ModelGroup]:
    groups = get_chat_session().models_by_category()
    return [
        ModelGroup(
            category=group_category,
            models=[ModelMetadata.from_model(model) for model in models],
        )
        for group_category, models in groups.items()
        if category is None or group_category == category
    ]


@router.get("/connectors", response_model=list[ConnectorMetadata])
async def list_connectors() -> list[ConnectorMetadata]:
    return _connector_payloads(get_chat_session())


@router.post("/connectors/{connector_id}/toggle", response_model=list[ConnectorMetadata])
async def toggle_connector(connector_id: str) -> list[ConnectorMetadata]:
    session = get_chat_session()
    session.toggle_connector(connector_id)
    return _connector_payloads(session)


@router.get("/usage")
async def usage() -> dict[str, int]:
    return dict(get_chat_session().usage())


@router.get("/turns", response_model=list[TurnPayload])
async def list_turns() -> list[TurnPayload]:
    session = get_chat_session()
    return [_turn_payload(session, turn) for turn in session.turns()]


@router.get("/requests")
async def list_requests() -> dict[int, RequestState]:
    return get_chat_session().pending_requests()


@router.post("/messages", status_code=202, response_model=SendMessageResponse)
async def send_message(request: SendMessageRequest, wait: bool = False) -> Any:
    """Append the user turn and dispatch it; optionally wait for the reply."""
    session = get_chat_session()
    try:
        turn = session.send(request.text, request.model_id)
        if turn is None:
            return Response(status_code=204)

        reply = await session.wait_for(turn.id) if wait else None
        return SendMessageResponse(
            turn=_turn_payload(session, turn),
            reply=_turn_payload(session, reply) if reply else None,
            state=session.controller.request_state(turn.id),
        )
    except BadRequestError as e:
        logger.warning("Message rejected", extra={"detail": str(e)})
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("Message dispatch failed")
        raise HTTPException(status_code=502, detail=str(e)) from e
    finally:
        flush_langsmith_traces()


@router.post("/messages/{correlation_id}/cancel", response_model=CancelResponse)
async def cancel_message(correlation_id: int) -> CancelResponse:
    return CancelResponse(cancelled=get_chat_session().cancel(correlation_id))


@router.get("/ui-state", response_model=UiStatePayload)
async def ui_state() -> UiStatePayload:
    return _ui_state_payload(get_chat_session())


@router.put("/ui-state/selected-model", response_model=UiStatePayload)
async def select_model(request: SelectModelRequest) -> UiStatePayload:
    session = get_chat_session()
    try:
        session.select_model(request.model_id)
    except ModelNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return _ui_state_payload(session)


@router.post("/ui-state/dark-mode/toggle", response_model=UiStatePayload)
async def toggle_dark_mode() -> UiStatePayload:
    session = get_chat_session()
    session.toggle_dark_mode()
    return _ui_state_payload(session)


@router.post("/ui-state/panels/{panel}/toggle", response_model=UiStatePayload)
async def toggle_panel(panel: Panel) -> UiStatePayload:
    session = get_chat_session()
    session.toggle_panel(panel)
    return _ui_state_payload(session)


app.include_router(router)
