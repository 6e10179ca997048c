"""Dispatch controller: sends user turns and correlates provider replies."""

import asyncio
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from mcp_chat.connectors import ConnectorRegistry
from mcp_chat.constants import (
    CATEGORY_CAPABILITIES,
    SUPER_SEARCH,
    WEB_CONNECTOR_ID,
    RequestState,
    SearchCounting,
)
from mcp_chat.errors import EmptyMessageError, ModelNotFoundError
from mcp_chat.model_registry import Model, ModelCatalog
from mcp_chat.providers.base import ResponseProvider
from mcp_chat.session_log import SessionLog, Turn
from mcp_chat.usage import UsageCounters

logger = logging.getLogger(__name__)

TurnListener = Callable[[Turn], None]


class ResponseTimeout(Exception):
    """The controller's own response deadline expired."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PendingRequest:
    correlation_id: int
    model_id: str
    effective_model: Model
    text: str
    active_connectors: frozenset[str]
    state: RequestState = "pending"
    task: "asyncio.Task[None] | None" = None


class DispatchController:
    """Owns the session log and usage counters for a single local session.

    Each send appends the user turn immediately and schedules the provider call
    as an independent task keyed by the user turn's id, so several requests can
    be outstanding and every reply is paired with its own request whatever the
    completion order.
    """

    def __init__(
        self,
        catalog: ModelCatalog,
        connectors: ConnectorRegistry,
        provider: ResponseProvider,
        *,
        usage: UsageCounters | None = None,
        response_timeout: float | None = None,
        search_counting: SearchCounting = "web_connector",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if response_timeout is not None and response_timeout <= 0:
            raise ValueError("response_timeout must be positive")
        self._catalog = catalog
        self._connectors = connectors
        self._provider = provider
        self._usage = usage or UsageCounters()
        self._log = SessionLog()
        self._response_timeout = response_timeout
        self._search_counting = search_counting
        self._clock = clock
        self._ids = itertools.count(1)
        self._pending: dict[int, PendingRequest] = {}
        self._listeners: list[TurnListener] = []

    @property
    def log(self) -> SessionLog:
        return self._log

    @property
    def usage(self) -> UsageCounters:
        return self._usage

    def subscribe(self, listener: TurnListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def send_message(self, raw_text: str, model_id: str) -> Turn:
        text = raw_text.strip()
        if not text:
            raise EmptyMessageError()

        try:
            effective_model = self._catalog.resolve(model_id)
        except ModelNotFoundError:
            effective_model = self._catalog.default_model
            logger.warning(
                "Unknown model requested; dispatching with default model",
                extra={"model": model_id, "default_model": effective_model.id},
            )

        loop = asyncio.get_running_loop()

        turn_id = next(self._ids)
        user_turn = Turn(
            id=turn_id,
            text=text,
            sender="user",
            model_id=model_id,
            created_at=self._clock(),
            correlation_id=turn_id,
        )
        self._log.append(user_turn)

        active_connectors = self._connectors.active_ids()
        self._count_usage(effective_model, active_connectors)

        pending = PendingRequest(
            correlation_id=turn_id,
            model_id=model_id,
            effective_model=effective_model,
            text=text,
            active_connectors=active_connectors,
        )
        self._pending[turn_id] = pending
        pending.task = loop.create_task(self._await_response(pending))
        self._notify(user_turn)

        logger.info(
            "Message dispatched",
            extra={
                "correlation_id": turn_id,
                "model": effective_model.id,
                "active_connectors": sorted(active_connectors),
                "in_flight": len(self._pending),
            },
        )
        return user_turn

    def _count_usage(self, model: Model, active_connectors: frozenset[str]) -> None:
        self._usage.increment(CATEGORY_CAPABILITIES[model.category])
        if self._search_counting == "every_dispatch" or WEB_CONNECTOR_ID in active_connectors:
            self._usage.increment(SUPER_SEARCH)

    async def _call_provider(self, pending: PendingRequest) -> str:
        call = self._provider.request(
            pending.effective_model.id, pending.text, pending.active_connectors
        )
        deadline = asyncio.timeout(self._response_timeout)
        try:
            async with deadline:
                return await call
        except TimeoutError:
            # Only the deadline set here counts as a timeout.
            if deadline.expired():
                raise ResponseTimeout() from None
            raise

    async def _await_response(self, pending: PendingRequest) -> None:
        pending.state = "awaiting_response"
        try:
            reply = await self._call_provider(pending)
        except asyncio.CancelledError:
            logger.info(
                "Dispatch cancelled", extra={"correlation_id": pending.correlation_id}
            )
            raise
        except ResponseTimeout:
            logger.warning(
                "Response provider timed out",
                extra={
                    "correlation_id": pending.correlation_id,
                    "timeout_seconds": self._response_timeout,
                },
            )
            self._complete(
                pending,
                f"No response within {self._response_timeout:g} seconds.",
                error="timeout",
            )
            return
        except Exception as e:
            logger.warning(
                "Response provider failed",
                extra={"correlation_id": pending.correlation_id},
                exc_info=True,
            )
            self._complete(pending, f"The response failed: {e}", error=str(e) or type(e).__name__)
            return

        self._complete(pending, reply)

    def _complete(self, pending: PendingRequest, text: str, error: str | None = None) -> None:
        if pending.state == "cancelled":
            logger.info(
                "Suppressed response for cancelled request",
                extra={"correlation_id": pending.correlation_id},
            )
            return

        assistant_turn = Turn(
            id=next(self._ids),
            text=text,
            sender="assistant",
            model_id=pending.model_id,
            created_at=self._clock(),
            correlation_id=pending.correlation_id,
            failed=error is not None,
            error=error,
        )
        self._log.append(assistant_turn)
        pending.state = "completed"
        self._pending.pop(pending.correlation_id, None)
        self._notify(assistant_turn)

    def _notify(self, turn: Turn) -> None:
        for listener in list(self._listeners):
            try:
                listener(turn)
            except Exception:
                logger.exception("Turn listener failed", extra={"turn_id": turn.id})

    def cancel(self, correlation_id: int) -> bool:
        pending = self._pending.pop(correlation_id, None)
        if pending is None:
            return False
        pending.state = "cancelled"
        if pending.task is not None:
            pending.task.cancel()
        logger.info("Request cancelled", extra={"correlation_id": correlation_id})
        return True

    def request_state(self, correlation_id: int) -> RequestState | None:
        pending = self._pending.get(correlation_id)
        return pending.state if pending else None

    def pending_requests(self) -> dict[int, RequestState]:
        return {cid: pending.state for cid, pending in self._pending.items()}

    async def wait_for(self, correlation_id: int) -> Turn | None:
        """Wait until the request finishes and return its assistant turn, if any."""
        pending = self._pending.get(correlation_id)
        if pending is not None and pending.task is not None:
            await asyncio.gather(pending.task, return_exceptions=True)
        return self._log.response_for(correlation_id)

    async def drain(self) -> None:
        tasks = [p.task for p in self._pending.values() if p.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def aclose(self) -> None:
        pending = list(self._pending.values())
        for request in pending:
            self.cancel(request.correlation_id)
        tasks = [request.task for request in pending if request.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
