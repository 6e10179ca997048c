"""Local stand-in provider that answers after a fixed delay."""

import asyncio
import logging

from langsmith import traceable

from mcp_chat.model_registry import ModelCatalog

logger = logging.getLogger(__name__)


class SimulatedResponseProvider:
    def __init__(self, catalog: ModelCatalog, delay_seconds: float) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be non-negative")
        self._catalog = catalog
        self._delay_seconds = delay_seconds

    @traceable(run_type="llm", name="simulated.response")
    async def request(
        self, model_id: str, text: str, active_connectors: frozenset[str]
    ) -> str:
        await asyncio.sleep(self._delay_seconds)
        reply = (
            f"Response generated with {self._catalog.display_name(model_id)}. "
            "Your message was processed with the active MCP connectors."
        )
        logger.info(
            "Simulated response generated",
            extra={
                "model": model_id,
                "delay_seconds": self._delay_seconds,
                "active_connectors": sorted(active_connectors),
                "request_length": len(text),
            },
        )
        return reply
