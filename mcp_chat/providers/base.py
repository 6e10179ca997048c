"""Response provider interface."""

from typing import Protocol


class ResponseProvider(Protocol):
    async def request(
        self, model_id: str, text: str, active_connectors: frozenset[str]
    ) -> str:
        """Produce the assistant reply for a single user turn."""
        ...
