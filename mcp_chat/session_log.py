"""Append-only transcript of chat turns."""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime

from .constants import Sender


@dataclass(frozen=True)
class Turn:
    id: int
    text: str
    sender: Sender
    model_id: str
    created_at: datetime
    correlation_id: int
    failed: bool = False
    error: str | None = None


class SessionLog:
    """Ordered record of turns.

    User turns land in dispatch order and assistant turns in completion order,
    so a reply is not necessarily adjacent to the request it answers.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._by_id: dict[int, Turn] = {}
        self._responses: dict[int, Turn] = {}

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def append(self, turn: Turn) -> None:
        if self._turns and turn.id <= self._turns[-1].id:
            raise ValueError(f"Turn id {turn.id} is not greater than {self._turns[-1].id}")

        if turn.sender == "user":
            if turn.correlation_id != turn.id:
                raise ValueError("User turns must correlate to themselves")
        else:
            request = self._by_id.get(turn.correlation_id)
            if request is None or request.sender != "user":
                raise ValueError(f"No user turn with id {turn.correlation_id}")
            if turn.correlation_id in self._responses:
                raise ValueError(f"User turn {turn.correlation_id} already has a response")
            self._responses[turn.correlation_id] = turn

        self._turns.append(turn)
        self._by_id[turn.id] = turn

    def get(self, turn_id: int) -> Turn | None:
        return self._by_id.get(turn_id)

    def response_for(self, correlation_id: int) -> Turn | None:
        return self._responses.get(correlation_id)

    def snapshot(self) -> tuple[Turn, ...]:
        return tuple(self._turns)
