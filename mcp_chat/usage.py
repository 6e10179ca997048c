"""Per-capability usage counters."""

from collections.abc import Mapping
from types import MappingProxyType

from .constants import CAPABILITIES


class UsageCounters:
    """Session-scoped, monotonically non-decreasing request counts."""

    def __init__(self, initial: Mapping[str, int] | None = None) -> None:
        self._counts: dict[str, int] = dict.fromkeys(CAPABILITIES, 0)
        for capability_id, count in (initial or {}).items():
            if count < 0:
                raise ValueError(f"Usage count must be non-negative: {capability_id}={count}")
            self._counts[capability_id] = count

    def increment(self, capability_id: str) -> int:
        self._counts[capability_id] = self._counts.get(capability_id, 0) + 1
        return self._counts[capability_id]

    def get(self, capability_id: str) -> int:
        return self._counts.get(capability_id, 0)

    def snapshot(self) -> Mapping[str, int]:
        return MappingProxyType(dict(self._counts))
