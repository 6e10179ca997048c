"""Connector registry tracking which capability connectors are active."""

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import UnknownConnectorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connector:
    id: str
    display_name: str
    active: bool = False


class ConnectorRegistry:
    def __init__(self, connectors: Iterable[Connector]) -> None:
        self._connectors: dict[str, Connector] = {}
        for connector in connectors:
            if connector.id in self._connectors:
                raise ValueError(f"Duplicate connector id: {connector.id}")
            self._connectors[connector.id] = connector

    def __contains__(self, connector_id: object) -> bool:
        return connector_id in self._connectors

    def get(self, connector_id: str) -> Connector:
        try:
            return self._connectors[connector_id]
        except KeyError:
            raise UnknownConnectorError(connector_id) from None

    def connectors(self) -> tuple[Connector, ...]:
        return tuple(self._connectors.values())

    def toggle(self, connector_id: str) -> bool:
        """Flip the connector's membership in the active set and return its new state."""
        current = self.get(connector_id)
        updated = dataclasses.replace(current, active=not current.active)
        self._connectors[connector_id] = updated
        logger.info(
            "Connector toggled",
            extra={"connector_id": connector_id, "active": updated.active},
        )
        return updated.active

    def is_active(self, connector_id: str) -> bool:
        connector = self._connectors.get(connector_id)
        return connector is not None and connector.active

    def active_set(self) -> frozenset[Connector]:
        return frozenset(c for c in self._connectors.values() if c.active)

    def active_ids(self) -> frozenset[str]:
        return frozenset(c.id for c in self._connectors.values() if c.active)


DEFAULT_CONNECTORS: tuple[Connector, ...] = (
    Connector("filesystem", "Filesystem"),
    Connector("web", "Web Search"),
    Connector("database", "Database"),
    Connector("vision", "Vision API"),
    Connector("audio", "Audio Processing"),
)


def build_default_registry(active_ids: Iterable[str]) -> ConnectorRegistry:
    active = set(active_ids)
    known = {connector.id for connector in DEFAULT_CONNECTORS}
    unknown = active - known
    if unknown:
        raise ValueError(f"Unknown connectors: {', '.join(sorted(unknown))}")
    return ConnectorRegistry(
        dataclasses.replace(connector, active=connector.id in active)
        for connector in DEFAULT_CONNECTORS
    )
