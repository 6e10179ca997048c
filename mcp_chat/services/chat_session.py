"""Application service exposed to the presentation layer."""

import logging
from collections.abc import Mapping

from mcp_chat.connectors import Connector, ConnectorRegistry
from mcp_chat.constants import ModelCategory, Panel, RequestState
from mcp_chat.errors import EmptyMessageError, UnknownConnectorError
from mcp_chat.model_registry import Model, ModelCatalog
from mcp_chat.services.dispatch_controller import DispatchController
from mcp_chat.session_log import Turn
from mcp_chat.state import (
    UiState,
    UiStateStore,
    select_model,
    toggle_dark_mode,
    toggle_panel,
)

logger = logging.getLogger(__name__)


class ChatSession:
    def __init__(
        self,
        catalog: ModelCatalog,
        connectors: ConnectorRegistry,
        controller: DispatchController,
        ui_store: UiStateStore | None = None,
    ) -> None:
        self._catalog = catalog
        self._connectors = connectors
        self._controller = controller
        self._ui_store = ui_store or UiStateStore(UiState(catalog.default_model_id))

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    @property
    def controller(self) -> DispatchController:
        return self._controller

    @property
    def ui_store(self) -> UiStateStore:
        return self._ui_store

    @property
    def ui_state(self) -> UiState:
        return self._ui_store.state

    # --- Mutators ---

    def send(self, text: str, model_id: str | None = None) -> Turn | None:
        """Send with the given or currently selected model; blank text is ignored."""
        try:
            return self._controller.send_message(
                text, model_id or self._ui_store.state.selected_model_id
            )
        except EmptyMessageError:
            logger.debug("Ignoring blank message")
            return None

    def select_model(self, model_id: str) -> UiState:
        self._catalog.resolve(model_id)
        return self._ui_store.dispatch(select_model, model_id)

    def toggle_connector(self, connector_id: str) -> bool | None:
        try:
            return self._connectors.toggle(connector_id)
        except UnknownConnectorError:
            logger.warning("Ignoring toggle of unknown connector", extra={"connector_id": connector_id})
            return None

    def toggle_dark_mode(self) -> UiState:
        return self._ui_store.dispatch(toggle_dark_mode)

    def toggle_panel(self, panel: Panel) -> UiState:
        return self._ui_store.dispatch(toggle_panel, panel)

    def cancel(self, correlation_id: int) -> bool:
        return self._controller.cancel(correlation_id)

    async def wait_for(self, correlation_id: int) -> Turn | None:
        return await self._controller.wait_for(correlation_id)

    async def aclose(self) -> None:
        await self._controller.aclose()

    # --- Read-only projections ---

    def turns(self) -> tuple[Turn, ...]:
        return self._controller.log.snapshot()

    def models_by_category(self) -> dict[ModelCategory, tuple[Model, ...]]:
        return {
            category: self._catalog.list_by_category(category)
            for category in self._catalog.categories()
        }

    def connectors(self) -> tuple[Connector, ...]:
        return self._connectors.connectors()

    def active_connectors(self) -> frozenset[Connector]:
        return self._connectors.active_set()

    def usage(self) -> Mapping[str, int]:
        return self._controller.usage.snapshot()

    def pending_requests(self) -> dict[int, RequestState]:
        return self._controller.pending_requests()

    def display_name(self, model_id: str) -> str:
        return self._catalog.display_name(model_id)
