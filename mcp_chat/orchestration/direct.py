"""Direct category-to-provider dispatch."""

from mcp_chat.model_registry import ModelCatalog
from mcp_chat.orchestration.base import ProviderRoutes, resolve_category


class DirectResponseRouter:
    def __init__(self, catalog: ModelCatalog, providers: ProviderRoutes) -> None:
        self._catalog = catalog
        self._providers = providers

    async def request(
        self, model_id: str, text: str, active_connectors: frozenset[str]
    ) -> str:
        category = resolve_category(self._catalog, self._providers, model_id)
        return await self._providers[category].request(model_id, text, active_connectors)
