"""Routing helpers shared by response orchestration strategies."""

from collections.abc import Mapping

from mcp_chat.constants import ModelCategory
from mcp_chat.model_registry import ModelCatalog
from mcp_chat.providers.base import ResponseProvider

ProviderRoutes = Mapping[ModelCategory, ResponseProvider]


def resolve_category(
    catalog: ModelCatalog, routes: ProviderRoutes, model_id: str
) -> ModelCategory:
    category = catalog.resolve(model_id).category
    if category not in routes:
        raise RuntimeError(f"Unsupported model category: {category}")
    return category
