"""LangGraph-based routing of requests to category providers."""

from collections.abc import Awaitable, Callable
from typing import NotRequired, TypedDict, cast

from langgraph.graph import END, START, StateGraph

from mcp_chat.constants import ModelCategory
from mcp_chat.model_registry import ModelCatalog
from mcp_chat.orchestration.base import ProviderRoutes, resolve_category
from mcp_chat.providers.base import ResponseProvider


class ResponseGraphState(TypedDict):
    model_id: str
    category: ModelCategory
    text: str
    active_connectors: frozenset[str]
    response: NotRequired[str]


def _node_name(category: ModelCategory) -> str:
    return f"respond_{category}"


class LangGraphResponseRouter:
    def __init__(self, catalog: ModelCatalog, providers: ProviderRoutes) -> None:
        self._catalog = catalog
        self._providers = providers
        self._graph = None
        if providers:
            graph = StateGraph(ResponseGraphState)
            for category, provider in providers.items():
                graph.add_node(_node_name(category), self._respond_with(provider))
                graph.add_edge(_node_name(category), END)
            graph.add_conditional_edges(
                START,
                self._route,
                {category: _node_name(category) for category in providers},
            )
            self._graph = graph.compile()

    @staticmethod
    def _route(state: ResponseGraphState) -> ModelCategory:
        return state["category"]

    @staticmethod
    def _respond_with(
        provider: ResponseProvider,
    ) -> Callable[[ResponseGraphState], Awaitable[dict[str, str]]]:
        async def respond(state: ResponseGraphState) -> dict[str, str]:
            return {
                "response": await provider.request(
                    state["model_id"], state["text"], state["active_connectors"]
                )
            }

        return respond

    async def request(
        self, model_id: str, text: str, active_connectors: frozenset[str]
    ) -> str:
        category = resolve_category(self._catalog, self._providers, model_id)
        if self._graph is None:
            raise RuntimeError(f"Unsupported model category: {category}")

        initial_state: ResponseGraphState = {
            "model_id": model_id,
            "category": category,
            "text": text,
            "active_connectors": active_connectors,
        }
        result = cast("ResponseGraphState", await self._graph.ainvoke(initial_state))
        response = result.get("response")
        if response is None:
            raise RuntimeError("LangGraph execution did not return a provider response")
        return response
