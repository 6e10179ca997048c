"""Shared constants and literal types for the chat client core."""

from typing import Literal

DEFAULT_MODEL = "claude-4-sonnet"
DEFAULT_RESPONSE_TIMEOUT_SECONDS = 60.0
DEFAULT_SIMULATED_DELAY_SECONDS = 1.0
DEFAULT_ACTIVE_CONNECTORS = ("filesystem", "web", "database")
WEB_CONNECTOR_ID = "web"
LANGSMITH_PROJECT = "mcp-chat"

DEFAULT_MODEL_ENV = "MCP_CHAT_DEFAULT_MODEL"
RESPONSE_TIMEOUT_ENV = "MCP_CHAT_RESPONSE_TIMEOUT"
SIMULATED_DELAY_ENV = "MCP_CHAT_SIMULATED_DELAY"
SEARCH_COUNTING_ENV = "MCP_CHAT_SEARCH_COUNTING"
ORCHESTRATOR_ENV = "MCP_CHAT_ORCHESTRATOR"
ACTIVE_CONNECTORS_ENV = "MCP_CHAT_ACTIVE_CONNECTORS"
LOG_LEVEL_ENV = "MCP_CHAT_LOG_LEVEL"

ModelCategory = Literal["chat", "code", "orchestration", "vision"]
ModelTier = Literal["standard", "premium"]
Sender = Literal["user", "assistant"]
RequestState = Literal["pending", "awaiting_response", "completed", "cancelled"]
SearchCounting = Literal["web_connector", "every_dispatch"]
OrchestratorKind = Literal["direct", "langgraph"]
Panel = Literal["history", "settings", "model_dropdown"]

MODEL_CATEGORIES: tuple[ModelCategory, ...] = ("chat", "code", "orchestration", "vision")
SEARCH_COUNTING_OPTIONS: tuple[SearchCounting, ...] = ("web_connector", "every_dispatch")
ORCHESTRATOR_OPTIONS: tuple[OrchestratorKind, ...] = ("direct", "langgraph")

REASONING = "reasoning"
SUPER_SEARCH = "superSearch"
CODE_GEN = "codeGen"
IMAGE_GEN = "imageGen"
ORCHESTRATION = "orchestration"
CAPABILITIES = (REASONING, SUPER_SEARCH, CODE_GEN, IMAGE_GEN, ORCHESTRATION)

CATEGORY_CAPABILITIES: dict[ModelCategory, str] = {
    "chat": REASONING,
    "code": CODE_GEN,
    "vision": IMAGE_GEN,
    "orchestration": ORCHESTRATION,
}
