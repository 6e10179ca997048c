"""Conversion helpers between chat turns and LangChain message formats."""

from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

BASE_SYSTEM_PROMPT = "You are an assistant inside an MCP chat client."


def build_connector_prompt(active_connectors: frozenset[str], base_prompt: str) -> str:
    if not active_connectors:
        return f"{base_prompt} No connectors are active."
    return f"{base_prompt} Active connectors: {', '.join(sorted(active_connectors))}."


def build_langchain_messages(
    text: str,
    active_connectors: frozenset[str],
    base_prompt: str = BASE_SYSTEM_PROMPT,
) -> list[SystemMessage | HumanMessage]:
    """Convert one user turn and its connector set to LangChain messages."""
    return [
        SystemMessage(content=build_connector_prompt(active_connectors, base_prompt)),
        HumanMessage(content=text),
    ]


def extract_text(response: Any) -> str:
    """Flatten a runnable result (message, content blocks, or plain string) to text."""
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return str(content)
