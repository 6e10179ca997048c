"""LangChain runnable provider implementation."""

import logging
import time
from collections.abc import Callable
from typing import Any

from langchain_core.runnables import Runnable

from mcp_chat.message_mappers import BASE_SYSTEM_PROMPT, build_langchain_messages, extract_text

logger = logging.getLogger(__name__)


class RunnableResponseProvider:
    def __init__(
        self,
        get_runnable: Callable[[str], Runnable[Any, Any]],
        system_prompt: str = BASE_SYSTEM_PROMPT,
    ) -> None:
        self._get_runnable = get_runnable
        self._system_prompt = system_prompt

    async def request(
        self, model_id: str, text: str, active_connectors: frozenset[str]
    ) -> str:
        messages = build_langchain_messages(text, active_connectors, self._system_prompt)

        start = time.time()
        response = await self._get_runnable(model_id).ainvoke(
            messages,
            config={
                "run_name": "mcp_chat_request",
                "tags": ["mcp-chat", model_id],
                "metadata": {"active_connectors": sorted(active_connectors)},
            },
        )
        duration_ms = int((time.time() - start) * 1000)
        content = extract_text(response)

        logger.info(
            "Chat response generated",
            extra={
                "runnable_duration_ms": duration_ms,
                "model": model_id,
                "response_length": len(content),
            },
        )
        return content
