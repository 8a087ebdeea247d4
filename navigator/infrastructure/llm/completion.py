"""Chat completion backed by an OpenAI-compatible model through langchain."""

import json
from typing import Any, Dict, List, Optional, Sequence

import structlog
from langchain_core.messages import AIMessage, BaseMessage
from langchain_openai import ChatOpenAI

from navigator.domain.errors import ModelError
from navigator.domain.models import Completion, ToolCallRequest
from navigator.domain.services import CompletionService

logger = structlog.get_logger(__name__)


class OpenAICompletionService(CompletionService):
    """CompletionService over ChatOpenAI.

    The client is built on first use so a missing credential only surfaces
    when a request actually needs the model.
    """

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 60.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._llm: Optional[ChatOpenAI] = None

        logger.info("OpenAICompletionService configured", model=model, has_credential=bool(api_key))

    def _client(self) -> ChatOpenAI:
        if not self.api_key:
            raise ModelError("OPENAI_API_KEY is not configured")
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self.model,
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._llm

    async def complete(
        self,
        messages: Sequence[BaseMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[str] = None,
    ) -> Completion:
        llm = self._client()
        runnable = llm.bind_tools(tools, tool_choice=tool_choice) if tools else llm

        try:
            message = await runnable.ainvoke(list(messages))
        except Exception as e:
            logger.error("Completion request failed", model=self.model, error=str(e))
            raise ModelError(f"Completion request failed: {e}") from e

        if not isinstance(message, AIMessage):
            raise ModelError("Completion returned no usable choice")

        return completion_from_message(message)


def completion_from_message(message: AIMessage) -> Completion:
    """Convert an AIMessage, keeping tool calls in emission order with raw arguments"""

    return Completion(
        content=_text_content(message.content),
        tool_calls=_tool_calls(message),
        message=message,
    )


def _text_content(content: Any) -> Optional[str]:
    if content is None or isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [
            block if isinstance(block, str) else block.get("text", "")
            for block in content
            if isinstance(block, str) or (isinstance(block, dict) and block.get("type") == "text")
        ]
        return "".join(parts)
    return json.dumps(content, default=str)


def _tool_calls(message: AIMessage) -> List[ToolCallRequest]:
    # Provider payload keeps emission order and the unparsed argument text
    raw_calls = message.additional_kwargs.get("tool_calls") or []
    if raw_calls:
        return [
            ToolCallRequest(
                id=call.get("id") or "",
                tool_name=(call.get("function") or {}).get("name") or "",
                arguments=(call.get("function") or {}).get("arguments") or "{}",
            )
            for call in raw_calls
        ]

    calls = [
        ToolCallRequest(id=call.get("id") or "", tool_name=call["name"], arguments=json.dumps(call.get("args") or {}))
        for call in message.tool_calls
    ]
    calls.extend(
        ToolCallRequest(id=call.get("id") or "", tool_name=call.get("name") or "", arguments=call.get("args") or "{}")
        for call in message.invalid_tool_calls
    )
    return calls
