import asyncio
import json
from typing import Any, Dict, List, Optional, Sequence, Union

from langchain_core.messages import AIMessage

from navigator.domain.context.context_manager import ContextManager
from navigator.domain.context.memory.memory_store import MemoryStore
from navigator.domain.context.memory.vector_backend import InMemoryVectorBackend
from navigator.domain.context.plan_store import PlanStore
from navigator.domain.models import Completion, MemoryRecord, ToolCallRequest
from navigator.domain.orchestration.core.navigator_agent import NavigatorAgent
from navigator.domain.services import CompletionService, EmbeddingService
from navigator.domain.tool.builtin_tools import create_default_registry
from navigator.domain.tool.tool_registry import ToolRegistry
from navigator.infrastructure.llm.embeddings import HashingEmbeddingService


def make_completion(content: Optional[str] = None, tool_calls: Optional[List[Dict[str, Any]]] = None) -> Completion:
    """Build a Completion; tool_calls items are {"id", "name", "arguments"(raw str)}"""
    tool_calls = tool_calls or []
    message = AIMessage(
        content=content or "",
        tool_calls=[
            {"id": call["id"], "name": call["name"], "args": _safe_args(call.get("arguments", "{}"))}
            for call in tool_calls
        ],
    )
    return Completion(
        content=content,
        tool_calls=[
            ToolCallRequest(id=call["id"], tool_name=call["name"], arguments=call.get("arguments", "{}"))
            for call in tool_calls
        ],
        message=message,
    )


def _safe_args(raw: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


class FakeCompletionService(CompletionService):
    """Scripted completions; records every call"""

    def __init__(self, responses: Sequence[Union[Completion, Exception]], delay: float = 0.0):
        self.responses = list(responses)
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, messages, tools=None, tool_choice=None) -> Completion:
        self.calls.append({"messages": list(messages), "tools": tools, "tool_choice": tool_choice})
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FailingEmbedder(EmbeddingService):
    def __init__(self):
        self.calls = 0

    async def embed(self, text: str) -> List[float]:
        self.calls += 1
        raise RuntimeError("embedding backend down")


class FailingBackend(InMemoryVectorBackend):
    """Rejects writes and/or searches"""

    def __init__(self, fail_insert: bool = True, fail_search: bool = True):
        super().__init__()
        self.fail_insert = fail_insert
        self.fail_search = fail_search

    async def insert(self, record: MemoryRecord) -> None:
        if self.fail_insert:
            raise RuntimeError("insert rejected")
        await super().insert(record)

    async def vector_search(self, embedding, project_id, k, threshold):
        if self.fail_search:
            raise RuntimeError("search failed")
        return await super().vector_search(embedding, project_id, k, threshold)


class FailingPlanStore(PlanStore):
    async def load_plan(self, project_id: str):
        raise RuntimeError("plan store offline")


def build_agent(
    completion_service: CompletionService,
    backend: Optional[InMemoryVectorBackend] = None,
    plan_store: Optional[PlanStore] = None,
    registry: Optional[ToolRegistry] = None,
    embedder: Optional[EmbeddingService] = None,
    completion_timeout: float = 5.0,
) -> NavigatorAgent:
    memory_store = MemoryStore(
        embedder or HashingEmbeddingService(dimensions=512),
        backend if backend is not None else InMemoryVectorBackend(),
        timeout=1.0,
    )
    context_manager = ContextManager(memory_store, plan_store, plan_timeout=1.0)
    return NavigatorAgent(
        context_manager,
        memory_store,
        completion_service,
        registry or create_default_registry(),
        completion_timeout=completion_timeout,
    )


class CountingEmbedder(HashingEmbeddingService):
    """Hashing embedder that counts calls"""

    def __init__(self, dimensions: int = 512):
        super().__init__(dimensions=dimensions)
        self.calls = 0

    async def embed(self, text: str) -> List[float]:
        self.calls += 1
        return await super().embed(text)
