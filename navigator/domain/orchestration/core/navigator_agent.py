from typing import TypedDict, Annotated, List, Dict, Any, Optional, Literal
import asyncio
import json
import operator
import time

from langgraph.graph import StateGraph, END
from langgraph.graph.message import add_messages
from langchain_core.messages import BaseMessage, ToolMessage
import structlog

from navigator.domain.context.context_manager import ContextManager
from navigator.domain.context.memory.memory_store import MemoryStore
from navigator.domain.errors import ModelError, StorageError
from navigator.domain.models import (
    Completion, Mode, NavigatorResponse, NavigatorResult, RecalledFragment, ToolCallRequest
)
from navigator.domain.response.normalizer import normalize
from navigator.domain.services import CompletionService
from navigator.domain.tool.tool_registry import ToolRegistry
from navigator.infrastructure.observability.logging import metrics, navigator_logger

logger = structlog.get_logger(__name__)

ASSISTANT_OWNER_ID = "assistant"


class NavigatorWorkflowState(TypedDict):
    """State for the navigator graph; lives for exactly one request"""
    messages: Annotated[List[BaseMessage], add_messages]
    user_message: str
    project_id: str
    user_id: str
    mode: Mode
    recalled: List[RecalledFragment]
    tool_calls: List[ToolCallRequest]
    final_content: Optional[str]
    response: Optional[NavigatorResponse]
    agent_chain_trace: Annotated[List[str], operator.add]


class NavigatorAgent:
    """Turns one user utterance into a structured mentor response.

    collect_context -> first_completion -> [tool_dispatch -> final_completion]
    -> normalize -> persist_memory. Tools get at most one round.
    """

    def __init__(
        self,
        context_manager: ContextManager,
        memory_store: MemoryStore,
        completion_service: CompletionService,
        tool_registry: ToolRegistry,
        completion_timeout: float = 60.0,
    ):
        self.context_manager = context_manager
        self.memory_store = memory_store
        self.completion_service = completion_service
        self.tool_registry = tool_registry
        self.completion_timeout = completion_timeout
        self.workflow = self._create_workflow()

    def _create_workflow(self):
        """Create the navigator workflow graph"""

        workflow = StateGraph(NavigatorWorkflowState)

        workflow.add_node("collect_context", self.collect_context_node)
        workflow.add_node("first_completion", self.first_completion_node)
        workflow.add_node("tool_dispatch", self.tool_dispatch_node)
        workflow.add_node("final_completion", self.final_completion_node)
        workflow.add_node("normalize", self.normalize_node)
        workflow.add_node("persist_memory", self.persist_memory_node)

        workflow.set_entry_point("collect_context")

        workflow.add_edge("collect_context", "first_completion")
        workflow.add_conditional_edges(
            "first_completion",
            self.route_after_first_completion,
            {
                "tool_dispatch": "tool_dispatch",
                "normalize": "normalize",
            }
        )
        workflow.add_edge("tool_dispatch", "final_completion")
        workflow.add_edge("final_completion", "normalize")
        workflow.add_edge("normalize", "persist_memory")
        workflow.add_edge("persist_memory", END)

        return workflow.compile()

    async def run(
        self,
        user_message: str,
        project_id: str,
        mode: Mode = Mode.LIVE_GUIDANCE,
        user_id: str = "demo-user",
    ) -> NavigatorResult:
        """Process a message through the workflow"""

        initial_state: NavigatorWorkflowState = {
            "messages": [],
            "user_message": user_message,
            "project_id": project_id,
            "user_id": user_id,
            "mode": mode,
            "recalled": [],
            "tool_calls": [],
            "final_content": None,
            "response": None,
            "agent_chain_trace": [],
        }

        start = time.monotonic()
        final_state = await self.workflow.ainvoke(initial_state)
        metrics.record_latency("navigator.request", (time.monotonic() - start) * 1000)

        logger.info(
            "Navigator request completed",
            project_id=project_id,
            trace=final_state["agent_chain_trace"],
        )
        return NavigatorResult(response=final_state["response"], recalled=final_state["recalled"])

    async def collect_context_node(self, state: NavigatorWorkflowState) -> Dict[str, Any]:
        """Gather recall and plan, and build the message context"""

        context = await self.context_manager.build_context(
            state["user_message"], state["project_id"], state["mode"]
        )
        return {
            "messages": context.messages,
            "recalled": context.recalled,
            "agent_chain_trace": ["collect_context"],
        }

    async def first_completion_node(self, state: NavigatorWorkflowState) -> Dict[str, Any]:
        """Ask the model for an answer, offering the full tool catalog"""

        completion = await self._complete(
            state["messages"],
            tools=self.tool_registry.openai_tools(),
            tool_choice="auto",
        )
        if not completion.tool_calls:
            _require_content(completion)
        return {
            "messages": [completion.message],
            "tool_calls": completion.tool_calls,
            "final_content": completion.content,
            "agent_chain_trace": ["first_completion"],
        }

    async def tool_dispatch_node(self, state: NavigatorWorkflowState) -> Dict[str, Any]:
        """Run every requested tool once, in emission order"""

        tool_messages = []
        for call in state["tool_calls"]:
            arguments = parse_tool_arguments(call.arguments)
            result = await self.tool_registry.dispatch(call.tool_name, arguments, tool_call_id=call.id)
            tool_messages.append(
                ToolMessage(content=_tool_content(result), tool_call_id=call.id, name=call.tool_name)
            )

        metrics.increment_counter("navigator.tool_calls", len(tool_messages))
        return {"messages": tool_messages, "agent_chain_trace": ["tool_dispatch"]}

    async def final_completion_node(self, state: NavigatorWorkflowState) -> Dict[str, Any]:
        """Second completion over the full transcript, without tools"""

        completion = await self._complete(state["messages"])
        _require_content(completion)
        if completion.tool_calls:
            logger.info(
                "Ignoring tool calls after final completion",
                project_id=state["project_id"],
                tool_names=[call.tool_name for call in completion.tool_calls],
            )
        return {
            "messages": [completion.message],
            "final_content": completion.content,
            "agent_chain_trace": ["final_completion"],
        }

    async def normalize_node(self, state: NavigatorWorkflowState) -> Dict[str, Any]:
        response = normalize(state["final_content"], state["mode"])
        return {"response": response, "agent_chain_trace": ["normalize"]}

    async def persist_memory_node(self, state: NavigatorWorkflowState) -> Dict[str, Any]:
        """Store both turns. Failures never invalidate the computed response."""

        project_id = state["project_id"]
        turns = [
            (state["user_id"], state["user_message"]),
            (ASSISTANT_OWNER_ID, state["response"].message),
        ]
        for owner_id, text in turns:
            try:
                await self.memory_store.save(owner_id, project_id, text)
            except StorageError as e:
                logger.error(
                    "Failed to save memory",
                    project_id=project_id,
                    owner_id=owner_id,
                    error=e.message,
                    code=e.code,
                )
                metrics.increment_counter("memory.save_failures")

        return {"agent_chain_trace": ["persist_memory"]}

    def route_after_first_completion(self, state: NavigatorWorkflowState) -> Literal["tool_dispatch", "normalize"]:
        """Route to the single tool round only when tools were requested"""

        target = "tool_dispatch" if state["tool_calls"] else "normalize"
        navigator_logger.log_workflow_transition(
            project_id=state["project_id"],
            from_node="first_completion",
            to_node=target,
            condition=f"tool_calls={len(state['tool_calls'])}",
        )
        return target

    async def _complete(
        self,
        messages: List[BaseMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[str] = None,
    ) -> Completion:
        start = time.monotonic()
        try:
            return await asyncio.wait_for(
                self.completion_service.complete(messages, tools=tools, tool_choice=tool_choice),
                timeout=self.completion_timeout,
            )
        except asyncio.TimeoutError as e:
            raise ModelError("Completion timed out") from e
        except ModelError:
            raise
        except Exception as e:
            raise ModelError(f"Completion failed: {e}") from e
        finally:
            metrics.record_latency("navigator.completion", (time.monotonic() - start) * 1000)


def _require_content(completion: Completion) -> None:
    """An answer with no text cannot be normalized into a response"""
    if not completion.content or not completion.content.strip():
        raise ModelError("Completion returned no usable choice")


def parse_tool_arguments(raw: Optional[str]) -> Dict[str, Any]:
    """Parse model-emitted arguments; anything but a JSON object becomes {}"""
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Malformed tool arguments", raw=raw[:200])
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _tool_content(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, default=str)
