from typing import List, Optional
import asyncio

import structlog
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel, ConfigDict, Field

from navigator.domain.models import Mode, ProjectPlan, RecalledFragment
from .memory.memory_store import MemoryStore
from .plan_store import PlanStore, load_plan_or_default
from .prompts import SYSTEM_PROMPT, render_memory_block, render_project_block

logger = structlog.get_logger(__name__)

# Modes where the stored plan is part of the conversation
PLAN_MODES = {Mode.PROJECT_PLAN, Mode.LIVE_GUIDANCE}


class NavigatorContext(BaseModel):
    """Context assembled for one request"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    messages: List[BaseMessage] = Field(default_factory=list)
    recalled: List[RecalledFragment] = Field(default_factory=list)
    plan: Optional[ProjectPlan] = None


class ContextManager:
    """Assembles recall, plan and persona into the message context"""

    def __init__(
        self,
        memory_store: MemoryStore,
        plan_store: Optional[PlanStore] = None,
        plan_timeout: float = 10.0,
    ):
        self.memory_store = memory_store
        self.plan_store = plan_store
        self.plan_timeout = plan_timeout

    async def build_context(self, user_message: str, project_id: str, mode: Mode) -> NavigatorContext:
        """Build the message context for a single request"""

        logger.info("Building context", project_id=project_id, mode=mode.value)

        recall_task = self.memory_store.recall(project_id, user_message)
        if mode in PLAN_MODES:
            recalled, plan = await asyncio.gather(
                recall_task,
                load_plan_or_default(self.plan_store, project_id, timeout=self.plan_timeout),
            )
        else:
            recalled, plan = await recall_task, None

        messages: List[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT)]

        memory_block = render_memory_block(recalled)
        if memory_block:
            messages.append(SystemMessage(content=memory_block))

        messages.append(SystemMessage(content=render_project_block(project_id, mode, plan)))
        messages.append(HumanMessage(content=user_message))

        return NavigatorContext(messages=messages, recalled=recalled, plan=plan)
