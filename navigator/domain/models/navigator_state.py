from typing import Dict, Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from langchain_core.messages import AIMessage


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Mode(str, Enum):
    """Conversation intent steering persona and response shape"""
    ASSESSMENT_QUESTIONS = "assessment_questions"
    ASSESSMENT_FEEDBACK = "assessment_feedback"
    PROJECT_PLAN = "project_plan"
    LIVE_GUIDANCE = "live_guidance"


class PlanStep(BaseModel):
    """One step of a project plan; keys beyond the known ones are kept as sent"""
    model_config = ConfigDict(extra="allow")

    title: str = Field(description="Step title")
    description: str = Field(default="", description="What to do in this step")
    prerequisites: Optional[List[str]] = Field(None, description="Things needed before starting")
    resources: Optional[List[str]] = Field(None, description="Reference material for the step")


class Guidance(BaseModel):
    """Structured coaching payload embedded in a response"""
    warnings: List[str] = Field(default_factory=list)
    best_practices: List[str] = Field(default_factory=list)
    meta_cognition_prompts: List[str] = Field(default_factory=list)
    next_priority: Optional[str] = None

    def is_empty(self) -> bool:
        return not (
            self.warnings
            or self.best_practices
            or self.meta_cognition_prompts
            or self.next_priority
        )


class NavigatorResponse(BaseModel):
    """Total response contract consumed by the UI"""
    mode: Mode = Field(default=Mode.LIVE_GUIDANCE)
    message: str = Field(default="")
    questions: List[str] = Field(default_factory=list)
    analysis: Dict[str, Any] = Field(default_factory=dict)
    plan: List[PlanStep] = Field(default_factory=list)
    guidance: Guidance = Field(default_factory=Guidance)


class MemoryRecord(BaseModel):
    """Persisted text fragment with its embedding"""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    owner_id: str
    project_id: str
    content: str = Field(min_length=1)
    embedding: List[float]
    created_at: datetime = Field(default_factory=_utcnow)


class RecalledFragment(BaseModel):
    """Recall hit; derived, never persisted"""
    content: str
    similarity: float = Field(ge=0.0, le=1.0)

    def to_debug(self) -> Dict[str, Any]:
        return {"text": self.content, "score": self.similarity}


class ProjectPlan(BaseModel):
    """Stored plan for a project"""
    project_id: str
    title: str = ""
    steps: List[PlanStep] = Field(default_factory=list)


class ToolCallRequest(BaseModel):
    """Tool call emitted by the model; arguments are the raw JSON text"""
    id: str
    tool_name: str
    arguments: str = "{}"


class Completion(BaseModel):
    """Domain view of a single completion choice"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    content: Optional[str] = None
    tool_calls: List[ToolCallRequest] = Field(default_factory=list)
    message: AIMessage


class NavigatorResult(BaseModel):
    """Engine output: the normalized response plus the recall used to build it"""
    response: NavigatorResponse
    recalled: List[RecalledFragment] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload = self.response.model_dump(mode="json")
        # Steps echo only the keys the model supplied
        payload["plan"] = [step.model_dump(mode="json", exclude_none=True) for step in self.response.plan]
        payload["recalled_memory"] = [fragment.to_debug() for fragment in self.recalled]
        return payload
