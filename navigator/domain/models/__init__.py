from .navigator_state import (
    Completion,
    Guidance,
    MemoryRecord,
    Mode,
    NavigatorResponse,
    NavigatorResult,
    PlanStep,
    ProjectPlan,
    RecalledFragment,
    ToolCallRequest,
)

__all__ = [
    "Completion",
    "Guidance",
    "MemoryRecord",
    "Mode",
    "NavigatorResponse",
    "NavigatorResult",
    "PlanStep",
    "ProjectPlan",
    "RecalledFragment",
    "ToolCallRequest",
]
