from abc import ABC, abstractmethod
from typing import Dict, Optional
import asyncio

import structlog

from navigator.domain.models import PlanStep, ProjectPlan

logger = structlog.get_logger(__name__)


DEFAULT_PLAN_STEPS = [
    PlanStep(
        title="Define the goal",
        description="Describe what the robot must do and how you will know it works.",
        resources=["Project brief"],
    ),
    PlanStep(
        title="Choose hardware",
        description="Pick a controller, sensors, motors and a power source that fit the goal.",
        prerequisites=["Define the goal"],
    ),
    PlanStep(
        title="Build and wire",
        description="Assemble the chassis and wire each component, testing them one at a time.",
        prerequisites=["Choose hardware"],
    ),
    PlanStep(
        title="Program and simulate",
        description="Write the control logic and check it in the simulator before running on hardware.",
        prerequisites=["Build and wire"],
    ),
    PlanStep(
        title="Test and tune",
        description="Run the robot, record what goes wrong, and tune parameters such as PID gains.",
        prerequisites=["Program and simulate"],
    ),
]


def default_plan(project_id: str) -> ProjectPlan:
    return ProjectPlan(
        project_id=project_id,
        title="Starter robotics project plan",
        steps=[step.model_copy(deep=True) for step in DEFAULT_PLAN_STEPS],
    )


class PlanStore(ABC):
    """Source of stored project plans"""

    @abstractmethod
    async def load_plan(self, project_id: str) -> Optional[ProjectPlan]:
        """Return the stored plan, or None if the project has none"""
        pass


class InMemoryPlanStore(PlanStore):
    """Process-local plan store"""

    def __init__(self, plans: Optional[Dict[str, ProjectPlan]] = None):
        self.plans: Dict[str, ProjectPlan] = dict(plans or {})
        self._lock = asyncio.Lock()

    async def save_plan(self, plan: ProjectPlan) -> None:
        async with self._lock:
            self.plans[plan.project_id] = plan

    async def load_plan(self, project_id: str) -> Optional[ProjectPlan]:
        async with self._lock:
            return self.plans.get(project_id)


async def load_plan_or_default(store: Optional[PlanStore], project_id: str, timeout: float = 10.0) -> ProjectPlan:
    """Load a plan, falling back to the default plan on absence or failure"""

    if store is None:
        return default_plan(project_id)

    try:
        plan = await asyncio.wait_for(store.load_plan(project_id), timeout=timeout)
    except Exception as e:
        logger.warning("plan_load_failed", project_id=project_id, error=str(e))
        return default_plan(project_id)

    return plan or default_plan(project_id)
