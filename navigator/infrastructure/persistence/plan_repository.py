import json
from typing import Optional

import structlog

from navigator.domain.context.plan_store import PlanStore
from navigator.domain.errors import StorageError
from navigator.domain.models import ProjectPlan
from .database import Database

logger = structlog.get_logger(__name__)


class PostgresPlanStore(PlanStore):
    """Project plans stored as JSONB rows"""

    def __init__(self, database: Database):
        self.database = database

    async def load_plan(self, project_id: str) -> Optional[ProjectPlan]:
        try:
            async with self.database.pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT project_id, title, steps FROM project_plans WHERE project_id = $1",
                    project_id
                )
        except Exception as e:
            logger.error("Failed to load plan", project_id=project_id, error=str(e))
            raise StorageError(f"Failed to load plan: {e}") from e

        if row is None:
            return None

        steps = row['steps']
        if isinstance(steps, str):
            steps = json.loads(steps)

        return ProjectPlan(project_id=row['project_id'], title=row['title'] or "", steps=steps or [])

    async def save_plan(self, plan: ProjectPlan) -> None:
        steps = json.dumps([step.model_dump(exclude_none=True) for step in plan.steps])
        try:
            async with self.database.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO project_plans (project_id, title, steps, updated_at)
                    VALUES ($1, $2, $3::jsonb, NOW())
                    ON CONFLICT (project_id)
                    DO UPDATE SET title = EXCLUDED.title, steps = EXCLUDED.steps, updated_at = NOW()
                """, plan.project_id, plan.title, steps)
        except Exception as e:
            logger.error("Failed to save plan", project_id=plan.project_id, error=str(e))
            raise StorageError(f"Failed to save plan: {e}") from e
