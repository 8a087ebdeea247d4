"""Wiring of the navigator object graph from settings."""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from navigator.config import Settings
from navigator.domain.context.context_manager import ContextManager
from navigator.domain.context.memory.memory_store import MemoryStore
from navigator.domain.context.memory.vector_backend import InMemoryVectorBackend, VectorBackend
from navigator.domain.context.plan_store import InMemoryPlanStore, PlanStore
from navigator.domain.orchestration.core.navigator_agent import NavigatorAgent
from navigator.domain.services import CompletionService, EmbeddingService
from navigator.domain.tool.builtin_tools import create_default_registry
from navigator.domain.tool.tool_executor import ToolExecutor
from navigator.domain.tool.tool_registry import ToolRegistry
from navigator.infrastructure.llm.completion import OpenAICompletionService
from navigator.infrastructure.llm.embeddings import OpenAIEmbeddingService
from navigator.infrastructure.persistence.database import Database
from navigator.infrastructure.persistence.pgvector_backend import PgVectorBackend
from navigator.infrastructure.persistence.plan_repository import PostgresPlanStore

logger = structlog.get_logger(__name__)


@dataclass
class Container:
    settings: Settings
    agent: NavigatorAgent
    tool_registry: ToolRegistry
    database: Optional[Database] = field(default=None)

    async def start(self) -> None:
        if self.database is not None:
            await self.database.initialize(
                min_connections=self.settings.db_min_connections,
                max_connections=self.settings.db_max_connections,
            )

    async def stop(self) -> None:
        if self.database is not None:
            await self.database.close()


def build_container(
    settings: Settings,
    completion_service: Optional[CompletionService] = None,
    embedder: Optional[EmbeddingService] = None,
    backend: Optional[VectorBackend] = None,
    plan_store: Optional[PlanStore] = None,
    tool_registry: Optional[ToolRegistry] = None,
) -> Container:
    """Build the agent; any collaborator can be injected, the rest come from settings"""

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set. Model features will fail until it is configured.")

    database = None
    if settings.database_url and (backend is None or plan_store is None):
        database = Database(settings.database_url, embedding_dimensions=settings.embedding_dimensions)

    if backend is None:
        backend = PgVectorBackend(database) if database else InMemoryVectorBackend()
    if plan_store is None:
        plan_store = PostgresPlanStore(database) if database else InMemoryPlanStore()

    embedder = embedder or OpenAIEmbeddingService(
        api_key=settings.openai_api_key,
        model=settings.openai_embedding_model,
        dimensions=settings.embedding_dimensions,
    )
    completion_service = completion_service or OpenAICompletionService(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.completion_timeout,
    )
    tool_registry = tool_registry or create_default_registry(ToolExecutor(timeout=settings.tool_timeout))

    memory_store = MemoryStore(
        embedder,
        backend,
        timeout=settings.storage_timeout,
        default_limit=settings.recall_limit,
        default_threshold=settings.recall_threshold,
    )
    context_manager = ContextManager(memory_store, plan_store, plan_timeout=settings.storage_timeout)
    agent = NavigatorAgent(
        context_manager,
        memory_store,
        completion_service,
        tool_registry,
        completion_timeout=settings.completion_timeout,
    )

    return Container(settings=settings, agent=agent, tool_registry=tool_registry, database=database)
