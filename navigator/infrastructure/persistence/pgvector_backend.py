from typing import List
import time

import structlog

from navigator.domain.context.memory.vector_backend import VectorBackend
from navigator.domain.errors import StorageError
from navigator.domain.models import MemoryRecord, RecalledFragment
from navigator.infrastructure.observability.logging import metrics
from .database import Database

logger = structlog.get_logger(__name__)


def to_vector_literal(embedding: List[float]) -> str:
    return '[' + ','.join(map(str, embedding)) + ']'


class PgVectorBackend(VectorBackend):
    """Memory records in PostgreSQL with pgvector cosine search"""

    def __init__(self, database: Database):
        self.database = database

    async def insert(self, record: MemoryRecord) -> None:
        """Append a memory record"""
        start_time = time.monotonic()
        try:
            async with self.database.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO ai_memory
                    (id, owner_id, project_id, content, embedding, created_at)
                    VALUES ($1, $2, $3, $4, $5::vector, $6)
                """,
                record.id,
                record.owner_id,
                record.project_id,
                record.content,
                to_vector_literal(record.embedding),
                record.created_at
                )

                logger.debug("Stored memory", record_id=str(record.id), project_id=record.project_id)

        except Exception as e:
            logger.error("Failed to store memory", project_id=record.project_id, error=str(e))
            raise StorageError(f"Failed to store memory: {e}") from e
        finally:
            metrics.record_latency("pgvector.insert", (time.monotonic() - start_time) * 1000)

    async def vector_search(
        self,
        embedding: List[float],
        project_id: str,
        k: int,
        threshold: float,
    ) -> List[RecalledFragment]:
        """Search project memories by cosine similarity"""
        start_time = time.monotonic()
        try:
            async with self.database.pool.acquire() as conn:
                rows = await conn.fetch("""
                    SELECT content, 1 - (embedding <=> $1::vector) AS similarity
                    FROM ai_memory
                    WHERE project_id = $2
                    AND 1 - (embedding <=> $1::vector) >= $3
                    ORDER BY similarity DESC, created_at DESC
                    LIMIT $4
                """, to_vector_literal(embedding), project_id, threshold, k)

                fragments = [
                    RecalledFragment(
                        content=row['content'],
                        similarity=min(max(float(row['similarity']), 0.0), 1.0)
                    )
                    for row in rows
                ]

                logger.debug("Found similar memories", project_id=project_id, count=len(fragments))
                return fragments

        except Exception as e:
            logger.error("Failed to search memories", project_id=project_id, error=str(e))
            raise StorageError(f"Failed to search memories: {e}") from e
        finally:
            metrics.record_latency("pgvector.search", (time.monotonic() - start_time) * 1000)
