import asyncpg
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


SCHEMA_SQL = """
CREATE EXTENSION IF NOT EXISTS vector;

CREATE TABLE IF NOT EXISTS ai_memory (
    id UUID PRIMARY KEY,
    owner_id TEXT NOT NULL,
    project_id TEXT NOT NULL,
    content TEXT NOT NULL CHECK (length(content) > 0),
    embedding vector({dimensions}) NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS ai_memory_project_idx ON ai_memory (project_id, created_at DESC);

CREATE TABLE IF NOT EXISTS project_plans (
    project_id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    steps JSONB NOT NULL DEFAULT '[]'::jsonb,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


class Database:
    """Owns the asyncpg connection pool shared by the repositories"""

    def __init__(self, connection_string: str, embedding_dimensions: int = 1536):
        self.connection_string = connection_string
        self.embedding_dimensions = embedding_dimensions
        self._pool: Optional[asyncpg.Pool] = None
        self._max_connections = 0

    @property
    def pool(self) -> asyncpg.Pool:
        if not self._pool:
            raise RuntimeError("Database not initialized")
        return self._pool

    async def initialize(self, min_connections: int = 2, max_connections: int = 10, create_schema: bool = True):
        """Initialize connection pool"""
        try:
            self._pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=min_connections,
                max_size=max_connections
            )
            self._max_connections = max_connections
            if create_schema:
                async with self._pool.acquire() as conn:
                    await conn.execute(SCHEMA_SQL.format(dimensions=self.embedding_dimensions))
            logger.info("Database initialized with connection pool", max_connections=max_connections)
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            raise

    async def close(self):
        """Close connection pool"""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")

    async def health_check(self) -> Dict[str, Any]:
        """Check connectivity and report pool usage"""
        if not self._pool:
            return {"status": "not_initialized"}

        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")

            current_pool_size = self._pool.get_size()
            idle_connections = self._pool.get_idle_size()
            return {
                "status": "ok",
                "pool_status": {
                    "pool_size": self._max_connections,
                    "checked_in_connections": idle_connections,
                    "checked_out_connections": current_pool_size - idle_connections,
                    "total_connections": current_pool_size
                }
            }
        except Exception as e:
            logger.error("Health check failed", error=str(e))
            return {"status": "error", "error_message": str(e)}
