from typing import List
import asyncio
import time

import structlog

from navigator.domain.errors import StorageError
from navigator.domain.models import MemoryRecord, RecalledFragment
from navigator.domain.services import EmbeddingService
from navigator.infrastructure.observability.logging import metrics, navigator_logger
from .vector_backend import VectorBackend

logger = structlog.get_logger(__name__)


class MemoryStore:
    """Append-only semantic memory scoped to projects"""

    def __init__(
        self,
        embedder: EmbeddingService,
        backend: VectorBackend,
        timeout: float = 10.0,
        default_limit: int = 8,
        default_threshold: float = 0.2,
    ):
        self.embedder = embedder
        self.backend = backend
        self.timeout = timeout
        self.default_limit = default_limit
        self.default_threshold = default_threshold

    async def save(self, owner_id: str, project_id: str, text: str) -> MemoryRecord:
        """Embed and persist one fragment.

        The embedding is computed before anything is written, so an embedding
        failure leaves no partial record behind.

        Raises:
            StorageError: if the text is empty, embedding fails, or the backend
                rejects the write.
        """
        if not text or not text.strip():
            raise StorageError("Cannot store empty memory content")

        embedding = await self._embed(text)
        record = MemoryRecord(
            owner_id=owner_id,
            project_id=project_id,
            content=text,
            embedding=embedding,
        )

        start = time.monotonic()
        try:
            await asyncio.wait_for(self.backend.insert(record), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise StorageError("Memory write timed out", {"project_id": project_id}) from e
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Memory write rejected: {e}", {"project_id": project_id}) from e
        finally:
            metrics.record_latency("memory.insert", (time.monotonic() - start) * 1000)

        navigator_logger.log_memory_event(
            project_id,
            "save",
            {"owner_id": owner_id, "record_id": str(record.id), "length": len(text)},
        )
        return record

    async def recall(
        self,
        project_id: str,
        query_text: str,
        k: int = None,
        similarity_threshold: float = None,
    ) -> List[RecalledFragment]:
        """Similarity-ranked recall. Never raises; failures yield an empty list."""

        k = k if k is not None else self.default_limit
        threshold = similarity_threshold if similarity_threshold is not None else self.default_threshold

        start = time.monotonic()
        try:
            embedding = await self._embed(query_text)
            fragments = await asyncio.wait_for(
                self.backend.vector_search(embedding, project_id, k, threshold),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning("memory_recall_failed", project_id=project_id, error=str(e))
            metrics.increment_counter("memory.recall_failures")
            return []
        finally:
            metrics.record_latency("memory.recall", (time.monotonic() - start) * 1000)

        navigator_logger.log_memory_event(project_id, "recall", {"hits": len(fragments)})
        return fragments

    async def _embed(self, text: str) -> List[float]:
        try:
            return await asyncio.wait_for(self.embedder.embed(text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise StorageError("Embedding timed out") from e
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Embedding failed: {e}") from e
