from abc import ABC, abstractmethod
from typing import Dict, List
import asyncio

import numpy as np

from navigator.domain.models import MemoryRecord, RecalledFragment


class VectorBackend(ABC):
    """Persistence backend for memory records with similarity search"""

    @abstractmethod
    async def insert(self, record: MemoryRecord) -> None:
        """Append one record"""
        pass

    @abstractmethod
    async def vector_search(
        self,
        embedding: List[float],
        project_id: str,
        k: int,
        threshold: float,
    ) -> List[RecalledFragment]:
        """Return up to ``k`` fragments with similarity >= ``threshold``,
        most similar first, ties broken toward the newest record."""
        pass


class InMemoryVectorBackend(VectorBackend):
    """Process-local vector store using cosine similarity"""

    def __init__(self):
        self.memories: Dict[str, List[MemoryRecord]] = {}
        self._lock = asyncio.Lock()

    async def insert(self, record: MemoryRecord) -> None:
        async with self._lock:
            self.memories.setdefault(record.project_id, []).append(record)

    async def vector_search(
        self,
        embedding: List[float],
        project_id: str,
        k: int,
        threshold: float,
    ) -> List[RecalledFragment]:
        async with self._lock:
            records = list(self.memories.get(project_id, []))

        if not records:
            return []

        query = np.asarray(embedding, dtype=float)
        scored = []
        # Insertion position doubles as recency for tie-breaking
        for position, record in enumerate(records):
            similarity = _cosine_similarity(query, np.asarray(record.embedding, dtype=float))
            if similarity >= threshold:
                scored.append((similarity, position, record))

        scored.sort(key=lambda item: (item[0], item[1]), reverse=True)

        return [
            RecalledFragment(content=record.content, similarity=similarity)
            for similarity, _, record in scored[:k]
        ]

    async def count(self, project_id: str) -> int:
        async with self._lock:
            return len(self.memories.get(project_id, []))


def _cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    if a.shape != b.shape:
        raise ValueError(f"Embedding dimension mismatch: {a.shape} vs {b.shape}")
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    # Negative similarity is reported as zero relevance
    return min(max(float(np.dot(a, b)) / norm, 0.0), 1.0)
