import pytest

from navigator.domain.context.memory.vector_backend import InMemoryVectorBackend
from navigator.infrastructure.llm.embeddings import HashingEmbeddingService


@pytest.fixture
def embedder():
    return HashingEmbeddingService(dimensions=512)


@pytest.fixture
def backend():
    return InMemoryVectorBackend()
