import hashlib
import math
import re
from typing import List, Optional

import structlog
from langchain_openai import OpenAIEmbeddings

from navigator.domain.errors import StorageError
from navigator.domain.services import EmbeddingService

logger = structlog.get_logger(__name__)


class OpenAIEmbeddingService(EmbeddingService):
    """Embeddings from an OpenAI embedding model, client built on first use"""

    def __init__(self, api_key: str, model: str = "text-embedding-3-small", dimensions: Optional[int] = None):
        self.api_key = api_key
        self.model = model
        self.dimensions = dimensions
        self._client: Optional[OpenAIEmbeddings] = None

    def _embeddings(self) -> OpenAIEmbeddings:
        if not self.api_key:
            raise StorageError("OPENAI_API_KEY is not configured")
        if self._client is None:
            self._client = OpenAIEmbeddings(
                model=self.model,
                api_key=self.api_key,
                dimensions=self.dimensions,
                max_retries=0,
            )
        return self._client

    async def embed(self, text: str) -> List[float]:
        client = self._embeddings()
        try:
            return await client.aembed_query(text)
        except Exception as e:
            logger.error("Embedding generation failed", model=self.model, error=str(e))
            raise StorageError(f"Embedding generation failed: {e}") from e


class HashingEmbeddingService(EmbeddingService):
    """Deterministic bag-of-words embedding for local runs and tests.

    Identical text always maps to the identical unit vector.
    """

    _token = re.compile(r"\w+")

    def __init__(self, dimensions: int = 384):
        self.dimensions = dimensions

    async def embed(self, text: str) -> List[float]:
        vector = [0.0] * self.dimensions
        for token in self._token.findall(text.lower()):
            digest = hashlib.md5(token.encode("utf-8")).digest()
            index = int.from_bytes(digest[:4], "big") % self.dimensions
            vector[index] += 1.0 if digest[4] % 2 == 0 else -1.0

        norm = math.sqrt(sum(value * value for value in vector))
        if norm == 0.0:
            return vector
        return [value / norm for value in vector]
