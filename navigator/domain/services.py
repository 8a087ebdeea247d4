from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.messages import BaseMessage

from navigator.domain.models import Completion


class EmbeddingService(ABC):
    """Maps text to a fixed-length vector"""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Return the embedding for ``text``"""
        pass


class CompletionService(ABC):
    """Chat completion with optional tool binding"""

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[BaseMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[str] = None,
    ) -> Completion:
        """Return exactly one completion choice. Raises ModelError on failure."""
        pass
