from .memory_store import MemoryStore
from .vector_backend import InMemoryVectorBackend, VectorBackend

__all__ = ["MemoryStore", "InMemoryVectorBackend", "VectorBackend"]
