"""Vector store adapters."""

from src.ragkit.stores.base import VectorStore
from src.ragkit.stores.memory import InMemoryVectorStore
from src.ragkit.stores.qdrant import QdrantVectorStore, to_qdrant_filter

__all__ = [
    "InMemoryVectorStore",
    "QdrantVectorStore",
    "VectorStore",
    "to_qdrant_filter",
]
