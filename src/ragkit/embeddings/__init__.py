"""Dense embedding providers."""

from src.ragkit.embeddings.base import Embedder
from src.ragkit.embeddings.openai_embedder import OpenAIEmbedder

__all__ = ["Embedder", "OpenAIEmbedder"]
