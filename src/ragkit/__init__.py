"""Chunking and metadata enrichment toolkit for vector-store RAG pipelines.

Splits documents into position-tagged chunks, ingests them into a
vector store, and enriches stored records with vertical labels, themes,
and section structure. Vector stores, embedders, and LLMs are external
collaborators behind small interfaces.
"""

from src.ragkit.config import RagkitSettings
from src.ragkit.exceptions import (
    ClassificationError,
    ConfigurationError,
    ExtractionError,
    FilterError,
    LLMDecodeError,
    RagkitError,
    StoreWriteError,
)
from src.ragkit.models import ChunkConfig, Document, MetadataUpdate, TextChunk, VectorRecord

__all__ = [
    "ChunkConfig",
    "ClassificationError",
    "ConfigurationError",
    "Document",
    "ExtractionError",
    "FilterError",
    "LLMDecodeError",
    "MetadataUpdate",
    "RagkitError",
    "RagkitSettings",
    "StoreWriteError",
    "TextChunk",
    "VectorRecord",
]
