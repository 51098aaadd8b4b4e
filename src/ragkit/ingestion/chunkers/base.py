"""Chunker interface, sizing defaults, and token/character estimators.

Chunk sizes are configured in tokens but every chunker works in
characters. The conversion is a fixed heuristic of 4 characters per
token for English text; it is deliberately not configurable so chunk
boundaries stay identical across deployments.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import NamedTuple

from src.ragkit.models import ChunkConfig, ChunkMetadata, TextChunk

DEFAULT_CHUNK_SIZE = 500
DEFAULT_CHUNK_OVERLAP = 50
CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate token count from character count (1 token ~ 4 chars)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_chars(tokens: int) -> int:
    """Estimate character count from token count."""
    return tokens * CHARS_PER_TOKEN


class Span(NamedTuple):
    """Chunk text with offsets into the original document."""

    text: str
    start: int
    end: int


class TextChunker(ABC):
    """Splits a text string into ordered, position-tagged chunks.

    Implementations are pure: the same text and config always produce
    the same chunks, and a chunker instance holds no per-call state.
    """

    @abstractmethod
    def chunk(self, text: str, config: ChunkConfig | None = None) -> list[TextChunk]:
        """Chunk text into smaller pieces.

        Args:
            text: Text to chunk.
            config: Optional chunk size / overlap in tokens.

        Returns:
            Chunks with sequential indices and character offsets.
        """
        ...

    @staticmethod
    def _budget(config: ChunkConfig | None) -> tuple[int, int]:
        """Resolve (max_chars, overlap_chars) from an optional config."""
        chunk_size = DEFAULT_CHUNK_SIZE
        chunk_overlap = DEFAULT_CHUNK_OVERLAP
        if config is not None:
            if config.chunk_size is not None:
                chunk_size = config.chunk_size
            if config.chunk_overlap is not None:
                chunk_overlap = config.chunk_overlap
        return estimate_chars(chunk_size), estimate_chars(chunk_overlap)

    @staticmethod
    def _to_chunks(spans: list[Span]) -> list[TextChunk]:
        """Number spans and stamp the shared total_chunks count."""
        total = len(spans)
        return [
            TextChunk(
                text=span.text,
                index=i,
                metadata=ChunkMetadata(
                    chunk_index=i,
                    total_chunks=total,
                    start_char=span.start,
                    end_char=span.end,
                ),
            )
            for i, span in enumerate(spans)
        ]
