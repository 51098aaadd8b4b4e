"""Text chunkers: recursive, fixed-window, and sentence-based."""

from src.ragkit.ingestion.chunkers.base import (
    CHARS_PER_TOKEN,
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    TextChunker,
    estimate_chars,
    estimate_tokens,
)
from src.ragkit.ingestion.chunkers.fixed import FixedChunker
from src.ragkit.ingestion.chunkers.recursive import RecursiveChunker
from src.ragkit.ingestion.chunkers.sentence import SentenceChunker, split_sentences

__all__ = [
    "CHARS_PER_TOKEN",
    "DEFAULT_CHUNK_OVERLAP",
    "DEFAULT_CHUNK_SIZE",
    "FixedChunker",
    "RecursiveChunker",
    "SentenceChunker",
    "TextChunker",
    "estimate_chars",
    "estimate_tokens",
    "split_sentences",
]
