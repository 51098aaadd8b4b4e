"""Pydantic models shared by the ingestion, enrichment, and store layers.

These models are the contract between chunkers, the vector store
collaborator, and the enrichment pipeline:

- TextChunk / ChunkMetadata: chunker output with position bookkeeping
- ChunkConfig: per-call chunk sizing (token units, 1 token ~ 4 chars)
- Document: an already-loaded source document awaiting ingestion
- VectorRecord / MetadataUpdate: records read from and deltas written
  back to a vector store
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# ── Chunking ────────────────────────────────────────────────────────────────


class ChunkMetadata(BaseModel):
    """Position metadata attached to every chunk.

    Attributes:
        source: Originating document identifier. Chunkers leave this
            empty; the ingestion pipeline stamps it.
        chunk_index: Zero-based position of the chunk in its document.
        total_chunks: Number of chunks the document produced. Identical
            for all chunks of one document.
        start_char: Offset of the chunk start in the original text.
        end_char: Offset one past the chunk end in the original text.
    """

    source: str = ""
    chunk_index: int
    total_chunks: int
    start_char: int
    end_char: int


class TextChunk(BaseModel):
    """A bounded slice of a document's text plus position metadata."""

    text: str
    index: int
    metadata: ChunkMetadata


class ChunkConfig(BaseModel):
    """Chunk sizing in token-equivalent units.

    Unset values fall back to DEFAULT_CHUNK_SIZE / DEFAULT_CHUNK_OVERLAP.
    """

    chunk_size: int | None = Field(default=None, gt=0)
    chunk_overlap: int | None = Field(default=None, ge=0)


class Document(BaseModel):
    """A loaded document ready for chunking.

    Attributes:
        text: Full extracted text.
        source: Path or identifier of the original document.
        type: Document type label (e.g. "text", "markdown", "pdf").
        metadata: Extra metadata applied to every chunk of the document.
    """

    text: str
    source: str
    type: str = "text"
    metadata: dict[str, Any] = Field(default_factory=dict)


# ── Vector store records ────────────────────────────────────────────────────


class VectorRecord(BaseModel):
    """A record owned by the vector store collaborator.

    The enrichment pipeline only reads these (via iteration) and writes
    metadata deltas back; it never re-embeds or re-uploads vectors.
    """

    id: str
    embedding: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    text: str | None = None
    score: float | None = None


class MetadataUpdate(BaseModel):
    """A metadata delta to merge into an existing record."""

    id: str
    metadata: dict[str, Any]
