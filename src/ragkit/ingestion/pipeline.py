"""Ingestion pipeline: chunk, embed, and upsert already-loaded documents.

Orchestrates the flow per document:

    TextChunker.chunk() -> Embedder.embed_batch() -> VectorStore.upsert()

Documents are processed one at a time. A failure in any stage fails that
document only; it is recorded with the stage it happened in and the next
document proceeds.

Every chunk record carries, in increasing precedence:

1. vertical auto-metadata (``__v_source``, ``__v_doc_type``,
   ``__v_doc_id``, ``__v_partition``)
2. the per-document metadata extractor's output
3. caller metadata from the config and the document itself
4. chunk position (``chunk_index``, ``total_chunks``, ``start_char``,
   ``end_char``)
"""

from __future__ import annotations

import posixpath
import time
import uuid
from collections.abc import Callable
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field

from src.ragkit.config import RagkitSettings
from src.ragkit.embeddings.base import Embedder
from src.ragkit.ingestion.chunkers.base import TextChunker
from src.ragkit.ingestion.chunkers.recursive import RecursiveChunker
from src.ragkit.metadata import VerticalFields
from src.ragkit.models import ChunkConfig, Document, TextChunk, VectorRecord
from src.ragkit.stores.base import VectorStore

logger = structlog.get_logger(__name__)

Stage = Literal["chunk", "embed", "upsert"]


# ── Result Models ───────────────────────────────────────────────────────────


class ProgressInfo(BaseModel):
    """Snapshot passed to the on_progress callback at each stage."""

    stage: Literal["chunking", "embedding", "upserting"]
    documents_processed: int
    total_documents: int
    chunks_processed: int
    total_chunks: int | None = None
    current_document: str | None = None


class IngestionFailure(BaseModel):
    """A document that failed, and the stage it failed in."""

    source: str
    stage: Stage
    error: str


class IngestionStats(BaseModel):
    """Result of an ingest() call.

    Attributes:
        documents_processed: Documents attempted.
        documents_succeeded: Documents fully upserted.
        documents_failed: Documents that failed at some stage.
        chunks_created: Chunks produced by the chunker.
        chunks_upserted: Chunk records accepted by the store.
        time_ms: Wall-clock duration of the call.
        errors: One entry per failed document.
    """

    documents_processed: int = 0
    documents_succeeded: int = 0
    documents_failed: int = 0
    chunks_created: int = 0
    chunks_upserted: int = 0
    time_ms: int = 0
    errors: list[IngestionFailure] = Field(default_factory=list)


class IngestionConfig(BaseModel):
    """Per-call ingestion settings.

    Attributes:
        chunk_size: Chunk size in tokens; defaults to settings.chunk_size.
        chunk_overlap: Overlap in tokens; defaults to settings.chunk_overlap.
        chunker: Overrides the pipeline's chunker for this call.
        metadata: Applied to every chunk of every document.
        metadata_extractor: Computes extra metadata per document.
        batch_size: Records per upsert call.
        on_progress: Called at the start of each stage of each document.
        on_chunks_created: Called with each document's chunks.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    chunk_size: int | None = Field(default=None, gt=0)
    chunk_overlap: int | None = Field(default=None, ge=0)
    chunker: TextChunker | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    metadata_extractor: Callable[[Document], dict[str, Any]] | None = None
    batch_size: int | None = Field(default=None, gt=0)
    on_progress: Callable[[ProgressInfo], None] | None = None
    on_chunks_created: Callable[[list[TextChunk]], None] | None = None


def chunk_record_id(source: str, index: int) -> str:
    """Deterministic record id, so re-ingesting a document overwrites it."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{source}:{index}"))


# ── Ingestion Pipeline ──────────────────────────────────────────────────────


class IngestionPipeline:
    """Chunks, embeds, and stores documents in a vector store collection.

    Args:
        store: Vector store receiving the chunk records.
        embedder: Embedding collaborator for chunk vectors.
        chunker: Default chunker. RecursiveChunker when omitted.
        settings: Supplies default chunk sizing and upsert batch size.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder,
        chunker: TextChunker | None = None,
        settings: RagkitSettings | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._chunker = chunker or RecursiveChunker()
        self._settings = settings or RagkitSettings()

    async def ingest(
        self,
        documents: Document | list[Document],
        collection: str,
        config: IngestionConfig | None = None,
    ) -> IngestionStats:
        """Ingest documents into a collection, creating it when missing.

        Args:
            documents: One document or a list of documents.
            collection: Target collection.
            config: Optional per-call settings.

        Returns:
            IngestionStats covering every document attempted.
        """
        docs = [documents] if isinstance(documents, Document) else list(documents)
        config = config or IngestionConfig()
        stats = IngestionStats()
        start = time.monotonic()

        if docs and not await self._store.collection_exists(collection):
            await self._store.create_collection(collection, self._embedder.dimensions)

        for doc in docs:
            stage: Stage = "chunk"
            try:
                chunks = self._chunk(doc, config, stats, len(docs))
                if chunks:
                    stage = "embed"
                    records = await self._embed(doc, chunks, config, stats, len(docs))
                    stage = "upsert"
                    await self._upsert(collection, doc, records, config, stats, len(docs))
                stats.documents_succeeded += 1
            except Exception as exc:
                logger.error(
                    "document_ingestion_failed", source=doc.source, stage=stage, error=str(exc)
                )
                stats.documents_failed += 1
                stats.errors.append(
                    IngestionFailure(source=doc.source, stage=stage, error=str(exc))
                )
            stats.documents_processed += 1

        stats.time_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "ingestion_complete",
            collection=collection,
            documents=stats.documents_processed,
            failed=stats.documents_failed,
            chunks=stats.chunks_upserted,
            time_ms=stats.time_ms,
        )
        return stats

    def _chunk(
        self,
        doc: Document,
        config: IngestionConfig,
        stats: IngestionStats,
        total_documents: int,
    ) -> list[TextChunk]:
        self._report(config, "chunking", stats, total_documents, doc.source)
        chunker = config.chunker or self._chunker
        overlap = (
            config.chunk_overlap
            if config.chunk_overlap is not None
            else self._settings.chunk_overlap
        )
        chunks = chunker.chunk(
            doc.text,
            ChunkConfig(
                chunk_size=config.chunk_size or self._settings.chunk_size,
                chunk_overlap=overlap,
            ),
        )
        for chunk in chunks:
            chunk.metadata.source = doc.source

        stats.chunks_created += len(chunks)
        if config.on_chunks_created is not None:
            config.on_chunks_created(chunks)
        return chunks

    async def _embed(
        self,
        doc: Document,
        chunks: list[TextChunk],
        config: IngestionConfig,
        stats: IngestionStats,
        total_documents: int,
    ) -> list[VectorRecord]:
        self._report(config, "embedding", stats, total_documents, doc.source)
        embeddings = await self._embedder.embed_batch([chunk.text for chunk in chunks])
        if len(embeddings) != len(chunks):
            raise ValueError(
                f"Embedder returned {len(embeddings)} vectors for {len(chunks)} chunks"
            )

        return [
            VectorRecord(
                id=chunk_record_id(doc.source, chunk.index),
                embedding=embedding,
                text=chunk.text,
                metadata=self._build_metadata(doc, chunk, config),
            )
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]

    async def _upsert(
        self,
        collection: str,
        doc: Document,
        records: list[VectorRecord],
        config: IngestionConfig,
        stats: IngestionStats,
        total_documents: int,
    ) -> None:
        self._report(config, "upserting", stats, total_documents, doc.source)
        batch_size = config.batch_size or self._settings.ingestion_batch_size
        for i in range(0, len(records), batch_size):
            batch = records[i : i + batch_size]
            await self._store.upsert(collection, batch)
            stats.chunks_upserted += len(batch)

        logger.debug("document_ingested", source=doc.source, chunks=len(records))

    @staticmethod
    def _build_metadata(
        doc: Document, chunk: TextChunk, config: IngestionConfig
    ) -> dict[str, Any]:
        basename = posixpath.basename(doc.source)
        doc_id, _ = posixpath.splitext(basename)

        metadata: dict[str, Any] = {
            VerticalFields.SOURCE: doc.source,
            VerticalFields.DOC_TYPE: doc.type,
            VerticalFields.DOC_ID: doc_id,
            VerticalFields.PARTITION: posixpath.dirname(doc.source) or ".",
        }
        if config.metadata_extractor is not None:
            metadata.update(config.metadata_extractor(doc))
        metadata.update(config.metadata)
        metadata.update(doc.metadata)
        metadata.update(chunk.metadata.model_dump(exclude={"source"}))
        return metadata

    @staticmethod
    def _report(
        config: IngestionConfig,
        stage: Literal["chunking", "embedding", "upserting"],
        stats: IngestionStats,
        total_documents: int,
        source: str,
    ) -> None:
        if config.on_progress is None:
            return
        config.on_progress(
            ProgressInfo(
                stage=stage,
                documents_processed=stats.documents_processed,
                total_documents=total_documents,
                chunks_processed=stats.chunks_upserted,
                total_chunks=stats.chunks_created if stage != "chunking" else None,
                current_document=source,
            )
        )
