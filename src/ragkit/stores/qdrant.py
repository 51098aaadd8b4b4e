"""Qdrant-backed vector store adapter.

Records map onto Qdrant points: the record id is the point id, the
embedding is the (single, unnamed) dense vector, and metadata is the
payload. The record's primary text is also kept in the payload under
``text_key`` so enrichment can read it from either place.

Universal filters are translated into Qdrant Filter objects:

- eq / in / range operators -> FieldCondition with MatchValue, MatchAny, Range
- neq / nin -> the positive condition under must_not (missing fields match)
- contains -> MatchText for strings, MatchValue for array elements
- exists -> IsEmptyCondition under must_not (or must, for exists=false)
- and / or -> nested Filter(must=...) / Filter(should=...)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import structlog
from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    IsEmptyCondition,
    MatchAny,
    MatchText,
    MatchValue,
    PayloadField,
    PointStruct,
    Range,
    SetPayload,
    SetPayloadOperation,
    VectorParams,
)

from src.ragkit.config import RagkitSettings
from src.ragkit.exceptions import FilterError
from src.ragkit.filters import AndFilter, FilterCondition, OrFilter, UniversalFilter
from src.ragkit.models import MetadataUpdate, VectorRecord
from src.ragkit.stores.base import VectorStore

logger = structlog.get_logger(__name__)

_RANGE_OPS = {"gt", "gte", "lt", "lte"}


class QdrantVectorStore(VectorStore):
    """Vector store backed by a Qdrant collection.

    Args:
        settings: Connection settings. Remote when qdrant_url is set,
            local (path or ":memory:") otherwise.
        client: Pre-built client; overrides settings-based construction.
    """

    def __init__(
        self,
        settings: RagkitSettings | None = None,
        client: QdrantClient | None = None,
    ) -> None:
        self._settings = settings or RagkitSettings()
        self._text_key = self._settings.qdrant_text_key

        if client is not None:
            self._client = client
        elif self._settings.qdrant_url:
            self._client = QdrantClient(
                url=self._settings.qdrant_url,
                api_key=self._settings.qdrant_api_key,
            )
        elif self._settings.qdrant_path == ":memory:":
            self._client = QdrantClient(location=":memory:")
        else:
            self._client = QdrantClient(path=self._settings.qdrant_path)

    @property
    def client(self) -> QdrantClient:
        """Expose the underlying Qdrant client for advanced operations."""
        return self._client

    async def iterate(
        self,
        collection: str,
        *,
        filter: UniversalFilter | None = None,
        batch_size: int = 100,
    ) -> AsyncIterator[list[VectorRecord]]:
        """Scroll through matching points without fetching vectors."""
        scroll_filter = to_qdrant_filter(filter) if filter is not None else None
        offset: Any = None

        while True:
            points, offset = self._client.scroll(
                collection_name=collection,
                scroll_filter=scroll_filter,
                limit=batch_size,
                offset=offset,
                with_payload=True,
                with_vectors=False,
            )
            if points:
                yield [self._to_record(point) for point in points]
            if offset is None:
                break

    async def update_metadata(
        self, collection: str, updates: list[MetadataUpdate]
    ) -> None:
        """Merge payloads for a batch of points in one request."""
        if not updates:
            return

        operations = [
            SetPayloadOperation(
                set_payload=SetPayload(payload=update.metadata, points=[update.id])
            )
            for update in updates
        ]
        self._client.batch_update_points(
            collection_name=collection,
            update_operations=operations,
        )
        logger.debug("qdrant_payload_updated", collection=collection, count=len(updates))

    async def upsert(self, collection: str, records: list[VectorRecord]) -> None:
        points: list[PointStruct] = []
        for record in records:
            payload: dict[str, Any] = dict(record.metadata)
            if record.text is not None:
                payload[self._text_key] = record.text
            points.append(
                PointStruct(id=record.id, vector=record.embedding, payload=payload)
            )

        self._client.upsert(collection_name=collection, points=points)
        logger.info("qdrant_points_upserted", collection=collection, count=len(points))

    async def collection_exists(self, collection: str) -> bool:
        return self._client.collection_exists(collection)

    async def create_collection(self, collection: str, dimension: int) -> None:
        if self._client.collection_exists(collection):
            logger.info("qdrant_collection_exists", collection=collection)
            return

        self._client.create_collection(
            collection_name=collection,
            vectors_config=VectorParams(size=dimension, distance=Distance.COSINE),
        )
        logger.info("qdrant_collection_created", collection=collection, dimension=dimension)

    def close(self) -> None:
        """Close the Qdrant client connection."""
        self._client.close()

    def _to_record(self, point: Any) -> VectorRecord:
        payload = dict(point.payload or {})
        text = payload.get(self._text_key)
        return VectorRecord(
            id=str(point.id),
            metadata=payload,
            text=text if isinstance(text, str) else None,
        )


# ── Filter translation ──────────────────────────────────────────────────────


def to_qdrant_filter(filter_: UniversalFilter) -> Filter:
    """Translate a normalized universal filter into a Qdrant Filter.

    Raises:
        FilterError: If a condition uses an operator Qdrant cannot express.
    """
    if isinstance(filter_, AndFilter):
        return Filter(must=[to_qdrant_filter(child) for child in filter_.and_])
    if isinstance(filter_, OrFilter):
        return Filter(should=[to_qdrant_filter(child) for child in filter_.or_])
    return _condition_filter(filter_)


def _condition_filter(condition: FilterCondition) -> Filter:
    key, op, value = condition.field, condition.op, condition.value

    if op == "eq":
        return Filter(must=[_equals(key, value)])
    if op == "neq":
        return Filter(must_not=[_equals(key, value)])
    if op == "in":
        return Filter(must=[FieldCondition(key=key, match=MatchAny(any=list(value)))])
    if op == "nin":
        return Filter(must_not=[FieldCondition(key=key, match=MatchAny(any=list(value)))])
    if op in _RANGE_OPS:
        return Filter(must=[FieldCondition(key=key, range=Range(**{op: value}))])
    if op == "contains":
        if isinstance(value, str):
            return Filter(must=[FieldCondition(key=key, match=MatchText(text=value))])
        return Filter(must=[_equals(key, value)])
    if op == "exists":
        empty = IsEmptyCondition(is_empty=PayloadField(key=key))
        if value is None or bool(value):
            return Filter(must_not=[empty])
        return Filter(must=[empty])

    raise FilterError(f"Invalid filter operator: {op}")


def _equals(key: str, value: Any) -> FieldCondition:
    # MatchValue only accepts str/int/bool; floats go through a closed range
    if isinstance(value, float):
        return FieldCondition(key=key, range=Range(gte=value, lte=value))
    return FieldCondition(key=key, match=MatchValue(value=value))
