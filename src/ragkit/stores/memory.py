"""Dict-backed vector store for tests and small local workloads."""

from __future__ import annotations

from collections.abc import AsyncIterator

import structlog

from src.ragkit.filters import UniversalFilter, matches_filter
from src.ragkit.models import MetadataUpdate, VectorRecord
from src.ragkit.stores.base import VectorStore

logger = structlog.get_logger(__name__)


class InMemoryVectorStore(VectorStore):
    """Keeps records in insertion order per collection.

    Filters are evaluated in-process with matches_filter(). Iteration
    snapshots the matching records before the first batch is yielded, so
    metadata updates made while iterating never add or drop records from
    the running iteration.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, VectorRecord]] = {}
        self._dimensions: dict[str, int] = {}

    async def iterate(
        self,
        collection: str,
        *,
        filter: UniversalFilter | None = None,
        batch_size: int = 100,
    ) -> AsyncIterator[list[VectorRecord]]:
        records = self._collections.get(collection)
        if records is None:
            raise KeyError(f"Collection '{collection}' does not exist")

        matching = [
            record.model_copy(deep=True)
            for record in records.values()
            if matches_filter(filter, record.metadata)
        ]
        for start in range(0, len(matching), batch_size):
            yield matching[start : start + batch_size]

    async def update_metadata(
        self, collection: str, updates: list[MetadataUpdate]
    ) -> None:
        records = self._collections.get(collection)
        if records is None:
            raise KeyError(f"Collection '{collection}' does not exist")

        for update in updates:
            record = records.get(update.id)
            if record is None:
                logger.warning(
                    "metadata_update_unknown_record",
                    collection=collection,
                    record_id=update.id,
                )
                continue
            record.metadata.update(update.metadata)

    async def upsert(self, collection: str, records: list[VectorRecord]) -> None:
        target = self._collections.setdefault(collection, {})
        for record in records:
            target[record.id] = record.model_copy(deep=True)

    async def collection_exists(self, collection: str) -> bool:
        return collection in self._collections

    async def create_collection(self, collection: str, dimension: int) -> None:
        self._collections.setdefault(collection, {})
        self._dimensions[collection] = dimension

    def get(self, collection: str, record_id: str) -> VectorRecord | None:
        """Return a copy of a stored record, or None."""
        record = self._collections.get(collection, {}).get(record_id)
        return record.model_copy(deep=True) if record is not None else None

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))
