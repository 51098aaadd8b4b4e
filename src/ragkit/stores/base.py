"""Vector store adapter interface.

The enrichment pipeline depends only on iterate() and update_metadata();
ingestion additionally needs upsert() and the collection helpers. Adapters
receive filters already normalized by src.ragkit.filters.normalize_filter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from src.ragkit.filters import UniversalFilter
from src.ragkit.models import MetadataUpdate, VectorRecord


class VectorStore(ABC):
    """Abstract vector store collaborator.

    Implementations must yield every matching record exactly once per
    iteration and must merge (not replace) metadata on update.
    """

    @abstractmethod
    def iterate(
        self,
        collection: str,
        *,
        filter: UniversalFilter | None = None,
        batch_size: int = 100,
    ) -> AsyncIterator[list[VectorRecord]]:
        """Yield matching records in batches of at most batch_size."""
        ...

    @abstractmethod
    async def update_metadata(
        self, collection: str, updates: list[MetadataUpdate]
    ) -> None:
        """Merge each update's metadata into the record with the same id."""
        ...

    @abstractmethod
    async def upsert(self, collection: str, records: list[VectorRecord]) -> None:
        """Insert or overwrite records, vectors included."""
        ...

    @abstractmethod
    async def collection_exists(self, collection: str) -> bool:
        ...

    @abstractmethod
    async def create_collection(self, collection: str, dimension: int) -> None:
        """Create a collection for vectors of the given dimension."""
        ...
