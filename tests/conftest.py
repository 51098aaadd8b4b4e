"""Shared test fixtures.

Provides:
- Deterministic in-process embedder (no OpenAI calls)
- In-memory vector store seeded per test
- Settings isolated from the developer's .env file
"""

from __future__ import annotations

import pytest

from src.ragkit.config import RagkitSettings
from src.ragkit.embeddings.base import Embedder
from src.ragkit.models import VectorRecord
from src.ragkit.stores.memory import InMemoryVectorStore


class FakeEmbedder(Embedder):
    """Returns fixed vectors for known texts and a length-derived vector otherwise."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, dims: int = 3) -> None:
        self._vectors = vectors or {}
        self._dims = dims
        self.embed_calls: list[str] = []
        self.batch_calls: list[list[str]] = []

    @property
    def dimensions(self) -> int:
        return self._dims

    @property
    def model_name(self) -> str:
        return "fake-embedder"

    def _vector(self, text: str) -> list[float]:
        if text in self._vectors:
            return self._vectors[text]
        return [float(len(text) % 7 + 1)] + [1.0] * (self._dims - 1)

    async def embed(self, text: str) -> list[float]:
        self.embed_calls.append(text)
        return self._vector(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.batch_calls.append(list(texts))
        return [self._vector(text) for text in texts]


@pytest.fixture
def settings() -> RagkitSettings:
    """Default settings, ignoring any local .env file."""
    return RagkitSettings(_env_file=None)


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def make_records():
    """Factory building VectorRecords from (id, metadata, text) tuples."""

    def _make(*rows: tuple) -> list[VectorRecord]:
        records = []
        for row in rows:
            record_id, metadata = row[0], row[1]
            text = row[2] if len(row) > 2 else None
            records.append(
                VectorRecord(id=record_id, embedding=[0.1, 0.2, 0.3], metadata=metadata, text=text)
            )
        return records

    return _make


@pytest.fixture
def embedder_factory():
    """Builds a FakeEmbedder with fixed vectors for known texts."""
    return FakeEmbedder
