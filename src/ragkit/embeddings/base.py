"""Embedder interface consumed by ingestion and the embedding classifier."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Embedder(ABC):
    """Produces dense vectors for text."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts, preserving input order."""
        ...
