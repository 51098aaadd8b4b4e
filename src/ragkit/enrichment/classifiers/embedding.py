"""Embedding-similarity theme classification.

Theme labels are embedded once, lazily on first use, and cached on the
instance. Each text is embedded and compared to every theme vector by
cosine similarity; similarity in [-1, 1] maps linearly to confidence in
[0, 1] via (similarity + 1) / 2.

The theme-embedding cache is filled on first use without locking. An
instance shared by concurrently running pipelines must be warmed first,
either by passing ``theme_embeddings`` or by awaiting
``ensure_theme_embeddings()`` before the concurrent work starts.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import structlog

from src.ragkit.embeddings.base import Embedder
from src.ragkit.enrichment.classifiers.base import (
    ThemeClassification,
    ThemeClassifier,
    uniform_classification,
)

logger = structlog.get_logger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise ValueError(f"Vectors must have same length (got {len(a)} and {len(b)})")

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


class EmbeddingThemeClassifier(ThemeClassifier):
    """Classifier that picks the theme whose label embedding is nearest.

    Args:
        themes: Candidate themes; earlier themes win similarity ties.
        embedder: Embedding collaborator.
        theme_embeddings: Pre-computed label vectors keyed by theme. When
            given, the embedder is never asked to embed theme labels.
    """

    def __init__(
        self,
        themes: list[str],
        embedder: Embedder,
        theme_embeddings: dict[str, list[float]] | None = None,
    ) -> None:
        super().__init__(themes)
        self._embedder = embedder
        self._theme_embeddings: dict[str, list[float]] | None = (
            dict(theme_embeddings) if theme_embeddings is not None else None
        )

    async def ensure_theme_embeddings(self) -> dict[str, list[float]]:
        """Compute and cache theme label embeddings on first call."""
        if self._theme_embeddings is None:
            vectors = await self._embedder.embed_batch(self._themes)
            self._theme_embeddings = dict(zip(self._themes, vectors, strict=True))
            logger.debug("theme_embeddings_computed", themes=len(self._themes))
        return self._theme_embeddings

    async def classify(self, text: str) -> ThemeClassification:
        if not text or not text.strip():
            return uniform_classification(self._themes)

        theme_embeddings = await self.ensure_theme_embeddings()
        text_embedding = await self._embedder.embed(text)

        similarities = {
            theme: cosine_similarity(text_embedding, theme_embeddings[theme])
            for theme in self._themes
        }
        return self._to_classification(similarities)

    async def classify_batch(self, texts: list[str]) -> list[ThemeClassification]:
        await self.ensure_theme_embeddings()
        return await super().classify_batch(texts)

    def _to_classification(self, similarities: dict[str, float]) -> ThemeClassification:
        winner = self._themes[0]
        best = similarities[winner]
        for theme in self._themes[1:]:
            if similarities[theme] > best:
                winner, best = theme, similarities[theme]

        return ThemeClassification(
            theme=winner,
            confidence=(best + 1) / 2,
            all_scores={theme: (sim + 1) / 2 for theme, sim in similarities.items()},
        )
