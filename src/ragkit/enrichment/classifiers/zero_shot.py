"""Zero-shot theme classification with a pretrained NLI model.

Uses a Hugging Face ``zero-shot-classification`` pipeline, which scores
each candidate label as an entailment hypothesis and returns labels
sorted by descending score. The model loads lazily on first use (a
heavy import and download) and is cached on the instance, with the same
warm-before-sharing constraint as the embedding classifier: call
``ensure_model()`` before sharing an instance across concurrent runs.

Inference is CPU/GPU bound, so it runs in a worker thread to keep the
event loop responsive.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import structlog

from src.ragkit.enrichment.classifiers.base import (
    ThemeClassification,
    ThemeClassifier,
    uniform_classification,
)

logger = structlog.get_logger(__name__)

DEFAULT_ZERO_SHOT_MODEL = "typeform/distilbert-base-uncased-mnli"


def _load_transformers_pipeline(model_name: str) -> Any:
    from transformers import pipeline

    return pipeline("zero-shot-classification", model=model_name)


class ZeroShotThemeClassifier(ThemeClassifier):
    """Classifier backed by a zero-shot NLI model.

    Args:
        themes: Candidate labels.
        model_name: Hugging Face model id.
        model_loader: Callable building the pipeline from a model name.
            Defaults to ``transformers.pipeline``; override to inject a
            pre-loaded or fake model.
    """

    def __init__(
        self,
        themes: list[str],
        model_name: str = DEFAULT_ZERO_SHOT_MODEL,
        model_loader: Callable[[str], Any] | None = None,
    ) -> None:
        super().__init__(themes)
        self._model_name = model_name
        self._model_loader = model_loader or _load_transformers_pipeline
        self._model: Any = None

    async def ensure_model(self) -> Any:
        """Load the model on first call and return the cached instance."""
        if self._model is None:
            logger.info("zero_shot_model_loading", model=self._model_name)
            self._model = await asyncio.to_thread(self._model_loader, self._model_name)
        return self._model

    async def classify(self, text: str) -> ThemeClassification:
        if not text or not text.strip():
            return uniform_classification(self._themes)

        model = await self.ensure_model()
        result = await asyncio.to_thread(model, text, self._themes)

        labels: list[str] = list(result["labels"])
        scores: list[float] = [float(score) for score in result["scores"]]
        return ThemeClassification(
            theme=labels[0],
            confidence=scores[0],
            all_scores=dict(zip(labels, scores, strict=True)),
        )

    async def classify_batch(self, texts: list[str]) -> list[ThemeClassification]:
        await self.ensure_model()
        return await super().classify_batch(texts)
