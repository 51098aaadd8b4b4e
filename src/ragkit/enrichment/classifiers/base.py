"""Theme classification result model and classifier interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.ragkit.exceptions import ConfigurationError


class ThemeClassification(BaseModel):
    """Winning theme, its confidence, and optionally every theme's score.

    Confidence is clamped into [0, 1] on construction, so out-of-range
    values from a model collaborator never reach the store. ``all_scores``
    holds one entry per candidate theme when present; its scale depends
    on the classifier (keyword match counts, similarities, probabilities).

    Accepts ``allScores`` as an alias so LLM JSON output validates directly.
    """

    model_config = ConfigDict(populate_by_name=True)

    theme: str
    confidence: float
    all_scores: dict[str, float] | None = Field(default=None, alias="allScores")

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return min(max(value, 0.0), 1.0)


def uniform_classification(themes: list[str]) -> ThemeClassification:
    """Uniform 1/N distribution with the first theme as the winner."""
    score = 1.0 / len(themes)
    return ThemeClassification(
        theme=themes[0],
        confidence=score,
        all_scores={theme: score for theme in themes},
    )


class ThemeClassifier(ABC):
    """Maps text to a ThemeClassification over a fixed, ordered theme list.

    Args:
        themes: Candidate themes in priority order. Order breaks ties and
            picks the winner of uniform distributions.

    Raises:
        ConfigurationError: If themes is empty.
    """

    def __init__(self, themes: list[str]) -> None:
        if not themes:
            raise ConfigurationError("At least one theme is required")
        self._themes = list(themes)

    @property
    def themes(self) -> list[str]:
        return list(self._themes)

    @abstractmethod
    async def classify(self, text: str) -> ThemeClassification:
        ...

    async def classify_batch(self, texts: list[str]) -> list[ThemeClassification]:
        """Classify texts one at a time, preserving input order."""
        results: list[ThemeClassification] = []
        for text in texts:
            results.append(await self.classify(text))
        return results
