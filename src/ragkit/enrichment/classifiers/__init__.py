"""Theme classifiers."""

from src.ragkit.enrichment.classifiers.base import (
    ThemeClassification,
    ThemeClassifier,
    uniform_classification,
)
from src.ragkit.enrichment.classifiers.embedding import (
    EmbeddingThemeClassifier,
    cosine_similarity,
)
from src.ragkit.enrichment.classifiers.keyword import UNKNOWN_THEME, KeywordThemeClassifier
from src.ragkit.enrichment.classifiers.llm import DEFAULT_PROMPT_TEMPLATE, LLMThemeClassifier
from src.ragkit.enrichment.classifiers.zero_shot import (
    DEFAULT_ZERO_SHOT_MODEL,
    ZeroShotThemeClassifier,
)

__all__ = [
    "DEFAULT_PROMPT_TEMPLATE",
    "DEFAULT_ZERO_SHOT_MODEL",
    "UNKNOWN_THEME",
    "EmbeddingThemeClassifier",
    "KeywordThemeClassifier",
    "LLMThemeClassifier",
    "ThemeClassification",
    "ThemeClassifier",
    "ZeroShotThemeClassifier",
    "cosine_similarity",
    "uniform_classification",
]
