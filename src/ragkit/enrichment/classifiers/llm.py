"""LLM-backed theme classification.

The prompt names every candidate theme and asks for a JSON object with
``theme``, ``confidence`` and ``allScores``. Any failure along the way
(the LLM call itself, undecodable output, or JSON that does not fit the
result shape) raises ClassificationError with the original exception
chained as its cause and the raw output attached when there is one.
"""

from __future__ import annotations

import structlog
from pydantic import ValidationError

from src.ragkit.enrichment.classifiers.base import (
    ThemeClassification,
    ThemeClassifier,
    uniform_classification,
)
from src.ragkit.exceptions import ClassificationError, LLMDecodeError
from src.ragkit.llm.base import LLMClient

logger = structlog.get_logger(__name__)

DEFAULT_PROMPT_TEMPLATE = """You are a theme classification system. Classify the following text into one of the provided themes.

Available themes: {themes}

Text to classify:
{text}

Return a JSON object with the following structure:
- theme: the most appropriate theme from the list (string)
- confidence: confidence score between 0 and 1 (number)
- allScores: an object mapping each theme to its confidence score (object)

Return only valid JSON, no additional text."""


class LLMThemeClassifier(ThemeClassifier):
    """Classifier that delegates the decision to an LLM.

    Batches are classified strictly one text at a time to stay within
    provider rate limits.

    Args:
        themes: Candidate themes.
        llm: LLM collaborator with generate_json().
        prompt_template: Template with ``{themes}`` (comma-joined list)
            and ``{text}`` placeholders.
    """

    def __init__(
        self,
        themes: list[str],
        llm: LLMClient,
        prompt_template: str = DEFAULT_PROMPT_TEMPLATE,
    ) -> None:
        super().__init__(themes)
        self._llm = llm
        self._prompt_template = prompt_template

    def build_prompt(self, text: str) -> str:
        return self._prompt_template.replace("{themes}", ", ".join(self._themes)).replace(
            "{text}", text
        )

    async def classify(self, text: str) -> ThemeClassification:
        """Classify text via the LLM.

        Raises:
            ClassificationError: If the LLM call fails or its output does
                not decode into a ThemeClassification.
        """
        if not text or not text.strip():
            return uniform_classification(self._themes)

        prompt = self.build_prompt(text)

        try:
            payload = await self._llm.generate_json(prompt)
        except LLMDecodeError as exc:
            raise ClassificationError(
                f"Failed to classify text with LLM: {exc}", raw_output=exc.raw_output
            ) from exc
        except Exception as exc:
            raise ClassificationError(f"Failed to classify text with LLM: {exc}") from exc

        try:
            result = ThemeClassification.model_validate(payload)
        except ValidationError as exc:
            raise ClassificationError(
                "Failed to classify text with LLM: unexpected output shape "
                f"({exc.error_count()} errors)",
                raw_output=str(payload),
            ) from exc

        if result.all_scores is not None:
            result.all_scores = {
                theme: result.all_scores.get(theme, 0.0) for theme in self._themes
            }
        return result
