"""Keyword-count theme classification.

Each keyword compiles to a word-boundary anchored pattern, so "bank"
matches "the bank" but not "embankment". A theme's score is the total
number of keyword hits in the text. Confidence is the winning score
relative to how many keywords the winning theme has, capped at 1.0:
two hits against a four-keyword theme yield 0.5.
"""

from __future__ import annotations

import re

from src.ragkit.enrichment.classifiers.base import ThemeClassification, ThemeClassifier

UNKNOWN_THEME = "unknown"


class KeywordThemeClassifier(ThemeClassifier):
    """Fast, deterministic classifier with no collaborators.

    Args:
        themes: Candidate themes; earlier themes win ties.
        keywords: Keyword lists per theme. Themes without an entry
            never score.
        case_sensitive: Match keywords case-sensitively.

    Usage:
        classifier = KeywordThemeClassifier(
            ["billing", "support"],
            {"billing": ["invoice", "refund"], "support": ["ticket", "outage"]},
        )
        result = await classifier.classify("Please refund my last invoice")
    """

    def __init__(
        self,
        themes: list[str],
        keywords: dict[str, list[str]],
        case_sensitive: bool = False,
    ) -> None:
        super().__init__(themes)
        flags = 0 if case_sensitive else re.IGNORECASE
        self._patterns: dict[str, list[re.Pattern[str]]] = {}
        self._keyword_counts: dict[str, int] = {}

        for theme in self._themes:
            theme_keywords = keywords.get(theme, [])
            self._keyword_counts[theme] = len(theme_keywords)
            self._patterns[theme] = [
                re.compile(rf"\b{re.escape(keyword)}\b", flags) for keyword in theme_keywords
            ]

    async def classify(self, text: str) -> ThemeClassification:
        return self.classify_sync(text)

    def classify_sync(self, text: str) -> ThemeClassification:
        """Classify without awaiting; the keyword strategy does no I/O."""
        if not text or not text.strip():
            return ThemeClassification(theme=UNKNOWN_THEME, confidence=0.0, all_scores={})

        scores: dict[str, float] = {}
        best_score = 0
        winner = UNKNOWN_THEME

        for theme in self._themes:
            count = sum(len(pattern.findall(text)) for pattern in self._patterns[theme])
            scores[theme] = count
            if count > best_score:
                best_score = count
                winner = theme

        if best_score == 0:
            return ThemeClassification(theme=UNKNOWN_THEME, confidence=0.0, all_scores=scores)

        confidence = min(best_score / self._keyword_counts[winner], 1.0)
        return ThemeClassification(theme=winner, confidence=confidence, all_scores=scores)
