"""Sentence-boundary chunking.

Sentences are runs of text ending in ``.``, ``!`` or ``?`` followed by
whitespace or end of text; a trailing run without a terminator counts as
a final sentence. Punctuation not followed by whitespace, as in "1.5" or
"example.com", stays inside its sentence. Sentences are packed greedily,
joined by a single space, and a sentence is never split across chunks
even when it alone exceeds the budget.

Overlap carries the previous chunk's last sentence forward when that
sentence fits within the overlap budget; otherwise no overlap is added.
"""

from __future__ import annotations

import re

from src.ragkit.ingestion.chunkers.base import Span, TextChunker
from src.ragkit.models import ChunkConfig, TextChunk

_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[str]:
    """Split text into trimmed, non-empty sentences."""
    return [s.strip() for s in _BOUNDARY_RE.split(text) if s.strip()]


class SentenceChunker(TextChunker):
    """Chunker that keeps whole sentences together."""

    def chunk(self, text: str, config: ChunkConfig | None = None) -> list[TextChunk]:
        if not text:
            return []

        max_chars, overlap_chars = self._budget(config)

        if len(text) <= max_chars:
            return self._to_chunks([Span(text, 0, len(text))])

        sentences = split_sentences(text)
        if not sentences:
            return self._to_chunks([Span(text, 0, len(text))])

        groups = self._group(text, sentences, max_chars)
        spans = [
            Span(" ".join(group), starts[0], starts[-1] + len(group[-1]))
            for group, starts in groups
        ]

        if overlap_chars > 0 and len(spans) > 1:
            spans = self._add_overlap(spans, [group for group, _ in groups], overlap_chars)

        return self._to_chunks(spans)

    @staticmethod
    def _group(
        text: str, sentences: list[str], max_chars: int
    ) -> list[tuple[list[str], list[int]]]:
        """Pack sentences greedily, tracking each sentence's offset in text."""
        groups: list[tuple[list[str], list[int]]] = []
        current: list[str] = []
        starts: list[int] = []
        cursor = 0

        for sentence in sentences:
            found = text.find(sentence, cursor)
            position = found if found >= 0 else cursor
            cursor = position + len(sentence)

            if current and len(" ".join([*current, sentence])) > max_chars:
                groups.append((current, starts))
                current, starts = [], []

            current.append(sentence)
            starts.append(position)

        if current:
            groups.append((current, starts))

        return groups

    @staticmethod
    def _add_overlap(
        spans: list[Span], groups: list[list[str]], overlap_chars: int
    ) -> list[Span]:
        result = [spans[0]]
        for i in range(1, len(spans)):
            previous = spans[i - 1]
            last_sentence = groups[i - 1][-1]
            span = spans[i]
            if len(last_sentence) <= overlap_chars:
                span = Span(
                    f"{last_sentence} {span.text}",
                    max(0, previous.end - len(last_sentence)),
                    span.end,
                )
            result.append(span)
        return result
