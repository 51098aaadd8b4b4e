"""Hierarchical text chunking with separator fallback.

Splits on the coarsest separator that actually divides the text
(paragraphs, then lines, then sentences, then words) and greedily packs
the resulting parts into chunks that fit the character budget. A part
that is too large on its own is split again with the next finer
separator; the character-level split always succeeds, so recursion
terminates.

Overlap is applied after grouping: every chunk after the first is
prefixed with the trailing overlap characters of the chunk before it.
"""

from __future__ import annotations

from src.ragkit.ingestion.chunkers.base import Span, TextChunker
from src.ragkit.models import ChunkConfig, TextChunk

SEPARATORS: tuple[str, ...] = (
    "\n\n",  # paragraphs
    "\n",  # lines
    ". ",  # sentences
    " ",  # words
    "",  # characters
)


class RecursiveChunker(TextChunker):
    """Paragraph-first chunker that degrades to finer separators.

    Usage:
        chunker = RecursiveChunker()
        chunks = chunker.chunk(text, ChunkConfig(chunk_size=200, chunk_overlap=20))
    """

    def chunk(self, text: str, config: ChunkConfig | None = None) -> list[TextChunk]:
        if not text:
            return []

        max_chars, overlap_chars = self._budget(config)

        if len(text) <= max_chars:
            return self._to_chunks([Span(text, 0, len(text))])

        spans = self._split(text, max_chars, 0)
        return self._to_chunks(self._add_overlap(spans, overlap_chars))

    def _split(self, text: str, max_chars: int, separator_index: int) -> list[Span]:
        """Split text into spans no longer than max_chars.

        Offsets in the returned spans are relative to ``text``.
        """
        if len(text) <= max_chars:
            return [Span(text, 0, len(text))]

        if separator_index >= len(SEPARATORS) or not SEPARATORS[separator_index]:
            return self._split_characters(text, max_chars)

        separator = SEPARATORS[separator_index]
        parts = text.split(separator)
        if len(parts) <= 1:
            return self._split(text, max_chars, separator_index + 1)

        result: list[Span] = []
        current: list[str] = []
        current_start = 0
        offset = 0
        last = len(parts) - 1

        for i, part in enumerate(parts):
            candidate = separator.join([*current, part]) if current else part

            if len(candidate) <= max_chars:
                if not current:
                    current_start = offset
                current.append(part)
            else:
                self._flush(result, separator, current, current_start)

                current_start = offset
                if len(part) > max_chars:
                    for sub in self._split(part, max_chars, separator_index + 1):
                        result.append(
                            Span(sub.text, current_start + sub.start, current_start + sub.end)
                        )
                    current = []
                else:
                    current = [part]

            offset += len(part) + (len(separator) if i < last else 0)

        self._flush(result, separator, current, current_start)
        return result

    @staticmethod
    def _flush(result: list[Span], separator: str, current: list[str], start: int) -> None:
        # Adjacent separators leave empty parts; never emit an empty chunk
        joined = separator.join(current)
        if joined:
            result.append(Span(joined, start, start + len(joined)))

    @staticmethod
    def _split_characters(text: str, max_chars: int) -> list[Span]:
        return [
            Span(text[i : i + max_chars], i, min(i + max_chars, len(text)))
            for i in range(0, len(text), max_chars)
        ]

    @staticmethod
    def _add_overlap(spans: list[Span], overlap_chars: int) -> list[Span]:
        if overlap_chars == 0 or len(spans) <= 1:
            return spans

        result = [spans[0]]
        for span in spans[1:]:
            previous = result[-1]
            overlap = previous.text[-overlap_chars:]
            result.append(
                Span(
                    overlap + span.text,
                    max(0, previous.end - len(overlap)),
                    span.end,
                )
            )
        return result
