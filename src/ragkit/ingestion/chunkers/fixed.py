"""Fixed-width sliding-window chunking."""

from __future__ import annotations

from src.ragkit.ingestion.chunkers.base import Span, TextChunker
from src.ragkit.models import ChunkConfig, TextChunk


class FixedChunker(TextChunker):
    """Cuts text into windows of max_chars, advancing by max_chars - overlap.

    Simplest strategy and the only one that guarantees uniform chunk
    width. Ignores all structure in the text, so it may split mid-word.
    The window stops sliding once it reaches the end of the text.
    """

    def chunk(self, text: str, config: ChunkConfig | None = None) -> list[TextChunk]:
        if not text:
            return []

        max_chars, overlap_chars = self._budget(config)
        length = len(text)

        if length <= max_chars:
            return self._to_chunks([Span(text, 0, length)])

        step = max_chars - overlap_chars
        spans: list[Span] = []
        position = 0

        while position < length:
            end = min(length, position + max_chars)
            spans.append(Span(text[position:end], position, end))
            if end >= length or step <= 0:
                break
            position += step

        return self._to_chunks(spans)
