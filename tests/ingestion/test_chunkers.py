"""Tests for the recursive, fixed-window, and sentence chunkers.

Tests cover:
- Shared edge cases (empty text, text within budget)
- Fixed-window sizing, overlap, and the step <= 0 guard
- Recursive separator fallback, offsets, and overlap prefixing
- Sentence splitting, grouping, and whole-sentence overlap
- Token/character estimators
"""

from __future__ import annotations

import pytest

from src.ragkit.ingestion.chunkers import (
    CHARS_PER_TOKEN,
    FixedChunker,
    RecursiveChunker,
    SentenceChunker,
    estimate_chars,
    estimate_tokens,
    split_sentences,
)
from src.ragkit.models import ChunkConfig

ALL_CHUNKERS = [RecursiveChunker, FixedChunker, SentenceChunker]


# ── Test: Shared Edge Cases ─────────────────────────────────────────────────


class TestCommonEdgeCases:
    """Behavior every chunker shares."""

    @pytest.mark.parametrize("chunker_cls", ALL_CHUNKERS)
    def test_empty_text_returns_no_chunks(self, chunker_cls):
        assert chunker_cls().chunk("") == []

    @pytest.mark.parametrize("chunker_cls", ALL_CHUNKERS)
    def test_text_within_budget_is_single_chunk(self, chunker_cls):
        """Text no longer than the character budget comes back whole."""
        text = "Short text. It has two sentences."
        chunks = chunker_cls().chunk(text)

        assert len(chunks) == 1
        assert chunks[0].text == text
        assert chunks[0].index == 0
        assert chunks[0].metadata.total_chunks == 1
        assert chunks[0].metadata.start_char == 0
        assert chunks[0].metadata.end_char == len(text)

    @pytest.mark.parametrize("chunker_cls", ALL_CHUNKERS)
    def test_text_exactly_at_budget_is_single_chunk(self, chunker_cls):
        text = "x" * 40
        chunks = chunker_cls().chunk(text, ChunkConfig(chunk_size=10, chunk_overlap=0))

        assert len(chunks) == 1
        assert chunks[0].text == text

    @pytest.mark.parametrize("chunker_cls", ALL_CHUNKERS)
    def test_chunking_is_deterministic(self, chunker_cls):
        text = ("Alpha beta gamma. Delta epsilon! " * 40).strip()
        config = ChunkConfig(chunk_size=20, chunk_overlap=5)

        first = chunker_cls().chunk(text, config)
        second = chunker_cls().chunk(text, config)

        assert first == second

    @pytest.mark.parametrize("chunker_cls", ALL_CHUNKERS)
    def test_indices_sequential_and_totals_shared(self, chunker_cls):
        text = ("Alpha beta gamma. Delta epsilon!\n\n" * 30).strip()
        chunks = chunker_cls().chunk(text, ChunkConfig(chunk_size=15, chunk_overlap=2))

        assert len(chunks) > 1
        assert [c.index for c in chunks] == list(range(len(chunks)))
        assert all(c.metadata.chunk_index == c.index for c in chunks)
        assert {c.metadata.total_chunks for c in chunks} == {len(chunks)}
        assert all(c.metadata.end_char > c.metadata.start_char for c in chunks)
        assert all(c.metadata.source == "" for c in chunks)


# ── Test: Fixed Chunker ─────────────────────────────────────────────────────


class TestFixedChunker:
    """Sliding window of max_chars advancing by max_chars - overlap."""

    def test_thousand_chars_without_overlap(self):
        """100 tokens = 400 chars: windows of 400, 400, 200, contiguous."""
        text = "abcdefghij" * 100
        chunks = FixedChunker().chunk(text, ChunkConfig(chunk_size=100, chunk_overlap=0))

        assert [len(c.text) for c in chunks] == [400, 400, 200]
        assert [(c.metadata.start_char, c.metadata.end_char) for c in chunks] == [
            (0, 400),
            (400, 800),
            (800, 1000),
        ]
        assert "".join(c.text for c in chunks) == text

    def test_overlap_repeats_trailing_characters(self):
        text = "".join(chr(ord("a") + i % 26) for i in range(1000))
        chunks = FixedChunker().chunk(text, ChunkConfig(chunk_size=100, chunk_overlap=25))

        assert [(c.metadata.start_char, c.metadata.end_char) for c in chunks] == [
            (0, 400),
            (300, 700),
            (600, 1000),
        ]
        for prev, nxt in zip(chunks, chunks[1:]):
            assert nxt.text.startswith(prev.text[-100:])

    def test_overlap_not_smaller_than_size_stops_after_one_chunk(self):
        text = "z" * 100
        chunks = FixedChunker().chunk(text, ChunkConfig(chunk_size=10, chunk_overlap=10))

        assert len(chunks) == 1
        assert chunks[0].text == "z" * 40
        assert chunks[0].metadata.total_chunks == 1

    def test_chunk_text_matches_offsets(self):
        text = "The quick brown fox jumps over the lazy dog. " * 30
        chunks = FixedChunker().chunk(text, ChunkConfig(chunk_size=30, chunk_overlap=5))

        for chunk in chunks:
            assert text[chunk.metadata.start_char : chunk.metadata.end_char] == chunk.text


# ── Test: Recursive Chunker ─────────────────────────────────────────────────


class TestRecursiveChunker:
    """Separator fallback from paragraphs down to characters."""

    def test_splits_on_paragraphs_first(self):
        paragraphs = [letter * 150 for letter in "abc"]
        text = "\n\n".join(paragraphs)

        chunks = RecursiveChunker().chunk(text, ChunkConfig(chunk_size=50, chunk_overlap=0))

        assert [c.text for c in chunks] == paragraphs
        assert [(c.metadata.start_char, c.metadata.end_char) for c in chunks] == [
            (0, 150),
            (152, 302),
            (304, 454),
        ]

    def test_groups_small_paragraphs_together(self):
        paragraphs = ["a" * 50, "b" * 50, "c" * 50, "d" * 150]
        text = "\n\n".join(paragraphs)

        chunks = RecursiveChunker().chunk(text, ChunkConfig(chunk_size=50, chunk_overlap=0))

        assert chunks[0].text == "\n\n".join(paragraphs[:3])
        assert chunks[1].text == paragraphs[3]

    def test_oversized_paragraph_falls_back_to_words(self):
        text = "Intro paragraph.\n\n" + "word " * 100
        chunks = RecursiveChunker().chunk(text, ChunkConfig(chunk_size=25, chunk_overlap=0))

        assert chunks[0].text == "Intro paragraph."
        assert all(len(c.text) <= 100 for c in chunks)
        for chunk in chunks:
            assert text[chunk.metadata.start_char : chunk.metadata.end_char] == chunk.text
        assert all(not c.text.startswith(" ") for c in chunks[1:])

    def test_unbroken_text_falls_back_to_characters(self):
        text = "a" * 1000
        chunks = RecursiveChunker().chunk(text, ChunkConfig(chunk_size=100, chunk_overlap=0))

        assert [len(c.text) for c in chunks] == [400, 400, 200]
        assert [c.metadata.start_char for c in chunks] == [0, 400, 800]

    def test_chunks_respect_budget_without_overlap(self):
        line = "Lorem ipsum dolor sit amet. Consectetur adipiscing elit.\n"
        text = line * 40 + "\n\n" + "x" * 900
        chunks = RecursiveChunker().chunk(text, ChunkConfig(chunk_size=50, chunk_overlap=0))

        assert all(len(c.text) <= 200 for c in chunks)
        for chunk in chunks:
            assert text[chunk.metadata.start_char : chunk.metadata.end_char] == chunk.text

    def test_runs_of_separators_never_yield_empty_chunks(self):
        text = "a" * 150 + "\n\n\n" + "b" * 300
        chunks = RecursiveChunker().chunk(text, ChunkConfig(chunk_size=50, chunk_overlap=0))

        assert [c.text for c in chunks] == ["a" * 150, "b" * 200, "b" * 100]
        assert [(c.metadata.start_char, c.metadata.end_char) for c in chunks] == [
            (0, 150),
            (153, 353),
            (353, 453),
        ]

    def test_overlap_prefixes_previous_chunk_tail(self):
        text = "Intro paragraph.\n\n" + "word " * 100
        chunks = RecursiveChunker().chunk(text, ChunkConfig(chunk_size=25, chunk_overlap=5))

        assert len(chunks) > 2
        for prev, nxt in zip(chunks, chunks[1:]):
            assert nxt.text.startswith(prev.text[-20:])

    def test_overlap_adjusts_start_offset(self):
        paragraphs = [letter * 150 for letter in "abc"]
        text = "\n\n".join(paragraphs)

        chunks = RecursiveChunker().chunk(text, ChunkConfig(chunk_size=50, chunk_overlap=5))

        assert chunks[0].text == paragraphs[0]
        assert chunks[1].text == "a" * 20 + paragraphs[1]
        assert chunks[1].metadata.start_char == 130
        assert chunks[1].metadata.end_char == 302


# ── Test: Sentence Chunker ──────────────────────────────────────────────────

SENTENCES_TEXT = (
    "First sentence here. Second sentence here! Third one? Fourth sentence is here."
)


class TestSplitSentences:
    """Sentence boundary detection."""

    def test_splits_on_terminators(self):
        assert split_sentences("Hello world. How are you? Fine") == [
            "Hello world.",
            "How are you?",
            "Fine",
        ]

    def test_ignores_blank_fragments(self):
        assert split_sentences("Wait!   \n\n  Really?  ") == ["Wait!", "Really?"]

    def test_repeated_punctuation_stays_with_sentence(self):
        assert split_sentences("What?! Yes...") == ["What?!", "Yes..."]

    def test_inline_punctuation_is_not_a_boundary(self):
        assert split_sentences("Version 1.5 is out. See example.com/v1.5 now") == [
            "Version 1.5 is out.",
            "See example.com/v1.5 now",
        ]


class TestSentenceChunker:
    """Greedy sentence packing with whole-sentence overlap."""

    def test_groups_whole_sentences(self):
        config = ChunkConfig(chunk_size=10, chunk_overlap=0)
        chunks = SentenceChunker().chunk(SENTENCES_TEXT, config)

        assert [c.text for c in chunks] == [
            "First sentence here.",
            "Second sentence here! Third one?",
            "Fourth sentence is here.",
        ]
        assert [(c.metadata.start_char, c.metadata.end_char) for c in chunks] == [
            (0, 20),
            (21, 53),
            (54, 78),
        ]

    def test_overlap_reuses_last_sentence_when_it_fits(self):
        config = ChunkConfig(chunk_size=10, chunk_overlap=3)
        chunks = SentenceChunker().chunk(SENTENCES_TEXT, config)

        # "First sentence here." (20 chars) exceeds the 12-char overlap budget
        assert chunks[1].text == "Second sentence here! Third one?"
        # "Third one?" (10 chars) fits
        assert chunks[2].text == "Third one? Fourth sentence is here."
        assert chunks[2].metadata.start_char == 43
        assert chunks[2].metadata.end_char == 78

    def test_oversized_sentence_is_kept_whole(self):
        long_sentence = "This " + "very " * 30 + "long sentence ends here."
        text = f"Short one. {long_sentence} Another short one."

        chunks = SentenceChunker().chunk(text, ChunkConfig(chunk_size=10, chunk_overlap=0))

        assert long_sentence in [c.text for c in chunks]

    def test_decimals_and_abbreviations_lose_no_text(self):
        text = (
            "Version 1.5 shipped today. See e.g. the notes at example.com/v1.5 for details. "
            + "Filler sentence here. " * 5
        ).strip()

        chunks = SentenceChunker().chunk(text, ChunkConfig(chunk_size=10, chunk_overlap=0))

        assert chunks[0].text == "Version 1.5 shipped today. See e.g."
        joined = "".join(c.text for c in chunks)
        assert joined.replace(" ", "") == text.replace(" ", "")
        for chunk in chunks:
            assert text[chunk.metadata.start_char : chunk.metadata.end_char] == chunk.text


# ── Test: Estimators ────────────────────────────────────────────────────────


class TestEstimators:
    """Fixed 4-characters-per-token heuristic."""

    def test_chars_per_token_constant(self):
        assert CHARS_PER_TOKEN == 4

    def test_estimate_tokens_rounds_up(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    def test_estimate_chars(self):
        assert estimate_chars(500) == 2000
        assert estimate_chars(0) == 0
