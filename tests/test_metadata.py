"""Tests for metadata field conventions and MetadataBuilder."""

from __future__ import annotations

from src.ragkit.metadata import (
    HorizontalFields,
    MetadataBuilder,
    MetadataPrefixes,
    StructuralFields,
    VerticalFields,
)


class TestFieldConventions:
    """Every field constant carries its namespace prefix."""

    def test_prefixes(self):
        assert VerticalFields.SOURCE.startswith(MetadataPrefixes.VERTICAL)
        assert HorizontalFields.THEME.startswith(MetadataPrefixes.HORIZONTAL)
        assert StructuralFields.CHUNK_INDEX.startswith(MetadataPrefixes.STRUCTURAL)

    def test_theme_fields(self):
        assert HorizontalFields.THEME == "__h_theme"
        assert HorizontalFields.THEME_CONFIDENCE == "__h_theme_confidence"
        assert HorizontalFields.THEMES == "__h_themes"


class TestMetadataBuilder:
    """Fluent prefixed metadata construction."""

    def test_builds_prefixed_fields(self):
        metadata = (
            MetadataBuilder()
            .vertical({"source": "docs/a.md", "doc_type": "markdown"})
            .horizontal({"theme": "finance"})
            .structural({"chunk_index": 0})
            .custom({"team": "search"})
            .build()
        )

        assert metadata == {
            "__v_source": "docs/a.md",
            "__v_doc_type": "markdown",
            "__h_theme": "finance",
            "__s_chunk_index": 0,
            "team": "search",
        }

    def test_none_values_dropped(self):
        metadata = MetadataBuilder().vertical({"source": None, "doc_id": "a"}).build()

        assert metadata == {"__v_doc_id": "a"}

    def test_build_returns_copy(self):
        builder = MetadataBuilder().custom({"k": 1})
        first = builder.build()
        first["k"] = 2

        assert builder.build() == {"k": 1}
