"""Metadata field conventions and a fluent builder.

Metadata keys are namespaced by prefix so enrichment never collides with
caller-owned fields:

- ``__v_`` vertical: document-level identity (source, doc type, partition)
- ``__h_`` horizontal: content classification (themes, sections)
- ``__s_`` structural: position within a chunked document
"""

from __future__ import annotations

from typing import Any


class MetadataPrefixes:
    VERTICAL = "__v_"
    HORIZONTAL = "__h_"
    STRUCTURAL = "__s_"


class VerticalFields:
    DOC_ID = "__v_doc_id"
    SOURCE = "__v_source"
    PARTITION = "__v_partition"
    DOC_TYPE = "__v_doc_type"
    TAGS = "__v_tags"


class HorizontalFields:
    THEME = "__h_theme"
    THEMES = "__h_themes"
    THEME_CONFIDENCE = "__h_theme_confidence"
    SECTION_PATH = "__h_section_path"
    SECTION_LEVEL = "__h_section_level"
    SECTION_TITLE = "__h_section_title"


class StructuralFields:
    CHUNK_INDEX = "__s_chunk_index"
    PARENT_ID = "__s_parent_id"
    HAS_CHILDREN = "__s_has_children"
    TOTAL_CHUNKS = "__s_total_chunks"


# Key written by vertical enrichment (unprefixed for filter ergonomics)
VERTICAL_LABEL_FIELD = "vertical"


class MetadataBuilder:
    """Fluent builder for prefixed metadata dicts.

    None values are dropped so optional fields never overwrite existing
    metadata with nulls.

    Usage:
        metadata = (
            MetadataBuilder()
            .vertical({"source": "docs/a.md", "doc_type": "markdown"})
            .structural({"chunk_index": 0})
            .custom({"team": "search"})
            .build()
        )
    """

    def __init__(self) -> None:
        self._metadata: dict[str, Any] = {}

    def vertical(self, fields: dict[str, Any]) -> MetadataBuilder:
        return self._add(MetadataPrefixes.VERTICAL, fields)

    def horizontal(self, fields: dict[str, Any]) -> MetadataBuilder:
        return self._add(MetadataPrefixes.HORIZONTAL, fields)

    def structural(self, fields: dict[str, Any]) -> MetadataBuilder:
        return self._add(MetadataPrefixes.STRUCTURAL, fields)

    def custom(self, fields: dict[str, Any]) -> MetadataBuilder:
        return self._add("", fields)

    def build(self) -> dict[str, Any]:
        """Return a copy of the accumulated metadata."""
        return dict(self._metadata)

    def _add(self, prefix: str, fields: dict[str, Any]) -> MetadataBuilder:
        for key, value in fields.items():
            if value is not None:
                self._metadata[f"{prefix}{key}"] = value
        return self
