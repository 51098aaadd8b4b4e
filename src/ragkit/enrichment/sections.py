"""Section hierarchy extraction.

Two sources of section structure:

- an existing path field such as ``"guide/install/linux"``: level is the
  number of non-blank segments, title is the last one
- header heuristics over the record text, tried in priority order and
  stopping at the first hit: Markdown ``#``..``######``, then HTML
  ``<h1>``..``<h6>``, then a ``SECTION: <title>`` line, then a level-0
  ``"unsectioned"`` fallback
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel

from src.ragkit.metadata import HorizontalFields

UNSECTIONED_TITLE = "unsectioned"

_MARKDOWN_HEADER_RE = re.compile(r"^(#{1,6})\s+(.+)$", re.MULTILINE)
_HTML_HEADER_RE = re.compile(r"<h([1-6])>(.+?)</h[1-6]>", re.IGNORECASE)
_SECTION_LINE_RE = re.compile(r"^SECTION:\s+(.+)$", re.MULTILINE)


class SectionInfo(BaseModel):
    """Detected section position of a record."""

    level: int
    title: str
    path: str | None = None

    def to_metadata(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            HorizontalFields.SECTION_LEVEL: self.level,
            HorizontalFields.SECTION_TITLE: self.title,
        }
        if self.path:
            metadata[HorizontalFields.SECTION_PATH] = self.path
        return metadata


def extract_section_from_path(section_path: Any) -> SectionInfo | None:
    """Parse a ``/``-delimited section path.

    Returns None for non-strings and paths without any non-blank segment.
    """
    if not section_path or not isinstance(section_path, str):
        return None

    parts = [part for part in section_path.split("/") if part.strip()]
    if not parts:
        return None

    return SectionInfo(level=len(parts), title=parts[-1], path=section_path)


def detect_section(text: str) -> SectionInfo:
    """Detect the first section header in text by heuristic priority."""
    for detector in (_detect_markdown, _detect_html, _detect_section_line):
        section = detector(text)
        if section is not None:
            return section
    return SectionInfo(level=0, title=UNSECTIONED_TITLE)


def _detect_markdown(text: str) -> SectionInfo | None:
    match = _MARKDOWN_HEADER_RE.search(text)
    if match:
        return SectionInfo(level=len(match.group(1)), title=match.group(2).strip())
    return None


def _detect_html(text: str) -> SectionInfo | None:
    match = _HTML_HEADER_RE.search(text)
    if match:
        return SectionInfo(level=int(match.group(1)), title=match.group(2).strip())
    return None


def _detect_section_line(text: str) -> SectionInfo | None:
    match = _SECTION_LINE_RE.search(text)
    if match:
        return SectionInfo(level=1, title=match.group(1).strip())
    return None
