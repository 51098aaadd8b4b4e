"""Enrichment statistics and per-pass configuration models.

Vertical enrichment takes exactly one of three strategy shapes:

- FieldMappingConfig: map an existing metadata value to a label
- ExtractorConfig: call a caller-supplied (async) function per record
- AutomaticExtractionConfig: ask an LLM to pick a label

All config models ignore unrecognized keys. ``filter`` accepts anything
normalize_filter() accepts (a filter model, a standard mapping, or a
shorthand mapping); it is validated when a pass starts, before the store
is touched.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.ragkit.enrichment.classifiers.base import ThemeClassifier
from src.ragkit.exceptions import ConfigurationError
from src.ragkit.llm.base import LLMClient
from src.ragkit.models import VectorRecord


class EnrichmentStats(BaseModel):
    """Counters for one enrichment pass, or the sum of several.

    For a single pass, records_processed == records_updated +
    records_skipped. Aggregates from enrich_all() add up per-pass
    counts, so a record visited by three passes counts three times.
    """

    records_processed: int = 0
    records_updated: int = 0
    records_skipped: int = 0
    time_ms: int = 0
    errors: list[str] = Field(default_factory=list)

    def merge(self, other: EnrichmentStats) -> None:
        """Add another pass's counters and errors into this one."""
        self.records_processed += other.records_processed
        self.records_updated += other.records_updated
        self.records_skipped += other.records_skipped
        self.errors.extend(other.errors)


ProgressCallback = Callable[[EnrichmentStats], None]
Extractor = Callable[[VectorRecord], Union[Awaitable[Union[str, None]], str, None]]


class _PassConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    filter: Any = None
    batch_size: int | None = Field(default=None, gt=0)


# ── Vertical ────────────────────────────────────────────────────────────────


class FieldMappingConfig(_PassConfig):
    """Label records by looking up ``metadata[field]`` in ``mapping``.

    Records whose field is missing, not a string, or not a mapping key
    are skipped.
    """

    mapping: dict[str, str]
    field: str = "category"


class ExtractorConfig(_PassConfig):
    """Label records with a caller-supplied function.

    The extractor receives the VectorRecord and returns the label, or a
    falsy value to skip the record. Async and plain functions both work.
    """

    extractor: Extractor


class AutomaticExtraction(BaseModel):
    """LLM settings for automatic vertical labeling.

    Attributes:
        llm: LLM collaborator; only generate() is used.
        fields: Candidate labels offered to the model.
        prompt_template: Optional template with ``{fields}`` and
            ``{text}`` placeholders.
        text_field: Metadata field holding the text to classify.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    llm: LLMClient
    fields: list[str] = Field(min_length=1)
    prompt_template: str | None = None
    text_field: str = "content"


class AutomaticExtractionConfig(_PassConfig):
    automatic: AutomaticExtraction


VerticalEnrichmentConfig = Union[FieldMappingConfig, ExtractorConfig, AutomaticExtractionConfig]

_VERTICAL_STRATEGIES: dict[str, type[_PassConfig]] = {
    "mapping": FieldMappingConfig,
    "extractor": ExtractorConfig,
    "automatic": AutomaticExtractionConfig,
}


def parse_vertical_config(
    data: VerticalEnrichmentConfig | Mapping[str, Any],
) -> VerticalEnrichmentConfig:
    """Build the vertical strategy model named by exactly one key.

    Raises:
        ConfigurationError: If zero or several of ``mapping``,
            ``extractor`` and ``automatic`` are present.
    """
    if isinstance(data, (FieldMappingConfig, ExtractorConfig, AutomaticExtractionConfig)):
        return data
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Unsupported vertical config type: {type(data).__name__}")

    present = [key for key in _VERTICAL_STRATEGIES if data.get(key) is not None]
    if len(present) != 1:
        raise ConfigurationError(
            "Vertical enrichment requires exactly one of 'mapping', 'extractor', "
            f"or 'automatic' (got {present or 'none'})"
        )
    return _VERTICAL_STRATEGIES[present[0]].model_validate(dict(data))


# ── Themes and sections ─────────────────────────────────────────────────────


class ThemeEnrichmentConfig(_PassConfig):
    """Theme (horizontal) enrichment settings.

    Attributes:
        themes: Candidate themes; informational, the classifier owns the
            list it actually scores against.
        classifier: Any ThemeClassifier.
        text_field: Metadata field read when a record has no text.
        confidence_threshold: Classifications below this are not written.
            Defaults to RagkitSettings.confidence_threshold (0.5).
        multi_theme: Also write every theme scoring at or above the
            threshold, sorted by descending score.
        on_progress: Called with the running stats after every batch.
    """

    themes: list[str]
    classifier: ThemeClassifier
    text_field: str = "content"
    confidence_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    multi_theme: bool = False
    on_progress: ProgressCallback | None = None


class SectionEnrichmentConfig(_PassConfig):
    """Section enrichment settings.

    ``existing_field`` wins when both options are set. With neither,
    every record is skipped.
    """

    existing_field: str | None = None
    auto_detect: bool = False


class EnrichAllConfig(_PassConfig):
    """Run-all settings.

    ``filter`` and ``batch_size`` are inherited by sub-passes that leave
    theirs unset; ``on_progress`` fires after each sub-pass with the
    aggregate stats.
    """

    vertical: VerticalEnrichmentConfig | None = None
    themes: ThemeEnrichmentConfig | None = None
    sections: SectionEnrichmentConfig | None = None
    on_progress: ProgressCallback | None = None

    @field_validator("vertical", mode="before")
    @classmethod
    def parse_vertical(cls, value: Any) -> Any:
        if value is None:
            return None
        return parse_vertical_config(value)
