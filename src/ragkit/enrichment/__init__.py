"""Metadata enrichment: vertical labels, themes, and sections."""

from src.ragkit.enrichment.pipeline import EnrichmentPipeline
from src.ragkit.enrichment.sections import SectionInfo, detect_section, extract_section_from_path
from src.ragkit.enrichment.types import (
    AutomaticExtraction,
    AutomaticExtractionConfig,
    EnrichAllConfig,
    EnrichmentStats,
    ExtractorConfig,
    FieldMappingConfig,
    SectionEnrichmentConfig,
    ThemeEnrichmentConfig,
    VerticalEnrichmentConfig,
    parse_vertical_config,
)

__all__ = [
    "AutomaticExtraction",
    "AutomaticExtractionConfig",
    "EnrichAllConfig",
    "EnrichmentPipeline",
    "EnrichmentStats",
    "ExtractorConfig",
    "FieldMappingConfig",
    "SectionEnrichmentConfig",
    "SectionInfo",
    "ThemeEnrichmentConfig",
    "VerticalEnrichmentConfig",
    "detect_section",
    "extract_section_from_path",
    "parse_vertical_config",
]
