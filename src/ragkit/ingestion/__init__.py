"""Document ingestion: chunking and the chunk -> embed -> upsert pipeline."""

from src.ragkit.ingestion.pipeline import (
    IngestionConfig,
    IngestionFailure,
    IngestionPipeline,
    IngestionStats,
    ProgressInfo,
)

__all__ = [
    "IngestionConfig",
    "IngestionFailure",
    "IngestionPipeline",
    "IngestionStats",
    "ProgressInfo",
]
