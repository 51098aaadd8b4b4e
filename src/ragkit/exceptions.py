"""Error taxonomy for chunking, classification, and enrichment.

Per-record failures (ClassificationError, ExtractionError) and per-batch
write failures (StoreWriteError) are caught inside the enrichment
pipeline and reported through EnrichmentStats.errors. ConfigurationError
is the only family that escapes an enrichment call.
"""

from __future__ import annotations


class RagkitError(Exception):
    """Base class for all toolkit errors."""


class ConfigurationError(RagkitError, ValueError):
    """Raised when a caller passes an invalid or contradictory configuration."""


class FilterError(ConfigurationError):
    """Raised when a universal filter is malformed or uses an unknown operator."""


class LLMDecodeError(RagkitError):
    """Raised when an LLM response cannot be decoded as structured output.

    Attributes:
        raw_output: The undecodable text returned by the model.
    """

    def __init__(self, message: str, raw_output: str) -> None:
        self.raw_output = raw_output
        super().__init__(message)


class ClassificationError(RagkitError):
    """Raised when a classifier or its LLM collaborator fails.

    The original failure is chained as ``__cause__`` by the raiser.

    Attributes:
        raw_output: Raw model output when available, else None.
    """

    def __init__(self, message: str, raw_output: str | None = None) -> None:
        self.raw_output = raw_output
        super().__init__(message)


class ExtractionError(RagkitError):
    """Raised when a vertical extractor fails for a single record.

    Attributes:
        record_id: ID of the record being processed.
    """

    def __init__(self, record_id: str, reason: str) -> None:
        self.record_id = record_id
        super().__init__(f"Extractor error for record {record_id}: {reason}")


class StoreWriteError(RagkitError):
    """Raised when a batched metadata update is rejected by the store.

    Attributes:
        collection: Target collection name.
        update_count: Number of metadata updates lost with the batch.
    """

    def __init__(self, collection: str, update_count: int, reason: str) -> None:
        self.collection = collection
        self.update_count = update_count
        super().__init__(
            f"Error updating batch of {update_count} records in '{collection}': {reason}"
        )
