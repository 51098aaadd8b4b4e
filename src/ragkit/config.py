"""Toolkit configuration via Pydantic BaseSettings.

All settings load from environment variables with the RAGKIT_ prefix.
For example, RAGKIT_CHUNK_SIZE sets chunk_size.

Settings are instance-owned: components accept a RagkitSettings object
and construct a default one when none is given. There is no cached
module-level settings singleton.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RagkitSettings(BaseSettings):
    """Configuration for chunking, enrichment, and the collaborator adapters.

    Attributes:
        log_level: Minimum level for structlog output.
        log_json: Render logs as JSON lines instead of console output.
        chunk_size: Default chunk size in tokens (1 token ~ 4 characters).
        chunk_overlap: Default overlap between chunks in tokens.
        ingestion_batch_size: Records per upsert call during ingestion.
        enrichment_batch_size: Records per batch for enrichment passes.
        llm_enrichment_batch_size: Records per batch for the LLM-backed
            vertical strategy (kept small for provider rate limits).
        confidence_threshold: Minimum theme confidence that gets written.
        openai_api_key: OpenAI API key for dense embedding generation.
        embedding_model: OpenAI embedding model name.
        embedding_dimensions: Dimensionality of dense embeddings.
        llm_model: LiteLLM model identifier used by LiteLLMClient.
        llm_timeout: Per-request LLM timeout in seconds.
        llm_max_retries: Retries LiteLLM performs before giving up.
        qdrant_url: Remote Qdrant server URL. Takes precedence over qdrant_path.
        qdrant_api_key: API key for remote Qdrant authentication.
        qdrant_path: Local filesystem path for Qdrant storage (dev mode).
            ":memory:" runs an ephemeral in-process instance.
        qdrant_text_key: Payload key holding a record's primary text.
    """

    model_config = SettingsConfigDict(
        env_prefix="RAGKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Chunking
    chunk_size: int = Field(default=500, gt=0)
    chunk_overlap: int = Field(default=50, ge=0)

    # Batching
    ingestion_batch_size: int = Field(default=100, gt=0)
    enrichment_batch_size: int = Field(default=100, gt=0)
    llm_enrichment_batch_size: int = Field(default=10, gt=0)

    # Theme enrichment
    confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)

    # Embedding
    openai_api_key: str = ""
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # LLM
    llm_model: str = "openai/gpt-4o-mini"
    llm_timeout: int = 30
    llm_max_retries: int = 3

    # Qdrant connection
    qdrant_url: str | None = None
    qdrant_api_key: str | None = None
    qdrant_path: str = "./qdrant_data"
    qdrant_text_key: str = "content"
