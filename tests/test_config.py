"""Tests for settings loading and structlog configuration."""

from __future__ import annotations

import pytest
import structlog
from pydantic import ValidationError

from src.ragkit.config import RagkitSettings
from src.ragkit.logging import build_processors, configure_structlog


class TestRagkitSettings:
    """Environment-driven configuration."""

    def test_defaults(self, settings):
        assert settings.chunk_size == 500
        assert settings.chunk_overlap == 50
        assert settings.enrichment_batch_size == 100
        assert settings.llm_enrichment_batch_size == 10
        assert settings.confidence_threshold == 0.5
        assert settings.qdrant_url is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("RAGKIT_CHUNK_SIZE", "256")
        monkeypatch.setenv("RAGKIT_LLM_MODEL", "anthropic/claude-3-haiku")

        settings = RagkitSettings(_env_file=None)

        assert settings.chunk_size == 256
        assert settings.llm_model == "anthropic/claude-3-haiku"

    def test_threshold_bounds(self):
        with pytest.raises(ValidationError):
            RagkitSettings(_env_file=None, confidence_threshold=1.5)


class TestConfigureStructlog:
    """Renderer selection."""

    def test_json_renderer(self):
        configure_structlog(RagkitSettings(_env_file=None, log_json=True))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self):
        configure_structlog(RagkitSettings(_env_file=None, log_json=False))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_processor_chain_filters_before_rendering(self):
        processors = build_processors(RagkitSettings(_env_file=None, log_json=True))

        assert processors[0] is structlog.stdlib.filter_by_level
        assert structlog.processors.format_exc_info in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert sum(
            isinstance(p, (structlog.processors.JSONRenderer, structlog.dev.ConsoleRenderer))
            for p in processors
        ) == 1
