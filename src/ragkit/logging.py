"""Structured logging setup.

Every module obtains its logger with ``structlog.get_logger(__name__)``.
Calling configure_structlog() once at process start routes those events
through stdlib logging at the configured level and renders them as JSON
(``RAGKIT_LOG_JSON=true``) or as console output.
"""

from __future__ import annotations

import logging

import structlog

from src.ragkit.config import RagkitSettings


def build_processors(settings: RagkitSettings) -> list:
    """Processor chain ending in the renderer selected by ``log_json``."""
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_structlog(settings: RagkitSettings | None = None) -> None:
    """Configure structlog and the stdlib root level from settings.

    Args:
        settings: Toolkit settings. Loaded from the environment when
            omitted.
    """
    settings = settings or RagkitSettings()

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
