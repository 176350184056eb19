"""
Structured logging for tempgroup.

Configures structlog once per process and hands out loggers.  Execution
context (``execution_id``, ``job``, ``step``) is bound through structlog
contextvars, so every log line emitted while a job runs carries it without
passing loggers around.

Usage Flow:
    ::

        configure_logging(level="INFO", json_format=False)
        logger = get_logger(__name__)

        with LogContext(execution_id="3f2a...", job="grouping"):
            logger.info("job.started", chunk_size=1000)

        # Console output:
        # 2026-01-05T10:00:00Z [info] job.started  chunk_size=1000 execution_id=3f2a... job=grouping

Configuration is read from arguments first, then environment:
    - TEMPGROUP_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: INFO)
    - TEMPGROUP_LOG_FORMAT: json | console (default: console)

Tags:
    logging, structlog, observability, contextvars, tempgroup
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

_configured = False


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Should be called once at application startup (CLI entry).  Subsequent
    calls are no-ops unless ``force=True``.

    Args:
        level: Log level (overrides TEMPGROUP_LOG_LEVEL)
        json_format: True for JSON, False for console (overrides TEMPGROUP_LOG_FORMAT)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = (level or os.environ.get("TEMPGROUP_LOG_LEVEL", "INFO")).upper()
    if json_format is None:
        json_format = os.environ.get("TEMPGROUP_LOG_FORMAT", "console").lower() == "json"

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # Uncached so a reconfigure (new stream, new level) reaches module-level loggers
        cache_logger_on_first_use=False,
    )

    # SQLAlchemy and other libraries log through stdlib
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level),
        force=True,
    )

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(job="grouping", execution_id="abc123"):
            logger.info("step.started")
        # Context removed here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "is_configured",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
