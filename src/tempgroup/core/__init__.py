"""
Core primitives shared by every tempgroup module: errors, settings,
structured logging and timing helpers.
"""

from tempgroup.core.errors import (
    ChunkWriteError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    FinalizationError,
    InvalidTransitionError,
    JobError,
    ParameterError,
    PreloadError,
    StoreError,
    TempGroupError,
    ValidationError,
)
from tempgroup.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "ChunkWriteError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "FinalizationError",
    "InvalidTransitionError",
    "JobError",
    "ParameterError",
    "PreloadError",
    "StoreError",
    "TempGroupError",
    "ValidationError",
    "LogContext",
    "configure_logging",
    "get_logger",
]
