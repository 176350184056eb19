"""
Structured error types for tempgroup.

Every failure the grouping job can raise carries a category, a retry hint
and a context block, so that the job runner can record *why* a step failed
and the CLI can print something useful without parsing messages.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      TempGroupError                          │
        │        (category, retryable, context, cause)                 │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  StoreError            ValidationError       JobError        │
        │  (DATABASE)            (VALIDATION)          (PIPELINE)      │
        │      │                      │                                │
        │  ChunkWriteError       ParameterError        ConfigError     │
        │  FinalizationError                           (CONFIG)        │
        │  PreloadError                                                │
        └─────────────────────────────────────────────────────────────┘

        InvalidTransitionError(ValueError): job/step state machines

Examples:
    >>> error = ChunkWriteError("row 17 not updated").with_context(step="grouping", chunk=3)
    >>> error.context.step
    'grouping'
    >>> error.to_dict()["category"]
    'DATABASE'

Guardrails:
    ❌ DON'T: Raise a bare Exception from store or job code
    ✅ DO: Wrap driver errors with ``cause=`` so the chain survives

Tags:
    error-handling, exception-hierarchy, error-context, tempgroup
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    DATABASE = "DATABASE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    PIPELINE = "PIPELINE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        job: Job name (e.g. ``"grouping"``)
        step: Step name within the job
        execution_id: Job execution identifier
        chunk: 1-based chunk number being written when the error happened
        metadata: Additional key-value pairs
    """

    job: str | None = None
    step: str | None = None
    execution_id: str | None = None
    chunk: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["job", "step", "execution_id", "chunk"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TempGroupError(Exception):
    """
    Base exception for all tempgroup errors.

    Subclasses set ``default_category`` and ``default_retryable``. Nothing
    in the job retries automatically; ``retryable`` is a hint for wrappers
    layered on top.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TempGroupError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ChunkWriteError("update failed").with_context(step="grouping", chunk=4)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STORE ERRORS
# =============================================================================


class StoreError(TempGroupError):
    """Record store operation failed."""

    default_category = ErrorCategory.DATABASE
    default_retryable = True


class ChunkWriteError(StoreError):
    """A chunk's batched write could not be applied in full.

    The owning chunk transaction is rolled back; no row of the chunk is
    persisted.
    """


class FinalizationError(StoreError):
    """The bulk reconciliation write of the finalization step failed."""


class PreloadError(StoreError):
    """Distinct account id lookup for cache warm-up failed (never fatal)."""


# =============================================================================
# VALIDATION / CONFIG ERRORS
# =============================================================================


class ValidationError(TempGroupError):
    """
    Data validation error.

    Never retryable - the data must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class ParameterError(ValidationError):
    """Job parameters are invalid (e.g. page size smaller than chunk size)."""


class ConfigError(TempGroupError):
    """Configuration error. Never retryable."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# JOB ERRORS
# =============================================================================


class JobError(TempGroupError):
    """Job execution failure."""

    default_category = ErrorCategory.PIPELINE
    default_retryable = False


class InvalidTransitionError(ValueError):
    """Raised when an illegal job or step status transition is attempted.

    Transition validation is strict.  A legitimate transition that is
    blocked belongs in the transition table, never around the guard.
    """

    def __init__(self, current: str, target: str, enum_name: str = "Status") -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid {enum_name} transition: {current} → {target}")


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TempGroupError",
    "StoreError",
    "ChunkWriteError",
    "FinalizationError",
    "PreloadError",
    "ValidationError",
    "ParameterError",
    "ConfigError",
    "JobError",
    "InvalidTransitionError",
]
