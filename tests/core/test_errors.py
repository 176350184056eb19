"""Tests for tempgroup.core.errors - hierarchy, categories and context."""

import pytest

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


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls,parent,category,retryable",
        [
            (StoreError, TempGroupError, ErrorCategory.DATABASE, True),
            (ChunkWriteError, StoreError, ErrorCategory.DATABASE, True),
            (FinalizationError, StoreError, ErrorCategory.DATABASE, True),
            (PreloadError, StoreError, ErrorCategory.DATABASE, True),
            (ParameterError, ValidationError, ErrorCategory.VALIDATION, False),
            (ConfigError, TempGroupError, ErrorCategory.CONFIG, False),
            (JobError, TempGroupError, ErrorCategory.PIPELINE, False),
        ],
    )
    def test_defaults(self, cls, parent, category, retryable):
        error = cls("x")
        assert isinstance(error, parent)
        assert error.category == category
        assert error.retryable is retryable

    def test_overrides(self):
        error = StoreError("x", retryable=False, category=ErrorCategory.INTERNAL)
        assert error.retryable is False
        assert error.category == ErrorCategory.INTERNAL

    def test_invalid_transition_is_value_error(self):
        error = InvalidTransitionError("completed", "running", "JobStatus")
        assert isinstance(error, ValueError)
        assert (error.current, error.target) == ("completed", "running")


class TestContext:
    def test_with_context_sets_known_fields(self):
        error = ChunkWriteError("failed").with_context(step="grouping", chunk=3, rows=7)
        assert error.context.step == "grouping"
        assert error.context.chunk == 3
        assert error.context.metadata == {"rows": 7}

    def test_context_to_dict_skips_empty(self):
        assert ErrorContext().to_dict() == {}
        assert ErrorContext(job="grouping", metadata={"a": 1}).to_dict() == {"job": "grouping", "a": 1}

    def test_to_dict(self):
        cause = RuntimeError("driver")
        error = FinalizationError("reconcile failed", cause=cause).with_context(step="finalization")
        data = error.to_dict()
        assert data == {
            "error_type": "FinalizationError",
            "message": "reconcile failed",
            "category": "DATABASE",
            "retryable": True,
            "context": {"step": "finalization"},
            "cause": "driver",
        }
        assert error.__cause__ is cause

    def test_validation_fields(self):
        data = ValidationError("bad", field="account_id", value="").to_dict()
        assert data["field"] == "account_id"
        assert data["value"] == "''"

    def test_repr(self):
        assert repr(JobError("boom")) == "JobError('boom', category=PIPELINE)"
