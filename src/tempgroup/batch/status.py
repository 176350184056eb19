"""Job and step executions - state machines and execution records.

Valid transition graphs::

    JobStatus                           StepStatus
    CREATED   → RUNNING                 PENDING   → RUNNING
    RUNNING   → COMPLETED | FAILED      RUNNING   → COMPLETED | FAILED
    COMPLETED → (terminal)              COMPLETED → (terminal)
    FAILED    → (terminal)              FAILED    → (terminal)

``validate_transition()`` and the ``mark_*()`` methods enforce these rules;
an illegal move raises :class:`~tempgroup.core.errors.InvalidTransitionError`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from tempgroup.core.errors import InvalidTransitionError


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


class JobStatus(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


JOB_VALID_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.CREATED: frozenset({JobStatus.RUNNING}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),  # terminal
    JobStatus.FAILED: frozenset(),  # terminal
}

STEP_VALID_TRANSITIONS: dict[StepStatus, frozenset[StepStatus]] = {
    StepStatus.PENDING: frozenset({StepStatus.RUNNING}),
    StepStatus.RUNNING: frozenset({StepStatus.COMPLETED, StepStatus.FAILED}),
    StepStatus.COMPLETED: frozenset(),  # terminal
    StepStatus.FAILED: frozenset(),  # terminal
}


def validate_transition(current: JobStatus | StepStatus, target: JobStatus | StepStatus) -> None:
    """Raise :class:`InvalidTransitionError` if *current → target* is illegal.

    Example:
        >>> validate_transition(StepStatus.RUNNING, StepStatus.COMPLETED)
        >>> validate_transition(JobStatus.COMPLETED, JobStatus.RUNNING)
        Traceback (most recent call last):
        ...
        InvalidTransitionError: Invalid JobStatus transition: completed → running
    """
    if isinstance(current, JobStatus):
        table: dict[Any, frozenset[Any]] = JOB_VALID_TRANSITIONS
    else:
        table = STEP_VALID_TRANSITIONS
    if target not in table.get(current, frozenset()):
        raise InvalidTransitionError(current.value, target.value, type(current).__name__)


def _duration(started_at: datetime | None, completed_at: datetime | None) -> float | None:
    if started_at and completed_at:
        return (completed_at - started_at).total_seconds()
    return None


@dataclass
class StepExecution:
    """State and counters of one step within a job execution."""

    step_name: str
    status: StepStatus = StepStatus.PENDING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None
    error_type: str | None = None

    # Chunk counters (grouping step); finalization reports write_count only
    read_count: int = 0
    write_count: int = 0
    chunk_count: int = 0
    commit_count: int = 0
    rollback_count: int = 0

    def _transition_to(self, target: StepStatus) -> None:
        validate_transition(self.status, target)
        self.status = target

    def mark_started(self) -> None:
        self._transition_to(StepStatus.RUNNING)
        self.started_at = utcnow()

    def mark_completed(self) -> None:
        self._transition_to(StepStatus.COMPLETED)
        self.completed_at = utcnow()

    def mark_failed(self, error: str, error_type: str | None = None) -> None:
        self._transition_to(StepStatus.FAILED)
        self.completed_at = utcnow()
        self.error = error
        self.error_type = error_type

    @property
    def duration_seconds(self) -> float | None:
        return _duration(self.started_at, self.completed_at)

    @property
    def metrics(self) -> dict[str, int]:
        return {
            "read_count": self.read_count,
            "write_count": self.write_count,
            "chunk_count": self.chunk_count,
            "commit_count": self.commit_count,
            "rollback_count": self.rollback_count,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "step_name": self.step_name,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "error": self.error,
            "error_type": self.error_type,
            **self.metrics,
        }


@dataclass
class JobExecution:
    """One run of the grouping job.

    Example:
        >>> execution = JobExecution.create("grouping", params={"chunk_size": 1000},
        ...                                 step_names=["grouping", "finalization"])
        >>> execution.status
        <JobStatus.CREATED: 'created'>
    """

    execution_id: str
    job_name: str
    params: dict[str, Any]
    status: JobStatus = JobStatus.CREATED
    created_at: datetime = field(default_factory=utcnow)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    step_executions: list[StepExecution] = field(default_factory=list)
    error: str | None = None
    error_type: str | None = None
    failed_step: str | None = None

    # Outcome of the finalization step
    final_identifier: str | None = None
    known_accounts: int | None = None

    @classmethod
    def create(
        cls,
        job_name: str,
        params: dict[str, Any] | None = None,
        step_names: list[str] | None = None,
    ) -> JobExecution:
        return cls(
            execution_id=str(uuid.uuid4()),
            job_name=job_name,
            params=dict(params or {}),
            step_executions=[StepExecution(step_name=name) for name in step_names or []],
        )

    def _transition_to(self, target: JobStatus) -> None:
        validate_transition(self.status, target)
        self.status = target

    def mark_started(self) -> None:
        self._transition_to(JobStatus.RUNNING)
        self.started_at = utcnow()

    def mark_completed(self) -> None:
        self._transition_to(JobStatus.COMPLETED)
        self.completed_at = utcnow()

    def mark_failed(self, step_name: str, error: str, error_type: str | None = None) -> None:
        self._transition_to(JobStatus.FAILED)
        self.completed_at = utcnow()
        self.failed_step = step_name
        self.error = error
        self.error_type = error_type

    def step(self, name: str) -> StepExecution:
        for step_execution in self.step_executions:
            if step_execution.step_name == name:
                return step_execution
        raise KeyError(name)

    @property
    def duration_seconds(self) -> float | None:
        return _duration(self.started_at, self.completed_at)

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON/storage."""
        return {
            "execution_id": self.execution_id,
            "job_name": self.job_name,
            "status": self.status.value,
            "params": self.params,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "final_identifier": self.final_identifier,
            "known_accounts": self.known_accounts,
            "failed_step": self.failed_step,
            "error": self.error,
            "error_type": self.error_type,
            "steps": [s.to_dict() for s in self.step_executions],
        }
