"""Job ledger - persistent history of grouping job executions.

Architecture::

    JobLedger
    ┌──────────────────────────────────────────────────────────────┐
    │  save_execution()   upsert job row, replace its step rows    │
    │  get_execution()    one execution with its steps             │
    │  list_executions()  newest first, optional status filter     │
    ├──────────────────────────────────────────────────────────────┤
    │  batch_job_execution ──1:N──► batch_step_execution           │
    └──────────────────────────────────────────────────────────────┘

Each call runs in its own transaction, independent of the job's chunk
transactions.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import selectinload

from tempgroup.batch.status import JobExecution, JobStatus, StepExecution, StepStatus
from tempgroup.core.logging import get_logger
from tempgroup.store.orm import JobExecutionTable, StepExecutionTable, TempGroupBase
from tempgroup.store.session import store_session_factory

logger = get_logger(__name__)

_STEP_METRICS = {"read_count", "write_count", "chunk_count", "commit_count", "rollback_count"}


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite returns naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class JobLedger:
    """CRUD for job executions over the ORM tables.

    Parameters:
        target: An ``Engine`` or any object exposing ``.engine`` (such as
            :class:`~tempgroup.store.repository.SqlRecordStore`).
    """

    def __init__(self, target: Engine | object) -> None:
        self.engine: Engine = getattr(target, "engine", target)  # type: ignore[assignment]
        self._sessions = store_session_factory(self.engine)

    def create_schema(self) -> None:
        TempGroupBase.metadata.create_all(self.engine)

    def save_execution(self, execution: JobExecution) -> None:
        """Insert or update *execution* and its step executions."""
        with self._sessions.begin() as session:
            row = session.get(JobExecutionTable, execution.execution_id)
            if row is None:
                row = JobExecutionTable(id=execution.execution_id)
                session.add(row)

            row.job_name = execution.job_name
            row.status = execution.status.value
            row.params = dict(execution.params)
            row.created_at = execution.created_at
            row.started_at = execution.started_at
            row.completed_at = execution.completed_at
            row.final_identifier = execution.final_identifier
            row.known_accounts = execution.known_accounts
            row.error = execution.error
            row.error_type = execution.error_type
            row.failed_step = execution.failed_step
            row.steps = [
                StepExecutionTable(
                    position=position,
                    step_name=step.step_name,
                    status=step.status.value,
                    started_at=step.started_at,
                    completed_at=step.completed_at,
                    metrics=step.metrics,
                    error=step.error,
                    error_type=step.error_type,
                )
                for position, step in enumerate(execution.step_executions)
            ]

        logger.debug(
            "ledger.execution_saved",
            execution_id=execution.execution_id,
            status=execution.status.value,
        )

    def get_execution(self, execution_id: str) -> JobExecution | None:
        stmt = (
            select(JobExecutionTable)
            .where(JobExecutionTable.id == execution_id)
            .options(selectinload(JobExecutionTable.steps))
        )
        with self._sessions() as session:
            row = session.execute(stmt).scalar_one_or_none()
            return self._row_to_execution(row) if row is not None else None

    def list_executions(
        self,
        limit: int = 20,
        status: JobStatus | None = None,
    ) -> list[JobExecution]:
        """Most recent executions first."""
        stmt = select(JobExecutionTable).options(selectinload(JobExecutionTable.steps))
        if status is not None:
            stmt = stmt.where(JobExecutionTable.status == status.value)
        stmt = stmt.order_by(JobExecutionTable.created_at.desc()).limit(limit)

        with self._sessions() as session:
            return [self._row_to_execution(row) for row in session.execute(stmt).scalars()]

    def _row_to_execution(self, row: JobExecutionTable) -> JobExecution:
        steps = []
        for step_row in row.steps:
            metrics = {
                k: v for k, v in (step_row.metrics or {}).items()
                if k in _STEP_METRICS
            }
            steps.append(
                StepExecution(
                    step_name=step_row.step_name,
                    status=StepStatus(step_row.status),
                    started_at=_as_utc(step_row.started_at),
                    completed_at=_as_utc(step_row.completed_at),
                    error=step_row.error,
                    error_type=step_row.error_type,
                    **metrics,
                )
            )

        return JobExecution(
            execution_id=row.id,
            job_name=row.job_name,
            params=dict(row.params or {}),
            status=JobStatus(row.status),
            created_at=_as_utc(row.created_at),
            started_at=_as_utc(row.started_at),
            completed_at=_as_utc(row.completed_at),
            step_executions=steps,
            error=row.error,
            error_type=row.error_type,
            failed_step=row.failed_step,
            final_identifier=row.final_identifier,
            known_accounts=row.known_accounts,
        )
