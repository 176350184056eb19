"""Grouping job - runs the grouping and finalization steps in order.

Lifecycle::

    JobExecution CREATED
        │ run()
        ▼
    RUNNING ──► grouping step ──► finalization step ──► COMPLETED
                     │ raises            │ raises
                     ▼                   ▼
                  FAILED              FAILED

A failing step stops the job; the steps after it stay PENDING.  ``run()``
reports failures through the returned :class:`JobExecution` instead of
raising, the way a batch launcher records a failed run.

Each run gets a fresh :class:`RunState` and :class:`Grouper`, so the account
cache never leaks between runs.  Log lines carry ``execution_id`` and
``job`` (plus ``step`` inside a step) through structlog contextvars.

Usage:
    >>> store = SqlRecordStore.from_url("memory", create_schema=True)
    >>> seed_sample(store)
    9
    >>> execution = GroupingJob(store, JobParameters(chunk_size=2, page_size=4)).run()
    >>> execution.status, execution.final_identifier
    (<JobStatus.COMPLETED: 'completed'>, 'T00000000000005')
"""

from __future__ import annotations

from tempgroup.batch.ledger import JobLedger
from tempgroup.batch.params import JobParameters
from tempgroup.batch.status import JobExecution
from tempgroup.batch.steps import FinalizationStep, GroupingStep, Step
from tempgroup.batch.writer import ChunkWriter, make_writer
from tempgroup.core.logging import LogContext, get_logger
from tempgroup.grouping.grouper import Grouper
from tempgroup.grouping.identifiers import IdentifierGenerator
from tempgroup.grouping.state import RunState
from tempgroup.store.protocols import RecordStore

logger = get_logger(__name__)


class GroupingJob:
    """Assign shared temp ids to records whose account id repeats.

    Args:
        store: Record store to read and update
        params: Job parameters (defaults when None)
        generator: Identifier source; a fresh one starting at 0 per run when None
        writer: Chunk writer; built from ``params.writer_mode`` when None
        ledger: Optional execution ledger, saved at start and end of the run
        name: Job name recorded on the execution
    """

    def __init__(
        self,
        store: RecordStore,
        params: JobParameters | None = None,
        *,
        generator: IdentifierGenerator | None = None,
        writer: ChunkWriter | None = None,
        ledger: JobLedger | None = None,
        name: str = "grouping",
    ) -> None:
        self.store = store
        self.params = params or JobParameters()
        self.generator = generator
        self.writer = writer or make_writer(self.params.writer_mode, store)
        self.ledger = ledger
        self.name = name

        self.state: RunState | None = None
        self.last_execution: JobExecution | None = None

    def _build_steps(self, grouper: Grouper) -> list[Step]:
        return [
            GroupingStep(self.store, grouper, self.writer, self.params),
            FinalizationStep(self.store, grouper),
        ]

    def run(self) -> JobExecution:
        """Execute the job once and return its execution record."""
        state = RunState(generator=self.generator or IdentifierGenerator())
        grouper = Grouper(state, log_frequency=self.params.log_frequency)
        steps = self._build_steps(grouper)
        self.state = state

        execution = JobExecution.create(
            self.name,
            params=self.params.model_dump(),
            step_names=[step.name for step in steps],
        )
        self.last_execution = execution

        with LogContext(execution_id=execution.execution_id, job=self.name):
            execution.mark_started()
            logger.info("job.started", **execution.params)
            self._save(execution)

            for step in steps:
                step_execution = execution.step(step.name)
                with LogContext(step=step.name):
                    step_execution.mark_started()
                    logger.info("step.started")
                    try:
                        step.execute(execution, step_execution)
                    except Exception as e:
                        step_execution.mark_failed(str(e), type(e).__name__)
                        execution.mark_failed(step.name, str(e), type(e).__name__)
                        logger.error(
                            "step.failed",
                            error=str(e),
                            error_type=type(e).__name__,
                            exc_info=True,
                        )
                        break
                    step_execution.mark_completed()
                    logger.info("step.completed", **step_execution.metrics)
            else:
                execution.mark_completed()

            if execution.succeeded:
                logger.info(
                    "job.completed",
                    final_identifier=execution.final_identifier,
                    known_accounts=execution.known_accounts,
                    collisions=state.collisions,
                    duration_seconds=execution.duration_seconds,
                )
            else:
                logger.error(
                    "job.failed",
                    failed_step=execution.failed_step,
                    error=execution.error,
                    error_type=execution.error_type,
                )
            self._save(execution)

        return execution

    def _save(self, execution: JobExecution) -> None:
        if self.ledger is not None:
            self.ledger.save_execution(execution)
