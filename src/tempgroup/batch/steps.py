"""Job steps - chunked grouping and final reconciliation.

Flow per run::

    GroupingStep                                   FinalizationStep
    ────────────                                   ────────────────
    grouper.initialize()                           grouper.finalize()
    for chunk in chunked(reader, chunk_size):        → (final_id, known)
        BEGIN                                      BEGIN
          tagged = pool.map(grouper.process)         UPDATE address
          writer.write(session, tagged)                SET temp_id = final_id
        COMMIT  (ROLLBACK + raise on failure)          WHERE account_id IN known
                                                   COMMIT

A chunk's records are tagged and written inside one transaction, so a
failing chunk leaves none of its rows changed while earlier chunks stay
committed.  Finalization then overwrites every known account with the last
identifier, which repairs records written before later collisions.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from tempgroup.batch.chunk import ChunkProcessor, chunked
from tempgroup.batch.params import JobParameters
from tempgroup.batch.reader import ChunkReader
from tempgroup.batch.status import JobExecution, StepExecution
from tempgroup.batch.writer import ChunkWriter
from tempgroup.core.errors import ChunkWriteError, FinalizationError, TempGroupError
from tempgroup.core.logging import get_logger
from tempgroup.core.timing import log_step
from tempgroup.grouping.grouper import Grouper
from tempgroup.store.protocols import RecordStore

logger = get_logger(__name__)


class Step(Protocol):
    """One sequential unit of a job; raises to fail the step."""

    name: str

    def execute(self, job_execution: JobExecution, step_execution: StepExecution) -> None:
        ...


class GroupingStep:
    """Read, tag and write all records chunk by chunk."""

    name = "grouping"

    def __init__(
        self,
        store: RecordStore,
        grouper: Grouper,
        writer: ChunkWriter,
        params: JobParameters,
    ) -> None:
        self.store = store
        self.grouper = grouper
        self.writer = writer
        self.params = params

    def execute(self, job_execution: JobExecution, step_execution: StepExecution) -> None:
        params = self.params
        self.grouper.initialize(
            self.store,
            preload=params.preload_known_accounts,
            preload_threshold=params.preload_threshold,
        )

        reader = ChunkReader(self.store, params.page_size)
        with (
            log_step(
                "grouping.step",
                chunk_size=params.chunk_size,
                max_threads=params.max_threads,
                writer=self.writer.mode,
            ) as timer,
            ChunkProcessor(self.grouper.process, params.max_threads) as processor,
        ):
            for chunk_number, chunk in enumerate(chunked(reader, params.chunk_size), start=1):
                step_execution.read_count = reader.read_count
                step_execution.chunk_count = chunk_number
                written = self._write_chunk(chunk_number, chunk, processor, step_execution)
                step_execution.write_count += written
                step_execution.commit_count += 1
                logger.debug(
                    "grouping.chunk.committed",
                    chunk=chunk_number,
                    records=written,
                    total_written=step_execution.write_count,
                )

            step_execution.read_count = reader.read_count
            timer.add_metric("read_count", step_execution.read_count)
            timer.add_metric("write_count", step_execution.write_count)
            timer.add_metric("chunks", step_execution.chunk_count)

    def _write_chunk(
        self,
        chunk_number: int,
        chunk: list,
        processor: ChunkProcessor,
        step_execution: StepExecution,
    ) -> int:
        try:
            with self.store.transaction() as session:
                tagged = processor.process(chunk)
                return self.writer.write(session, tagged)
        except TempGroupError as e:
            step_execution.rollback_count += 1
            logger.warning("grouping.chunk.rolled_back", chunk=chunk_number, error=str(e))
            raise e.with_context(step=self.name, chunk=chunk_number)
        except SQLAlchemyError as e:
            step_execution.rollback_count += 1
            logger.warning("grouping.chunk.rolled_back", chunk=chunk_number, error=str(e))
            raise ChunkWriteError(
                f"Chunk {chunk_number} could not be committed: {e}", cause=e
            ).with_context(step=self.name, chunk=chunk_number) from e
        except Exception:
            step_execution.rollback_count += 1
            logger.warning("grouping.chunk.rolled_back", chunk=chunk_number)
            raise


class FinalizationStep:
    """Stamp the final identifier onto every record of every known account."""

    name = "finalization"

    def __init__(self, store: RecordStore, grouper: Grouper) -> None:
        self.store = store
        self.grouper = grouper

    def execute(self, job_execution: JobExecution, step_execution: StepExecution) -> None:
        identifier, known = self.grouper.finalize()
        job_execution.final_identifier = identifier
        job_execution.known_accounts = len(known)

        if not known:
            logger.info("finalization.skipped", reason="no known accounts")
            return

        with log_step("finalization.reconcile", identifier=identifier, accounts=len(known)) as timer:
            try:
                with self.store.transaction() as session:
                    updated = self.store.batch_update_temp_id(session, identifier, known)
            except SQLAlchemyError as e:
                raise FinalizationError(
                    f"Final temp_id reconciliation failed: {e}", cause=e
                ).with_context(step=self.name, identifier=identifier) from e
            timer.add_metric("rows_updated", updated)

        step_execution.write_count = updated
        step_execution.commit_count = 1
