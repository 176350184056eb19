"""
Batch pipeline: parameters, reader, writers, steps, the grouping job and
its execution ledger.
"""

from tempgroup.batch.chunk import ChunkProcessor, chunked
from tempgroup.batch.job import GroupingJob
from tempgroup.batch.ledger import JobLedger
from tempgroup.batch.params import JobParameters
from tempgroup.batch.reader import ChunkReader
from tempgroup.batch.status import JobExecution, JobStatus, StepExecution, StepStatus
from tempgroup.batch.steps import FinalizationStep, GroupingStep
from tempgroup.batch.writer import BatchTempIdWriter, ChunkWriter, RecordUpsertWriter, make_writer

__all__ = [
    "BatchTempIdWriter",
    "ChunkProcessor",
    "ChunkReader",
    "ChunkWriter",
    "FinalizationStep",
    "GroupingJob",
    "GroupingStep",
    "JobExecution",
    "JobLedger",
    "JobParameters",
    "JobStatus",
    "RecordUpsertWriter",
    "StepExecution",
    "StepStatus",
    "chunked",
    "make_writer",
]
