"""
tempgroup - assign shared temporary grouping ids to records whose account id
repeats, as a chunked batch job over a SQL store.

Quick start::

    from tempgroup import GroupingJob, JobParameters, SqlRecordStore
    from tempgroup.seed import seed_sample

    store = SqlRecordStore.from_url("memory", create_schema=True)
    seed_sample(store)
    execution = GroupingJob(store, JobParameters(chunk_size=2, page_size=4)).run()
    execution.final_identifier  # 'T00000000000005'
"""

from tempgroup.batch import GroupingJob, JobExecution, JobLedger, JobParameters, JobStatus
from tempgroup.grouping import Grouper, IdentifierGenerator, RunState, format_identifier
from tempgroup.store import Record, RecordStore, SqlRecordStore

__version__ = "0.1.0"

__all__ = [
    "GroupingJob",
    "Grouper",
    "IdentifierGenerator",
    "JobExecution",
    "JobLedger",
    "JobParameters",
    "JobStatus",
    "Record",
    "RecordStore",
    "RunState",
    "SqlRecordStore",
    "format_identifier",
    "__version__",
]
