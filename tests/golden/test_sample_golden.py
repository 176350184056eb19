"""Golden-value tests: the nine sample records always end on T00000000000005.

The final identifier depends only on how many records repeat an account
(9 records, 4 distinct accounts -> 5 collisions), so it must not move with
chunk size, page size, thread count or writer mode.
"""

import pytest

from tempgroup.batch.job import GroupingJob
from tempgroup.batch.params import JobParameters
from tempgroup.batch.status import JobStatus

GOLDEN_FINAL_IDENTIFIER = "T00000000000005"


class GroupingOnlyJob(GroupingJob):
    """Skips finalization so chunk-time tags stay visible."""

    def _build_steps(self, grouper):
        return super()._build_steps(grouper)[:1]


@pytest.mark.parametrize(
    "chunk_size,page_size,max_threads,writer_mode",
    [
        (1, 1, 1, "batch"),
        (2, 4, 1, "batch"),
        (3, 3, 2, "batch"),
        (4, 8, 4, "batch"),
        (9, 9, 8, "batch"),
        (1000, 10000, 4, "batch"),
        (2, 2, 3, "upsert"),
        (1000, 10000, 1, "upsert"),
    ],
)
def test_sample_final_identifier_golden(sample_store, chunk_size, page_size, max_threads, writer_mode):
    params = JobParameters(
        chunk_size=chunk_size,
        page_size=page_size,
        max_threads=max_threads,
        writer_mode=writer_mode,
    )
    execution = GroupingJob(sample_store, params).run()

    assert execution.status == JobStatus.COMPLETED
    assert execution.final_identifier == GOLDEN_FINAL_IDENTIFIER
    assert execution.known_accounts == 4
    assert {r.temp_id for r in sample_store.list_records()} == {GOLDEN_FINAL_IDENTIFIER}


def test_sample_chunk_time_tags_golden(sample_store):
    """Sequential single-chunk run, inspected before finalization rewrites the tags."""
    params = JobParameters(chunk_size=9, page_size=9, max_threads=1)
    execution = GroupingOnlyJob(sample_store, params).run()

    assert execution.status == JobStatus.COMPLETED
    assert [r.temp_id for r in sample_store.list_records()] == [
        "T00000000000000",
        "T00000000000000",
        "T00000000000000",
        "T00000000000000",
        "T00000000000001",
        "T00000000000002",
        "T00000000000003",
        "T00000000000004",
        "T00000000000005",
    ]
