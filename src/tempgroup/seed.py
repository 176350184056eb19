"""Sample and synthetic record data for demos, tests and load runs."""

from __future__ import annotations

import random
from collections.abc import Iterator

from tempgroup.batch.chunk import chunked
from tempgroup.core.errors import ValidationError
from tempgroup.core.logging import get_logger
from tempgroup.store.models import Record
from tempgroup.store.repository import SqlRecordStore

logger = get_logger(__name__)

# (org_id, group_key, account_id)
SAMPLE_RECORDS: tuple[tuple[str, str, str], ...] = (
    ("org1", "A", "AC101"),
    ("org2", "B", "AC102"),
    ("org3", "C", "AC103"),
    ("org4", "A", "AC104"),
    ("org5", "E", "AC101"),
    ("org5", "D", "AC102"),
    ("org5", "B", "AC101"),
    ("org5", "A", "AC103"),
    ("org5", "A", "AC102"),
)

ORG_IDS = tuple(f"org{n}" for n in range(1, 11))
GROUP_KEYS = tuple("ABCDEFGHIJ")


def sample_records() -> list[Record]:
    """The nine sample records, without ids or temp ids."""
    return [
        Record(id=None, org_id=org_id, group_key=group_key, account_id=account_id)
        for org_id, group_key, account_id in SAMPLE_RECORDS
    ]


def seed_sample(store: SqlRecordStore) -> int:
    """Insert the sample records; returns the number inserted."""
    inserted = store.insert_records(sample_records())
    logger.info("seed.sample_inserted", records=inserted)
    return inserted


def generate_records(
    count: int,
    seed: int | None = None,
    account_pool: int | None = None,
) -> Iterator[Record]:
    """Yield *count* synthetic records.

    Orgs and group keys cycle through ten values each; account ids are
    drawn from a pool of *account_pool* ids (``count // 2`` by default), so
    roughly half the records repeat an earlier account.  The same *seed*
    yields the same records.
    """
    if count < 0:
        raise ValidationError("count must not be negative", field="count", value=count)
    pool = account_pool or max(1, count // 2)
    rng = random.Random(seed)
    for i in range(count):
        yield Record(
            id=None,
            org_id=ORG_IDS[i % len(ORG_IDS)],
            group_key=GROUP_KEYS[i % len(GROUP_KEYS)],
            account_id=f"AC{rng.randrange(pool):07d}",
        )


def seed_synthetic(
    store: SqlRecordStore,
    count: int,
    *,
    batch_size: int = 10_000,
    seed: int | None = None,
    account_pool: int | None = None,
) -> int:
    """Insert *count* synthetic records in batches of *batch_size*."""
    inserted = 0
    for batch in chunked(generate_records(count, seed, account_pool), batch_size):
        inserted += store.insert_records(batch)
        if inserted % 100_000 < batch_size:
            logger.info("seed.synthetic_progress", inserted=inserted, total=count)
    logger.info("seed.synthetic_inserted", records=inserted)
    return inserted
