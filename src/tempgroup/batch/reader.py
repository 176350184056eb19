"""Chunk reader - paged, ordered, exactly-once scan of the record store.

The reader drives ``RecordStore.paged_scan``, which walks the store with
keyset pagination::

    page 1: id <= upto            ORDER BY id LIMIT page_size
    page n: last_id < id <= upto  ORDER BY id LIMIT page_size

``upto`` is the highest id present when the scan starts, so records
inserted mid-run are not picked up, and keying on the last seen id rather
than an offset means no record is skipped or read twice.  Iterating the
reader again starts a new scan.
"""

from __future__ import annotations

from collections.abc import Iterator

from tempgroup.core.errors import ParameterError
from tempgroup.core.logging import get_logger
from tempgroup.store.models import Record
from tempgroup.store.protocols import RecordStore

logger = get_logger(__name__)


class ChunkReader:
    """Lazy record source for the grouping step.

    Args:
        store: Record store to scan
        page_size: Records fetched per round trip
    """

    def __init__(self, store: RecordStore, page_size: int) -> None:
        if page_size <= 0:
            raise ParameterError("page_size must be positive", field="page_size", value=page_size)
        self.store = store
        self.page_size = page_size
        self.read_count = 0
        self.page_count = 0

    def __iter__(self) -> Iterator[Record]:
        self.read_count = 0
        self.page_count = 0

        for record in self.store.paged_scan(self.page_size):
            # Every page but the last is full
            if self.read_count % self.page_size == 0:
                self.page_count += 1
                logger.debug("reader.page", page=self.page_count, first_id=record.id)
            self.read_count += 1
            yield record

        if self.read_count == 0:
            logger.info("reader.empty_store")
            return
        logger.info("reader.exhausted", records=self.read_count, pages=self.page_count)
