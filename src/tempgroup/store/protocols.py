"""
Record store contract consumed by the grouping job.

The job never imports a concrete store.  It reads, preloads, writes and
reconciles through this protocol, so the same job runs against SQLite,
PostgreSQL, or a test double that injects failures.

Architecture:
    ::

        RecordStore Protocol:
        ┌─────────────────────────────────────────────────────────────┐
        │ max_id()                          → upper bound of a scan    │
        │ fetch_page(after_id, limit, upto) → ordered page of Records  │
        │ paged_scan(page_size)             → Iterator[Record]         │
        │ distinct_account_ids()            → set[str]                 │
        │ transaction()                     → ctx manager → session    │
        │ update_temp_ids(session, records) → int   (by primary key)   │
        │ batch_update_temp_id(session, identifier, account_ids) → int │
        │ batch_upsert_records(session, records) → int  (fallback)     │
        └─────────────────────────────────────────────────────────────┘

        Implementations:
        ┌─────────────────────────────────────────────────────────────┐
        │ SqlRecordStore → SQLAlchemy engine (SQLite / PostgreSQL)     │
        └─────────────────────────────────────────────────────────────┘

Every write method takes the session of an open ``transaction()``; the
caller decides the transaction boundary (one chunk, or the finalization
unit), the store never commits on its own inside those calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from tempgroup.store.models import Record


@runtime_checkable
class RecordStore(Protocol):
    """Capability surface the grouping job needs from a record store."""

    def max_id(self) -> int | None:
        """Highest record id currently stored, or None when empty."""
        ...

    def fetch_page(self, after_id: int | None, limit: int, upto_id: int | None = None) -> list[Record]:
        """Records with ``after_id < id <= upto_id`` ordered by id, at most *limit*."""
        ...

    def paged_scan(self, page_size: int) -> Iterator[Record]:
        """Every record present at call time, ascending by id, fetched page by page."""
        ...

    def distinct_account_ids(self) -> set[str]:
        """Distinct account ids present in the store."""
        ...

    def transaction(self) -> AbstractContextManager[Any]:
        """Open a transaction; commit on clean exit, roll back on exception."""
        ...

    def update_temp_ids(self, session: Any, records: Iterable[Record]) -> int:
        """Set ``temp_id`` for each record by primary key in one batched statement."""
        ...

    def batch_update_temp_id(self, session: Any, identifier: str, account_ids: Iterable[str]) -> int:
        """Set ``temp_id = identifier`` on every record whose account id is listed."""
        ...

    def batch_upsert_records(self, session: Any, records: Iterable[Record]) -> int:
        """Save whole records (insert or replace by primary key)."""
        ...
