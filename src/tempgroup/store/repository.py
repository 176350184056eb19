"""SQLAlchemy-backed record store.

:class:`SqlRecordStore` implements :class:`~tempgroup.store.protocols.RecordStore`
over a SQLAlchemy engine.  Reads use short-lived sessions (one per page);
writes run inside the session of a caller-owned ``transaction()``.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                        SqlRecordStore                              │
    │                                                                    │
    │   engine ──► sessionmaker(expire_on_commit=False)                  │
    │                                                                    │
    │   read side (own sessions)       write side (caller's session)     │
    │   ────────────────────────       ─────────────────────────────     │
    │   max_id()                       update_temp_ids()   executemany   │
    │   fetch_page()  keyset paging    batch_update_temp_id()  IN (...)  │
    │   paged_scan()                   batch_upsert_records()  merge     │
    │   distinct_account_ids()                                           │
    │   count() / list_records()       insert_records()  own transaction │
    └────────────────────────────────────────────────────────────────────┘

Usage:
    >>> store = SqlRecordStore.from_url("memory", create_schema=True)
    >>> store.insert_records([Record(id=None, account_id="AC101")])
    1
    >>> with store.transaction() as session:
    ...     store.batch_update_temp_id(session, "T00000000000000", {"AC101"})
    1
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import bindparam, distinct, func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from tempgroup.core.errors import ChunkWriteError
from tempgroup.core.logging import get_logger
from tempgroup.store.models import Record
from tempgroup.store.orm import RecordTable, TempGroupBase
from tempgroup.store.session import create_store_engine, store_session_factory

logger = get_logger(__name__)

_address = RecordTable.__table__

# Keeps ``IN (...)`` lists under SQLite's bound-parameter limit.
IN_CLAUSE_BATCH = 500


def _row_to_record(row: Any) -> Record:
    return Record(
        id=row.id,
        account_id=row.account_id,
        group_key=row.group_key,
        org_id=row.org_id,
        temp_id=row.temp_id,
    )


class SqlRecordStore:
    """Record store over a SQLAlchemy engine.

    Parameters:
        engine: Engine for the database that holds the ``address`` table.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = store_session_factory(engine)

    @classmethod
    def from_url(cls, url: str | None = None, *, echo: bool = False, create_schema: bool = False) -> SqlRecordStore:
        """Build a store from a database URL, path, or ``"memory"``."""
        store = cls(create_store_engine(url, echo=echo))
        if create_schema:
            store.create_schema()
        return store

    def create_schema(self) -> None:
        """Create all tempgroup tables (idempotent)."""
        TempGroupBase.metadata.create_all(self.engine)

    def session(self) -> Session:
        """A new session bound to this store's engine."""
        return self._sessions()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Open a transaction; commit on clean exit, roll back on exception."""
        with self._sessions.begin() as session:
            yield session

    # -- Read side ---------------------------------------------------------

    def max_id(self) -> int | None:
        with self._sessions() as session:
            return session.execute(select(func.max(_address.c.id))).scalar()

    def count(self) -> int:
        with self._sessions() as session:
            return session.execute(select(func.count()).select_from(_address)).scalar_one()

    def fetch_page(self, after_id: int | None, limit: int, upto_id: int | None = None) -> list[Record]:
        stmt = select(_address)
        if after_id is not None:
            stmt = stmt.where(_address.c.id > after_id)
        if upto_id is not None:
            stmt = stmt.where(_address.c.id <= upto_id)
        stmt = stmt.order_by(_address.c.id).limit(limit)

        with self._sessions() as session:
            rows = session.execute(stmt).all()
        return [_row_to_record(row) for row in rows]

    def paged_scan(self, page_size: int) -> Iterator[Record]:
        upto_id = self.max_id()
        if upto_id is None:
            return
        after_id: int | None = None
        while True:
            page = self.fetch_page(after_id, page_size, upto_id)
            if not page:
                return
            yield from page
            if len(page) < page_size:
                return
            after_id = page[-1].id

    def distinct_account_ids(self) -> set[str]:
        with self._sessions() as session:
            return set(session.execute(select(distinct(_address.c.account_id))).scalars())

    def list_records(self, limit: int = 50, offset: int = 0) -> list[Record]:
        stmt = select(_address).order_by(_address.c.id).limit(limit).offset(offset)
        with self._sessions() as session:
            return [_row_to_record(row) for row in session.execute(stmt).all()]

    def records_for_account(self, account_id: str, limit: int | None = None, offset: int = 0) -> list[Record]:
        stmt = (
            select(_address)
            .where(_address.c.account_id == account_id)
            .order_by(_address.c.id)
            .limit(limit)
            .offset(offset)
        )
        with self._sessions() as session:
            return [_row_to_record(row) for row in session.execute(stmt).all()]

    # -- Write side (caller-owned transaction) -----------------------------

    def update_temp_ids(self, session: Session, records: Iterable[Record]) -> int:
        """Set ``temp_id`` by primary key with one ``executemany`` UPDATE.

        Raises:
            ChunkWriteError: A record has no id, or the driver reports fewer
                affected rows than records (some primary key is missing).
        """
        params = []
        for record in records:
            if record.id is None:
                raise ChunkWriteError(
                    "Cannot update a record without a primary key"
                ).with_context(account_id=record.account_id)
            params.append({"b_id": record.id, "b_temp_id": record.temp_id})
        if not params:
            return 0

        stmt = (
            update(_address)
            .where(_address.c.id == bindparam("b_id"))
            .values(temp_id=bindparam("b_temp_id"))
        )
        result = session.execute(stmt, params)

        dialect = session.get_bind().dialect
        if dialect.supports_sane_multi_rowcount and result.rowcount != len(params):
            raise ChunkWriteError(
                f"Batched update applied to {result.rowcount} of {len(params)} rows"
            ).with_context(expected=len(params), updated=result.rowcount)
        return len(params)

    def batch_update_temp_id(self, session: Session, identifier: str, account_ids: Iterable[str]) -> int:
        """Set ``temp_id = identifier`` for every record of the given accounts."""
        ordered = sorted(account_ids)
        updated = 0
        for start in range(0, len(ordered), IN_CLAUSE_BATCH):
            batch = ordered[start:start + IN_CLAUSE_BATCH]
            result = session.execute(
                update(_address).where(_address.c.account_id.in_(batch)).values(temp_id=identifier)
            )
            updated += result.rowcount
        return updated

    def batch_upsert_records(self, session: Session, records: Iterable[Record]) -> int:
        """Save whole records through the ORM (insert or replace by primary key)."""
        saved = 0
        for record in records:
            session.merge(
                RecordTable(
                    id=record.id,
                    org_id=record.org_id,
                    group_key=record.group_key,
                    account_id=record.account_id,
                    temp_id=record.temp_id,
                )
            )
            saved += 1
        session.flush()
        return saved

    # -- Ingest ------------------------------------------------------------

    def insert_records(self, records: Iterable[Record]) -> int:
        """Insert records in their own transaction; ids are assigned when None."""
        rows = []
        for record in records:
            row = record.to_dict()
            if row["id"] is None:
                del row["id"]
            rows.append(row)
        if not rows:
            return 0

        with_ids = [r for r in rows if "id" in r]
        without_ids = [r for r in rows if "id" not in r]
        with self.transaction() as session:
            if with_ids:
                session.execute(insert(_address), with_ids)
            if without_ids:
                session.execute(insert(_address), without_ids)
        logger.debug("store.records_inserted", count=len(rows))
        return len(rows)

    def __repr__(self) -> str:
        return f"SqlRecordStore({self.engine.url!r})"


__all__ = ["SqlRecordStore", "IN_CLAUSE_BATCH"]
