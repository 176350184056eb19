"""Chunk writers - persist one chunk of tagged records.

Two modes share the :class:`ChunkWriter` protocol:

* ``batch`` (:class:`BatchTempIdWriter`) - one ``executemany`` UPDATE
  keyed on primary key, touching only ``temp_id``.
* ``upsert`` (:class:`RecordUpsertWriter`) - saves whole records through
  the ORM; slower, kept as the fallback for stores where the batched
  UPDATE is unavailable.

Writers never commit.  They run inside the session of the chunk
transaction the step opened, so a failure rolls back the whole chunk.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tempgroup.core.errors import ChunkWriteError, ParameterError
from tempgroup.store.models import Record
from tempgroup.store.protocols import RecordStore


@runtime_checkable
class ChunkWriter(Protocol):
    """Persists a chunk inside the caller's transaction; returns rows written."""

    mode: str

    def write(self, session: Session, records: Sequence[Record]) -> int:
        ...


class BatchTempIdWriter:
    """``UPDATE address SET temp_id = :temp_id WHERE id = :id`` for each record."""

    mode = "batch"

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def write(self, session: Session, records: Sequence[Record]) -> int:
        try:
            return self.store.update_temp_ids(session, records)
        except SQLAlchemyError as e:
            raise ChunkWriteError(f"Batched temp_id update failed: {e}", cause=e) from e


class RecordUpsertWriter:
    """Save each record whole (insert or replace by primary key)."""

    mode = "upsert"

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def write(self, session: Session, records: Sequence[Record]) -> int:
        try:
            return self.store.batch_upsert_records(session, records)
        except SQLAlchemyError as e:
            raise ChunkWriteError(f"Record upsert failed: {e}", cause=e) from e


WRITERS: dict[str, type[BatchTempIdWriter] | type[RecordUpsertWriter]] = {
    BatchTempIdWriter.mode: BatchTempIdWriter,
    RecordUpsertWriter.mode: RecordUpsertWriter,
}


def make_writer(mode: str, store: RecordStore) -> ChunkWriter:
    """Build the writer registered for *mode* (``"batch"`` or ``"upsert"``)."""
    try:
        writer_cls = WRITERS[mode]
    except KeyError:
        raise ParameterError(
            f"Unknown writer mode {mode!r}; expected one of {sorted(WRITERS)}",
            field="writer_mode",
            value=mode,
        ) from None
    return writer_cls(store)
