"""
Record persistence: the ``Record`` model, ORM tables, engine factory and
the SQLAlchemy-backed :class:`SqlRecordStore`.
"""

from tempgroup.store.models import Record
from tempgroup.store.protocols import RecordStore
from tempgroup.store.repository import SqlRecordStore

__all__ = ["Record", "RecordStore", "SqlRecordStore"]
