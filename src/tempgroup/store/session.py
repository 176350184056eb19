"""SQLAlchemy engine factory and session maker.

* ``create_store_engine``   -- Create an engine from a URL with SQLite tweaks.
* ``store_session_factory`` -- ``sessionmaker`` with ``expire_on_commit=False``.

Supported URLs
--------------
==================  ==========================================  ============
Form                Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` / ``:memory:`` / ``sqlite://``    SQLite RAM
``sqlite``          ``sqlite:///path/to/file.db``                SQLite file
``(file path)``     ``./data/records.db``                        SQLite file
``postgresql``      ``postgresql://user:pw@host:port/db``        PostgreSQL
==================  ==========================================  ============
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def normalize_database_url(db: str | None) -> str:
    """Turn a keyword, bare path or URL into a SQLAlchemy URL.

    Examples:
        >>> normalize_database_url(None)
        'sqlite://'
        >>> normalize_database_url("data/records.db")
        'sqlite:///data/records.db'
        >>> normalize_database_url("postgres://u:p@h/db")
        'postgresql://u:p@h/db'
    """
    if db is None or db in ("", "memory", ":memory:", "sqlite://", "sqlite:///:memory:"):
        return "sqlite://"
    if db.startswith("postgres://"):
        return "postgresql://" + db[len("postgres://"):]
    if "://" in db:
        return db
    return f"sqlite:///{db}"


def create_store_engine(url: str | None = None, *, echo: bool = False, **kwargs: Any) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    In-memory SQLite shares one connection across threads (``StaticPool``)
    so that every session sees the same database.  File SQLite runs in WAL
    mode.  Other backends get SQLAlchemy's default pool.
    """
    url = normalize_database_url(url)

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        in_memory = url == "sqlite://"
        if in_memory:
            kwargs.setdefault("poolclass", StaticPool)
        else:
            path = url[len("sqlite:///"):]
            Path(path).parent.mkdir(parents=True, exist_ok=True)

        engine = _sa_create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return _sa_create_engine(url, echo=echo, **kwargs)


def store_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a ``sessionmaker`` bound to *engine* with ``expire_on_commit=False``."""
    return sessionmaker(bind=engine, expire_on_commit=False)
