"""Tests for tempgroup.store.session - URL normalization and engine factory."""

import pytest
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from tempgroup.store.session import create_store_engine, normalize_database_url, store_session_factory


class TestNormalizeUrl:
    @pytest.mark.parametrize("value", [None, "", "memory", ":memory:", "sqlite://", "sqlite:///:memory:"])
    def test_memory_forms(self, value):
        assert normalize_database_url(value) == "sqlite://"

    def test_bare_path(self):
        assert normalize_database_url("data/records.db") == "sqlite:///data/records.db"

    def test_postgres_scheme(self):
        assert normalize_database_url("postgres://u:p@h/db") == "postgresql://u:p@h/db"

    def test_url_passthrough(self):
        assert normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


class TestCreateEngine:
    def test_memory_uses_static_pool(self):
        engine = create_store_engine("memory")
        assert isinstance(engine.pool, StaticPool)
        engine.dispose()

    def test_memory_shared_between_sessions(self):
        engine = create_store_engine("memory")
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE t (x INTEGER)"))
            conn.execute(text("INSERT INTO t VALUES (1)"))
        with engine.connect() as conn:
            assert conn.execute(text("SELECT count(*) FROM t")).scalar() == 1
        engine.dispose()

    def test_file_creates_parent_dir_and_wal(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "db.sqlite"
        engine = create_store_engine(str(path))
        with engine.connect() as conn:
            mode = conn.execute(text("PRAGMA journal_mode")).scalar()
        assert path.parent.is_dir()
        assert mode.lower() == "wal"
        engine.dispose()

    def test_foreign_keys_enabled(self):
        engine = create_store_engine("memory")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        engine.dispose()


class TestSessionFactory:
    def test_expire_on_commit_disabled(self):
        engine = create_store_engine("memory")
        factory = store_session_factory(engine)
        assert factory.kw["expire_on_commit"] is False
        engine.dispose()
