"""
Shared pytest fixtures and configuration for tempgroup tests.

This module provides:
- In-memory record stores (empty and seeded with the sample records)
- A deterministic identifier generator
- Settings and logging isolation between tests

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    def test_something(sample_store):
        assert sample_store.count() == 9
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

# Ensure tempgroup package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import tempgroup.core.logging as tempgroup_logging
from tempgroup.core.settings import clear_settings_cache
from tempgroup.grouping.identifiers import IdentifierGenerator
from tempgroup.seed import seed_sample
from tempgroup.store.models import Record
from tempgroup.store.repository import SqlRecordStore


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        if "golden" in str(test_path) or "_golden" in item.name:
            item.add_marker(pytest.mark.golden)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "golden"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_settings_and_logging() -> Generator[None, None, None]:
    """Drop cached settings and structlog configuration around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    tempgroup_logging._configured = False


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def memory_store() -> Generator[SqlRecordStore, None, None]:
    """Empty in-memory store with the schema created."""
    store = SqlRecordStore.from_url("memory", create_schema=True)
    yield store
    store.engine.dispose()


@pytest.fixture
def sample_store(memory_store: SqlRecordStore) -> SqlRecordStore:
    """In-memory store holding the nine sample records (ids 1..9)."""
    seed_sample(memory_store)
    return memory_store


@pytest.fixture
def file_database(tmp_path: Path) -> str:
    """Path of a SQLite file database under the test's tmp dir."""
    return str(tmp_path / "tempgroup.db")


@pytest.fixture
def make_records():
    """Factory for unsaved records with the given account ids."""

    def _make(account_ids: list[str]) -> list[Record]:
        return [Record(id=None, account_id=account_id, org_id="org1", group_key="A") for account_id in account_ids]

    return _make


# =============================================================================
# Deterministic Generators
# =============================================================================


@pytest.fixture
def generator() -> IdentifierGenerator:
    """Identifier generator starting at T00000000000000."""
    return IdentifierGenerator()


@pytest.fixture
def sample_accounts() -> list[str]:
    """Account ids of the sample records, in id order."""
    return ["AC101", "AC102", "AC103", "AC104", "AC101", "AC102", "AC101", "AC103", "AC102"]
