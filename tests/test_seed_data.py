"""Tests for tempgroup.seed."""

import pytest

from tempgroup.core.errors import ValidationError
from tempgroup.seed import GROUP_KEYS, ORG_IDS, SAMPLE_RECORDS, generate_records, seed_sample, seed_synthetic


class TestSample:
    def test_seed_sample(self, memory_store, sample_accounts):
        assert seed_sample(memory_store) == 9
        records = memory_store.list_records()
        assert [r.account_id for r in records] == sample_accounts
        assert (records[4].org_id, records[4].group_key) == ("org5", "E")
        assert all(r.temp_id is None for r in records)

    def test_sample_table(self):
        assert len(SAMPLE_RECORDS) == 9
        assert SAMPLE_RECORDS[0] == ("org1", "A", "AC101")


class TestSynthetic:
    def test_count_and_cycles(self):
        records = list(generate_records(25, seed=1))
        assert len(records) == 25
        assert records[0].org_id == ORG_IDS[0]
        assert records[11].group_key == GROUP_KEYS[1]
        assert all(r.id is None for r in records)

    def test_deterministic_with_seed(self):
        first = [r.account_id for r in generate_records(50, seed=3)]
        second = [r.account_id for r in generate_records(50, seed=3)]
        assert first == second

    def test_account_pool_bounds_distinct_ids(self):
        records = list(generate_records(200, seed=5, account_pool=10))
        assert len({r.account_id for r in records}) <= 10

    def test_default_pool_has_repeats(self):
        records = list(generate_records(100, seed=9))
        assert len({r.account_id for r in records}) < 100

    def test_zero(self):
        assert list(generate_records(0)) == []

    def test_negative(self):
        with pytest.raises(ValidationError):
            list(generate_records(-1))

    def test_seed_synthetic_batches(self, memory_store):
        assert seed_synthetic(memory_store, 123, batch_size=50, seed=2) == 123
        assert memory_store.count() == 123
        assert memory_store.max_id() == 123
