"""Unit tests for tempgroup.grouping.identifiers.

Tests token format, monotonic minting, reset and thread safety.
"""

import threading

import pytest

from tempgroup.core.errors import ValidationError
from tempgroup.grouping.identifiers import IdentifierGenerator, format_identifier


class TestFormat:
    """Token rendering."""

    def test_zero(self):
        assert format_identifier(0) == "T00000000000000"

    def test_padding(self):
        assert format_identifier(42) == "T00000000000042"

    def test_token_length(self):
        assert len(format_identifier(123456)) == 15


class TestNext:
    """Minting order."""

    def test_first_tokens(self, generator):
        assert generator.next() == "T00000000000000"
        assert generator.next() == "T00000000000001"
        assert generator.next() == "T00000000000002"

    def test_custom_start(self):
        gen = IdentifierGenerator(start=99)
        assert gen.next() == "T00000000000099"
        assert gen.next() == "T00000000000100"

    def test_negative_start_rejected(self):
        with pytest.raises(ValidationError):
            IdentifierGenerator(start=-1)

    def test_minted_and_peek(self, generator):
        generator.next()
        generator.next()
        assert generator.minted == 2
        assert generator.peek == "T00000000000002"
        # peek does not consume
        assert generator.next() == "T00000000000002"

    def test_reset(self, generator):
        generator.next()
        generator.next()
        generator.reset()
        assert generator.minted == 0
        assert generator.next() == "T00000000000000"

    def test_reset_to_value(self, generator):
        generator.reset(10)
        assert generator.next() == "T00000000000010"


class TestParse:
    """Token parsing."""

    def test_round_trip_value(self):
        assert IdentifierGenerator.parse("T00000000000017") == 17

    @pytest.mark.parametrize("token", ["", "T123", "X00000000000001", "T0000000000000a", "T000000000000001", None])
    def test_malformed(self, token):
        with pytest.raises(ValidationError):
            IdentifierGenerator.parse(token)


class TestConcurrency:
    """Concurrent minting hands out distinct, gapless values."""

    def test_threads_get_distinct_tokens(self, generator):
        per_thread = 500
        thread_count = 8
        results: list[list[str]] = [[] for _ in range(thread_count)]

        def mint(slot: int) -> None:
            for _ in range(per_thread):
                results[slot].append(generator.next())

        threads = [threading.Thread(target=mint, args=(i,)) for i in range(thread_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        tokens = [token for batch in results for token in batch]
        assert len(set(tokens)) == per_thread * thread_count
        values = sorted(IdentifierGenerator.parse(t) for t in tokens)
        assert values == list(range(per_thread * thread_count))

    def test_each_thread_sees_increasing_tokens(self, generator):
        results: list[list[str]] = [[] for _ in range(4)]

        def mint(slot: int) -> None:
            for _ in range(200):
                results[slot].append(generator.next())

        threads = [threading.Thread(target=mint, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for batch in results:
            assert batch == sorted(batch)
