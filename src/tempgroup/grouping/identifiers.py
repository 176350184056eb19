"""Identifier generator - strictly increasing ``T``-prefixed tokens.

Tokens are ``"T"`` followed by the zero-padded 14-digit decimal value of a
counter that starts at ``start`` (default 0) and increments atomically:

    T00000000000000, T00000000000001, T00000000000002, ...

The generator is an ordinary object owned by one run, not a module-level
counter, so tests can create, seed and reset it deterministically.

Example::

    gen = IdentifierGenerator()
    gen.next()   # 'T00000000000000'
    gen.next()   # 'T00000000000001'
    IdentifierGenerator.parse("T00000000000001")   # 1
"""

from __future__ import annotations

import re
import threading

from tempgroup.core.errors import ValidationError

TOKEN_PREFIX = "T"
TOKEN_DIGITS = 14
TOKEN_PATTERN = re.compile(rf"^{TOKEN_PREFIX}\d{{{TOKEN_DIGITS}}}$")


def format_identifier(value: int) -> str:
    """Render a counter value as a token."""
    return f"{TOKEN_PREFIX}{value:0{TOKEN_DIGITS}d}"


class IdentifierGenerator:
    """Thread-safe monotonic token source.

    ``next()`` may be called from any number of threads; every call gets a
    distinct counter value and values are handed out in increasing order.
    """

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValidationError("Identifier counter cannot start below zero", field="start", value=start)
        self._lock = threading.Lock()
        self._start = start
        self._next_value = start

    def next(self) -> str:
        """Mint the next token."""
        with self._lock:
            value = self._next_value
            self._next_value += 1
        return format_identifier(value)

    def reset(self, start: int = 0) -> None:
        """Restart the counter (tests and new runs only)."""
        with self._lock:
            self._start = start
            self._next_value = start

    @property
    def minted(self) -> int:
        """How many tokens this generator has issued since the last reset."""
        with self._lock:
            return self._next_value - self._start

    @property
    def peek(self) -> str:
        """The token the next ``next()`` call will return."""
        with self._lock:
            return format_identifier(self._next_value)

    @staticmethod
    def parse(token: str) -> int:
        """Recover the counter value from a token.

        Raises:
            ValidationError: If *token* is not ``T`` + 14 digits.
        """
        if not isinstance(token, str) or not TOKEN_PATTERN.match(token):
            raise ValidationError("Malformed identifier token", field="token", value=token)
        return int(token[len(TOKEN_PREFIX):])

    def __repr__(self) -> str:
        return f"IdentifierGenerator(next={self.peek!r})"
