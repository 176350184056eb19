"""Chunk processing - split the record stream and tag chunks in parallel.

:func:`chunked` cuts the reader's stream into lists of ``chunk_size``
records.  :class:`ChunkProcessor` runs the grouper over one chunk on a
fixed-size thread pool and returns the tagged records in input order, so
the writer always sees a chunk in id order.

The pool is created once per step and reused for every chunk.  Each task
runs in a copy of the submitting thread's context, so log fields bound
by the job (execution id, step) reach the workers' log lines.
"""

from __future__ import annotations

import contextvars
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from itertools import islice
from typing import TypeVar

from tempgroup.store.models import Record

T = TypeVar("T")


def chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive lists of *size* items; the last one may be shorter.

    Example:
        >>> list(chunked(range(5), 2))
        [[0, 1], [2, 3], [4]]
    """
    if size <= 0:
        raise ValueError("chunk size must be positive")
    iterator = iter(items)
    while batch := list(islice(iterator, size)):
        yield batch


class ChunkProcessor:
    """Apply a per-record function to a chunk on a bounded thread pool.

    With ``max_threads == 1`` records are processed inline on the calling
    thread and no pool is started.

    Usage:
        >>> with ChunkProcessor(grouper.process, max_threads=4) as processor:
        ...     tagged = processor.process(chunk)
    """

    def __init__(self, fn: Callable[[Record], Record], max_threads: int = 1) -> None:
        if max_threads <= 0:
            raise ValueError("max_threads must be positive")
        self.fn = fn
        self.max_threads = max_threads
        self._pool: ThreadPoolExecutor | None = None
        if max_threads > 1:
            self._pool = ThreadPoolExecutor(
                max_workers=max_threads,
                thread_name_prefix="tempgroup-worker",
            )

    def process(self, chunk: list[Record]) -> list[Record]:
        """Return ``[fn(r) for r in chunk]``; the first worker error propagates."""
        if self._pool is None:
            return [self.fn(record) for record in chunk]

        futures = [
            self._pool.submit(contextvars.copy_context().run, self.fn, record)
            for record in chunk
        ]
        try:
            return [future.result() for future in futures]
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True, cancel_futures=True)
            self._pool = None

    def __enter__(self) -> ChunkProcessor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
