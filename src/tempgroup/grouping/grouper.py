"""Grouper - tags records whose account id repeats within a run.

Per record, with ``account_id = record.account_id``:

1. First sighting: remember the account; it is tagged with the current
   global identifier.
2. Collision (account already seen this run): mint a new identifier, make
   it the current global identifier, and retag *every* known account with
   it, not only the colliding one.
3. Stamp the current global identifier onto the record and return it.

Records written early in a run can therefore carry identifiers that later
collisions superseded; :meth:`Grouper.finalize` hands the final identifier
and the full account set to the finalization step, which rewrites them all.

Concurrency
-----------
``process`` may be called from many pool workers at once.  The membership
test, the optional mint-and-retag and the stamp run as one critical section
under a single lock; only the surrounding I/O runs in parallel.  Splitting
the sequence across concurrent containers would let two workers both see a
"new" account, or interleave one worker's retag with another's stamp.

Cost
----
The literal retag is O(known accounts) per collision and becomes the
dominant cost at millions of accounts.  :class:`RunState` keeps the tag as
one shared generation instead, so a collision is O(1) with the same
observable mapping.

The collision rule yields one identifier shared by the whole history of
collisions in a run, not one identifier per connected group of accounts.
"""

from __future__ import annotations

import threading

from tempgroup.core.errors import JobError, PreloadError, ValidationError
from tempgroup.core.logging import get_logger
from tempgroup.grouping.state import RunState
from tempgroup.store.models import Record
from tempgroup.store.protocols import RecordStore

logger = get_logger(__name__)

SUMMARY_FREQUENCY = 100_000


class Grouper:
    """Stateful record tagger for one run.

    Args:
        state: The run's state (owned by the job, passed by reference)
        log_frequency: Log a progress line every N processed records
        summary_frequency: Log a state summary every N processed records
    """

    def __init__(
        self,
        state: RunState,
        *,
        log_frequency: int = 10000,
        summary_frequency: int = SUMMARY_FREQUENCY,
    ) -> None:
        self.state = state
        self.log_frequency = max(1, log_frequency)
        self.summary_frequency = max(1, summary_frequency)
        self._lock = threading.Lock()

    def initialize(
        self,
        store: RecordStore | None = None,
        *,
        preload: bool = False,
        preload_threshold: int = 100_000,
    ) -> None:
        """Seed the current identifier and optionally warm the account cache.

        The cache is warmed from ``store.distinct_account_ids()`` only when
        that snapshot holds fewer than *preload_threshold* accounts; larger
        stores build the cache incrementally.  A failing lookup is logged
        and ignored.
        """
        with self._lock:
            self.state.current_global_identifier = self.state.generator.next()

        logger.info("grouper.initialized", identifier=self.state.current_global_identifier)

        if not preload or store is None:
            return

        try:
            existing = store.distinct_account_ids()
        except Exception as e:
            error = PreloadError("Distinct account id lookup failed; building cache incrementally", cause=e)
            logger.warning("grouper.preload_failed", **error.to_dict(), exc_info=True)
            return

        if len(existing) >= preload_threshold:
            logger.info(
                "grouper.preload_skipped",
                accounts=len(existing),
                threshold=preload_threshold,
            )
            return

        with self._lock:
            self.state.known_account_ids.update(existing)
        logger.info("grouper.preloaded", accounts=len(existing))

    def process(self, record: Record) -> Record:
        """Tag *record* with the current global identifier.

        Raises:
            ValidationError: The record has no account id.
            JobError: ``initialize()`` was never called.
        """
        account_id = record.account_id
        if not account_id:
            raise ValidationError(
                "Record has no account id",
                field="account_id",
                value=account_id,
            ).with_context(record_id=record.id)

        state = self.state
        with self._lock:
            if state.current_global_identifier is None:
                raise JobError("Grouper.process() called before initialize()")

            if account_id not in state.known_account_ids:
                state.known_account_ids.add(account_id)
            else:
                state.retag_all()

            record.temp_id = state.current_global_identifier
            state.processed += 1
            processed = state.processed

        if processed % self.log_frequency == 0:
            logger.info("grouper.progress", processed=processed)
        if processed % self.summary_frequency == 0:
            logger.info("grouper.summary", **state.snapshot())

        return record

    def finalize(self) -> tuple[str, frozenset[str]]:
        """Return the final identifier and every account known to this run.

        Pure read; calling it again without further ``process`` calls
        returns equal values.
        """
        with self._lock:
            if self.state.current_global_identifier is None:
                raise JobError("Grouper.finalize() called before initialize()")
            return self.state.current_global_identifier, frozenset(self.state.known_account_ids)
