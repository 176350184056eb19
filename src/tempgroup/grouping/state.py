"""Run state - everything the grouper remembers during one job execution.

A :class:`RunState` is created fresh by the job at run start, handed to the
:class:`~tempgroup.grouping.grouper.Grouper`, and dropped when the run
ends.  Nothing here is global, so any number of independent runs (in tests,
for instance) can coexist.

Account tags
------------
Every collision retags *all* known accounts with the freshly minted
identifier, and a newly seen account is tagged with the current identifier.
Taken together, every known account always maps to
``current_global_identifier``.  Copying the identifier into one map entry
per account on each collision would make a collision cost O(known accounts),
which dominates runtime once millions of accounts are known.  Instead the
state keeps the tag once, as a shared generation, and exposes
``account_to_identifier`` as a read-only view that resolves every known
account through it: a collision costs O(1) and the observable mapping is the
same as the per-account rewrite.

Not thread-safe on its own; the grouper serializes every mutation.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from tempgroup.grouping.identifiers import IdentifierGenerator


class AccountIdentifierView(Mapping[str, str]):
    """Read-only ``account id -> identifier`` mapping over a :class:`RunState`."""

    def __init__(self, state: RunState) -> None:
        self._state = state

    def __getitem__(self, account_id: str) -> str:
        if account_id not in self._state.known_account_ids:
            raise KeyError(account_id)
        return self._state.current_global_identifier

    def __iter__(self) -> Iterator[str]:
        return iter(self._state.known_account_ids)

    def __len__(self) -> int:
        return len(self._state.known_account_ids)

    def __repr__(self) -> str:
        return f"AccountIdentifierView(accounts={len(self)}, identifier={self._state.current_global_identifier!r})"


@dataclass
class RunState:
    """Per-run grouping state.

    Attributes:
        generator: Identifier source for this run
        known_account_ids: Account ids seen so far (plus any preloaded ones)
        current_global_identifier: Identifier stamped onto the next record;
            None until the grouper initializes the run
        generation: Number of identifiers minted by collisions
        processed: Records processed so far
    """

    generator: IdentifierGenerator = field(default_factory=IdentifierGenerator)
    known_account_ids: set[str] = field(default_factory=set)
    current_global_identifier: str | None = None
    generation: int = 0
    processed: int = 0

    @property
    def account_to_identifier(self) -> AccountIdentifierView:
        return AccountIdentifierView(self)

    @property
    def collisions(self) -> int:
        return self.generation

    def retag_all(self) -> str:
        """Mint a new identifier and make it the tag of every known account."""
        self.current_global_identifier = self.generator.next()
        self.generation += 1
        return self.current_global_identifier

    def snapshot(self) -> dict[str, object]:
        """Small summary for logs and job results."""
        return {
            "current_global_identifier": self.current_global_identifier,
            "known_accounts": len(self.known_account_ids),
            "collisions": self.generation,
            "processed": self.processed,
        }
