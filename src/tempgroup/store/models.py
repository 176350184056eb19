"""Record - the unit the grouping job reads, tags and writes back."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class Record:
    """An address-like record.

    ``id`` is the immutable primary key; ``temp_id`` is the only field the
    job mutates.  ``group_key`` and ``org_id`` travel with the record but
    play no part in grouping.
    """

    id: int | None
    account_id: str
    group_key: str | None = None
    org_id: str | None = None
    temp_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        return (
            f"OrgID: {self.org_id}, GroupKey: {self.group_key}, "
            f"AccountID: {self.account_id}, TempID: {self.temp_id}"
        )
