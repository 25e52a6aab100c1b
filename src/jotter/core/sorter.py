"""Pure entry ordering logic - no I/O dependencies."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .entries import Entry


class SortKey(Enum):
    DATE = "date"
    TITLE = "title"


class SortDirection(Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class Sorter:
    """Sort order of the entries list. Newest first by default."""

    key: SortKey = SortKey.DATE
    direction: SortDirection = SortDirection.DESCENDING

    def to_dict(self) -> dict:
        return {"key": self.key.value, "direction": self.direction.value}

    @classmethod
    def from_dict(cls, data: dict) -> "Sorter":
        return cls(
            key=SortKey(data.get("key", SortKey.DATE.value)),
            direction=SortDirection(data.get("direction", SortDirection.DESCENDING.value)),
        )


def sort_entries(entries: Iterable[Entry], sorter: Sorter) -> list[Entry]:
    """
    Sort entries by the sorter's key and direction.

    Ties are always broken by id ascending, whatever the direction, so the
    order is total. Pure function - no I/O.
    """
    # Two stable passes: id ascending first, then the key in the chosen direction
    ordered = sorted(entries, key=lambda e: e.id)
    reverse = sorter.direction == SortDirection.DESCENDING

    match sorter.key:
        case SortKey.DATE:
            return sorted(ordered, key=lambda e: e.date, reverse=reverse)
        case SortKey.TITLE:
            return sorted(ordered, key=lambda e: e.title.lower(), reverse=reverse)
