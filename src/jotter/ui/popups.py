"""Modal popups and the stack that owns them."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from difflib import SequenceMatcher
from enum import Enum, auto
from pathlib import Path

from jotter.core.entries import Entry, EntryDraft
from jotter.core.filter import Filter
from jotter.core.sorter import Sorter

from .states import UICommand


class MsgBoxType(Enum):
    QUESTION = auto()
    ERROR = auto()
    INFO = auto()


class MsgBoxActions(Enum):
    OK = auto()
    OK_CANCEL = auto()
    YES_NO = auto()
    YES_NO_CANCEL = auto()


class MsgBoxResult(Enum):
    OK = auto()
    CANCEL = auto()
    YES = auto()
    NO = auto()


ALLOWED_RESULTS = {
    MsgBoxActions.OK: {MsgBoxResult.OK},
    MsgBoxActions.OK_CANCEL: {MsgBoxResult.OK, MsgBoxResult.CANCEL},
    MsgBoxActions.YES_NO: {MsgBoxResult.YES, MsgBoxResult.NO},
    MsgBoxActions.YES_NO_CANCEL: {MsgBoxResult.YES, MsgBoxResult.NO, MsgBoxResult.CANCEL},
}


@dataclass
class MsgBox:
    """Message box. `origin` is the command resumed once the box resolves."""

    kind: MsgBoxType
    text: str
    actions: MsgBoxActions = MsgBoxActions.OK
    origin: UICommand | None = None

    def accepts(self, result: MsgBoxResult) -> bool:
        return result in ALLOWED_RESULTS[self.actions]


@dataclass
class EntryPopup:
    """Edits the metadata of a new draft (entry_id None) or of an existing entry."""

    draft: EntryDraft
    entry_id: int | None = None

    @classmethod
    def new_entry(cls, default_tags: list[str] | None = None) -> "EntryPopup":
        return cls(draft=EntryDraft.new(datetime.now(timezone.utc), "", default_tags))

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryPopup":
        return cls(draft=EntryDraft.from_entry(entry), entry_id=entry.id)

    @property
    def is_edit(self) -> bool:
        return self.entry_id is not None


@dataclass
class FilterPopup:
    all_tags: list[str]
    filter: Filter | None = None


@dataclass
class SortPopup:
    sorter: Sorter


@dataclass
class FuzzyFindPopup:
    """Jump to an entry by typing part of its title."""

    entries: dict[int, str]
    query: str = ""
    min_ratio: float = 50.0

    def matches(self) -> list[int]:
        """Entry ids ranked by match quality; substring matches rank first."""
        if not self.query:
            return sorted(self.entries)

        q = self.query.lower()
        scored: list[tuple[float, int]] = []
        for entry_id, title in self.entries.items():
            hay = title.lower()
            if q in hay:
                scored.append((100.0, entry_id))
            else:
                ratio = SequenceMatcher(None, q, hay).ratio() * 100
                if ratio > self.min_ratio:
                    scored.append((ratio, entry_id))
        scored.sort(key=lambda x: (-x[0], x[1]))
        return [entry_id for _, entry_id in scored]


@dataclass
class ExportPopup:
    """Exports the content of one entry to a text file."""

    entry_id: int
    path: Path

    @classmethod
    def create_entry_content(cls, entry: Entry, export_dir: Path) -> "ExportPopup":
        safe_title = "".join(c if c.isalnum() or c in "-_ " else "_" for c in entry.title).strip()
        return cls(entry_id=entry.id, path=export_dir / f"{safe_title or entry.id}.txt")


Popup = EntryPopup | FilterPopup | SortPopup | FuzzyFindPopup | ExportPopup | MsgBox


@dataclass
class PopupStack:
    """Ordered stack of modal popups. Only the top popup receives input."""

    _items: list[Popup] = field(default_factory=list)

    def push(self, popup: Popup) -> None:
        self._items.append(popup)

    def pop(self) -> Popup | None:
        return self._items.pop() if self._items else None

    def top(self) -> Popup | None:
        return self._items[-1] if self._items else None

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)
