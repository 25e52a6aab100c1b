"""Pure journal entry records - no I/O dependencies."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

TRANSFER_DATA_VERSION = 100


def normalize_tags(tags) -> list[str]:
    """Strip tags, drop empty ones and dedupe while keeping the first occurrence."""
    seen = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def parse_date(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class EntryDraft:
    """Entry content without an identity. Either fresh or derived from an Entry."""

    date: datetime
    title: str
    content: str = ""
    tags: list[str] = field(default_factory=list)

    @classmethod
    def new(cls, date: datetime, title: str, tags: list[str] | None = None) -> "EntryDraft":
        return cls(date=date, title=title, content="", tags=normalize_tags(tags))

    @classmethod
    def from_entry(cls, entry: "Entry") -> "EntryDraft":
        return cls(
            date=entry.date,
            title=entry.title,
            content=entry.content,
            tags=list(entry.tags),
        )

    def with_content(self, content: str) -> "EntryDraft":
        return replace(self, content=content)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EntryDraft":
        return cls(
            date=parse_date(data["date"]),
            title=data["title"],
            content=data.get("content", ""),
            tags=normalize_tags(data.get("tags", [])),
        )


@dataclass(frozen=True)
class Entry:
    """A persisted journal record. Replaced as a whole on update, never edited in place."""

    id: int
    date: datetime
    title: str
    content: str
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_draft(cls, entry_id: int, draft: EntryDraft) -> "Entry":
        return cls(
            id=entry_id,
            date=draft.date,
            title=draft.title,
            content=draft.content,
            tags=normalize_tags(draft.tags),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, **EntryDraft.from_entry(self).to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "Entry":
        # Files written before tags existed have no "tags" key
        return cls.from_draft(int(data["id"]), EntryDraft.from_dict(data))


@dataclass
class EntriesDTO:
    """Export/import transfer envelope."""

    version: int
    entries: list[EntryDraft] = field(default_factory=list)

    @classmethod
    def new(cls, entries: list[EntryDraft]) -> "EntriesDTO":
        return cls(version=TRANSFER_DATA_VERSION, entries=list(entries))

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "entries": [draft.to_dict() for draft in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EntriesDTO":
        return cls(
            version=int(data["version"]),
            entries=[EntryDraft.from_dict(item) for item in data.get("entries", [])],
        )
