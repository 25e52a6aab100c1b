"""Shared test fixtures for jotter."""

from datetime import datetime, timezone

import pytest

from jotter.app import App
from jotter.config import Settings
from jotter.core.entries import EntriesDTO, Entry, EntryDraft
from jotter.errors import DataError
from jotter.ports.data_provider import DataProvider, validate_draft
from jotter.state import AppState
from jotter.ui.session import Session


class MemoryDataProvider(DataProvider):
    """In-memory DataProvider recording every call. Uses the protocol's default import."""

    def __init__(self, entries=()):
        self.entries = {e.id: e for e in entries}
        self.calls = []
        self.fail_writes_with: Exception | None = None

    @property
    def writes(self):
        return [c for c in self.calls if c[0] in ("add", "update", "remove")]

    def _check_failure(self):
        if self.fail_writes_with is not None:
            raise self.fail_writes_with

    async def load_all_entries(self):
        self.calls.append(("load",))
        return list(self.entries.values())

    async def add_entry(self, draft):
        self.calls.append(("add", draft))
        self._check_failure()
        validate_draft(draft)
        entry = Entry.from_draft(max(self.entries, default=0) + 1, draft)
        self.entries[entry.id] = entry
        return entry

    async def update_entry(self, entry):
        self.calls.append(("update", entry))
        self._check_failure()
        validate_draft(entry)
        if entry.id not in self.entries:
            raise DataError(f"Entry to modify not found. id: {entry.id}")
        self.entries[entry.id] = entry
        return entry

    async def remove_entry(self, entry_id):
        self.calls.append(("remove", entry_id))
        self._check_failure()
        if entry_id not in self.entries:
            raise DataError(f"Entry to remove not found. id: {entry_id}")
        del self.entries[entry_id]

    async def get_export_object(self, entry_ids):
        ids = entry_ids or sorted(self.entries)
        return EntriesDTO.new([EntryDraft.from_entry(self.entries[i]) for i in ids])


def make_entry(entry_id, day, title, tags=(), content=None):
    return Entry(
        id=entry_id,
        date=datetime(2025, 1, day, 9, 0, tzinfo=timezone.utc),
        title=title,
        content=content if content is not None else f"Content of {title}",
        tags=list(tags),
    )


@pytest.fixture
def sample_entries():
    """Six entries; the default newest-first view is ids 6, 5, 4, 3, 2, 1."""
    return [
        make_entry(1, 1, "Morning pages", ["work"]),
        make_entry(2, 2, "Groceries", ["home"]),
        make_entry(3, 3, "Standup notes", ["work", "meetings"]),
        make_entry(4, 4, "Weekend hike", ["outdoors"]),
        make_entry(5, 5, "Retro", ["work"]),
        make_entry(6, 6, "Book club", []),
    ]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        app_state_dir=str(tmp_path / "state"),
        export_default_path=str(tmp_path / "exports"),
        scroll_per_page=2,
    )


@pytest.fixture
def provider(sample_entries):
    return MemoryDataProvider(sample_entries)


@pytest.fixture
def app(settings, provider, sample_entries):
    app = App(settings, provider, AppState())
    app.entries = list(sample_entries)
    app.set_current_entry(None)
    return app


@pytest.fixture
def session(app):
    return Session(app)
