"""Application state: the in-memory entry store and the active view over it."""

import logging
from pathlib import Path
from typing import Iterator

import aiofiles
import aiofiles.os

from .config import Settings
from .core.entries import EntriesDTO, Entry, EntryDraft
from .errors import DataError
from .core.filter import Filter, cycle_tag_filter, filter_entries, get_all_tags
from .core.sorter import Sorter, sort_entries
from .ports.data_provider import DataProvider
from .state import AppState

logger = logging.getLogger(__name__)


class App:
    """
    Authoritative working set of entries plus filter, sort and selection.

    Storage calls are awaited before the in-memory store changes, so a failed
    call leaves the store untouched. `current_entry_id` always points at an
    entry of the active view, or is None when the view is empty.
    """

    def __init__(self, settings: Settings, data_provider: DataProvider, state: AppState | None = None):
        self.settings = settings
        self.data_provider = data_provider
        self.state = state or AppState()
        self.entries: list[Entry] = []
        self.filter: Filter | None = None
        self.current_entry_id: int | None = None

    # ---- active view ----

    def active_entries(self) -> Iterator[Entry]:
        """Filtered and sorted view of the store, recomputed on every call."""
        yield from sort_entries(filter_entries(self.entries, self.filter), self.state.sorter)

    def active_ids(self) -> list[int]:
        return [entry.id for entry in self.active_entries()]

    def get_entry(self, entry_id: int) -> Entry | None:
        return next((e for e in self.entries if e.id == entry_id), None)

    def get_current_entry(self) -> Entry | None:
        if self.current_entry_id is None:
            return None
        return self.get_entry(self.current_entry_id)

    def get_all_tags(self) -> list[str]:
        return get_all_tags(self.entries)

    def current_index(self) -> int | None:
        ids = self.active_ids()
        if self.current_entry_id in ids:
            return ids.index(self.current_entry_id)
        return None

    def set_current_entry(self, entry_id: int | None) -> None:
        """Select an entry of the active view. Unknown ids fall back to the first entry."""
        ids = self.active_ids()
        if entry_id in ids:
            self.current_entry_id = entry_id
        else:
            self.current_entry_id = ids[0] if ids else None

    def _revalidate_current(self) -> None:
        if self.current_entry_id not in self.active_ids():
            self.set_current_entry(None)

    # ---- navigation ----

    def next_entry_id(self, step: int = 1) -> int | None:
        """Entry `step` positions down, landing on the last entry past the end."""
        ids = self.active_ids()
        index = self.current_index()
        if not ids or index is None:
            return None
        return ids[min(index + step, len(ids) - 1)]

    def prev_entry_id(self, step: int = 1) -> int | None:
        """Entry `step` positions up, saturating at the first entry."""
        ids = self.active_ids()
        index = self.current_index()
        if not ids or index is None:
            return None
        return ids[max(index - step, 0)]

    def first_entry_id(self) -> int | None:
        return next((e.id for e in self.active_entries()), None)

    def last_entry_id(self) -> int | None:
        ids = self.active_ids()
        return ids[-1] if ids else None

    # ---- storage ----

    async def load_entries(self) -> None:
        """Load all entries from storage, keeping the selection when still visible."""
        self.entries = await self.data_provider.load_all_entries()
        logger.debug(f"Loaded {len(self.entries)} entries")
        self._revalidate_current()

    async def add_entry(self, draft: EntryDraft) -> Entry:
        entry = await self.data_provider.add_entry(draft)
        self.entries.append(entry)
        self.set_current_entry(entry.id)
        return entry

    async def update_entry(self, entry: Entry) -> Entry:
        updated = await self.data_provider.update_entry(entry)
        self.entries = [updated if e.id == updated.id else e for e in self.entries]
        self._revalidate_current()
        return updated

    async def delete_entry(self, entry_id: int) -> None:
        """Remove an entry; a selection pointing at it moves to its neighbour."""
        ids = self.active_ids()
        await self.data_provider.remove_entry(entry_id)
        self.entries = [e for e in self.entries if e.id != entry_id]

        if self.current_entry_id != entry_id:
            self._revalidate_current()
            return

        index = ids.index(entry_id) if entry_id in ids else 0
        remaining = [i for i in ids if i != entry_id]
        if remaining:
            self.current_entry_id = remaining[min(index, len(remaining) - 1)]
        else:
            self.current_entry_id = None

    async def export_entry_content(self, entry_id: int, path: Path) -> None:
        """Write the content of one entry to a text file."""
        entry = self.get_entry(entry_id)
        if entry is None:
            raise DataError(f"Entry to export not found. id: {entry_id}")

        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(entry.content)
        except OSError as e:
            logger.error(f"Exporting entry {entry_id} failed: {e}")
            raise DataError(f"Can't write {path}: {e}") from e

    async def export_entries(self, entry_ids: list[int]) -> EntriesDTO:
        return await self.data_provider.get_export_object(entry_ids)

    async def import_entries(self, dto: EntriesDTO, allow_version_mismatch: bool = False) -> None:
        """Import entries and reload the store, also after a failure part-way through."""
        try:
            await self.data_provider.import_entries(dto, allow_version_mismatch=allow_version_mismatch)
        finally:
            await self.load_entries()

    # ---- filter & sort ----

    def apply_filter(self, new_filter: Filter | None) -> None:
        if new_filter is not None and new_filter.is_empty():
            new_filter = None
        self.filter = new_filter
        self._revalidate_current()

    def cycle_tags_in_filter(self) -> None:
        self.apply_filter(cycle_tag_filter(self.filter, self.get_all_tags()))

    def apply_sort(self, sorter: Sorter) -> None:
        self.state.sorter = sorter
        self._save_state()

    def toggle_full_screen(self) -> None:
        self.state.full_screen = not self.state.full_screen
        self._save_state()

    def _save_state(self) -> None:
        try:
            self.state.save(self.settings)
        except OSError as e:
            logger.error(f"Saving app state failed: {e}")
