"""Flat-file journal storage adapter."""

import json
import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from jotter.core.entries import EntriesDTO, Entry, EntryDraft
from jotter.errors import DataError
from jotter.ports.data_provider import (
    DataProvider,
    check_transfer_version,
    take_valid_drafts,
    validate_draft,
)

logger = logging.getLogger(__name__)


class JsonDataProvider(DataProvider):
    """
    JSON file journal storage.

    Implements DataProvider protocol. The whole journal is one JSON list of
    entries, rewritten on every change.
    """

    def __init__(self, file_path: Path | str):
        self.file_path = Path(file_path).expanduser()
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    async def _read_entries(self) -> list[Entry]:
        """Read all entries from the file. A missing file is an empty journal."""
        if not await aiofiles.os.path.exists(self.file_path):
            return []

        try:
            async with aiofiles.open(self.file_path, "r", encoding="utf-8") as f:
                text = await f.read()
        except OSError as e:
            logger.error(f"Reading journal file failed: {e}")
            raise DataError(f"Can't read {self.file_path}: {e}") from e
        except UnicodeDecodeError as e:
            logger.error(f"Decoding journal file failed: {e}")
            raise DataError(f"Journal file {self.file_path} is corrupted: {e}") from e

        if not text.strip():
            return []

        try:
            return [Entry.from_dict(item) for item in json.loads(text)]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Parsing journal file failed: {e}")
            raise DataError(f"Journal file {self.file_path} is corrupted: {e}") from e

    async def _write_entries(self, entries: list[Entry]) -> None:
        """Overwrite the file with the given entries."""
        data = json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)
        try:
            async with aiofiles.open(self.file_path, "w", encoding="utf-8") as f:
                await f.write(data)
        except OSError as e:
            logger.error(f"Writing journal file failed: {e}")
            raise DataError(f"Can't write {self.file_path}: {e}") from e

    async def load_all_entries(self) -> list[Entry]:
        return await self._read_entries()

    async def add_entry(self, draft: EntryDraft) -> Entry:
        validate_draft(draft)

        entries = await self._read_entries()
        new_id = max((e.id for e in entries), default=0) + 1
        entry = Entry.from_draft(new_id, draft)
        entries.append(entry)
        await self._write_entries(entries)

        return entry

    async def update_entry(self, entry: Entry) -> Entry:
        validate_draft(entry)

        entries = await self._read_entries()
        for index, existing in enumerate(entries):
            if existing.id == entry.id:
                entries[index] = entry
                break
        else:
            raise DataError(f"Entry to modify not found. id: {entry.id}")

        await self._write_entries(entries)
        return entry

    async def remove_entry(self, entry_id: int) -> None:
        entries = await self._read_entries()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) == len(entries):
            raise DataError(f"Entry to remove not found. id: {entry_id}")

        await self._write_entries(remaining)

    async def get_export_object(self, entry_ids: list[int]) -> EntriesDTO:
        entries = await self._read_entries()
        if entry_ids:
            wanted = set(entry_ids)
            entries = [e for e in entries if e.id in wanted]

        return EntriesDTO.new([EntryDraft.from_entry(e) for e in entries])

    async def import_entries(self, dto: EntriesDTO, allow_version_mismatch: bool = False) -> None:
        """Import with a single file write. Drafts before a rejected one are still stored."""
        check_transfer_version(dto, allow_version_mismatch)
        accepted, error = take_valid_drafts(dto.entries)

        if accepted:
            entries = await self._read_entries()
            next_id = max((e.id for e in entries), default=0) + 1
            for offset, draft in enumerate(accepted):
                entries.append(Entry.from_draft(next_id + offset, draft))
            await self._write_entries(entries)

        if error is not None:
            raise error
