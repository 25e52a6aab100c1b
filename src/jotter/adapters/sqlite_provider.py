"""SQLite journal storage adapter."""

import asyncio
import logging
import sqlite3
from pathlib import Path

from jotter.core.entries import EntriesDTO, Entry, EntryDraft, normalize_tags, parse_date
from jotter.errors import DataError
from jotter.ports.data_provider import (
    DataProvider,
    check_transfer_version,
    take_valid_drafts,
    validate_draft,
)

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    date TEXT NOT NULL,
    content TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS tags (
    entry_id INTEGER NOT NULL REFERENCES entries(id) ON DELETE CASCADE,
    tag TEXT NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (entry_id, tag)
);
"""


class SqliteDataProvider(DataProvider):
    """
    SQLite journal storage.

    Implements DataProvider protocol. Blocking sqlite3 calls run in a worker
    thread; each call opens its own connection.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        if not self._initialized:
            logger.debug(f"Ensuring database schema at {self.db_path}")
            conn.executescript(SCHEMA)
            self._initialized = True
        return conn

    async def _run(self, func, *args):
        """Run a blocking database function in a thread, mapping sqlite errors to DataError."""

        def call():
            conn = self._connect()
            try:
                with conn:
                    return func(conn, *args)
            finally:
                conn.close()

        try:
            return await asyncio.to_thread(call)
        except sqlite3.Error as e:
            logger.error(f"Database operation {func.__name__} failed: {e}")
            raise DataError(f"Database operation failed: {e}") from e

    # ---- blocking helpers, always called through _run ----

    @staticmethod
    def _tags_by_entry(conn: sqlite3.Connection) -> dict[int, list[str]]:
        tags: dict[int, list[str]] = {}
        for row in conn.execute("SELECT entry_id, tag FROM tags ORDER BY entry_id, position"):
            tags.setdefault(row["entry_id"], []).append(row["tag"])
        return tags

    @staticmethod
    def _row_to_entry(row: sqlite3.Row, tags: list[str]) -> Entry:
        return Entry(
            id=row["id"],
            date=parse_date(row["date"]),
            title=row["title"],
            content=row["content"],
            tags=tags,
        )

    @staticmethod
    def _write_tags(conn: sqlite3.Connection, entry_id: int, tags: list[str]) -> None:
        conn.execute("DELETE FROM tags WHERE entry_id = ?", (entry_id,))
        conn.executemany(
            "INSERT INTO tags (entry_id, tag, position) VALUES (?, ?, ?)",
            [(entry_id, tag, position) for position, tag in enumerate(tags)],
        )

    @classmethod
    def _insert(cls, conn: sqlite3.Connection, draft: EntryDraft) -> Entry:
        cursor = conn.execute(
            "INSERT INTO entries (title, date, content) VALUES (?, ?, ?)",
            (draft.title, draft.date.isoformat(), draft.content),
        )
        entry = Entry.from_draft(cursor.lastrowid, draft)
        cls._write_tags(conn, entry.id, entry.tags)
        return entry

    def _select_all(self, conn: sqlite3.Connection) -> list[Entry]:
        tags = self._tags_by_entry(conn)
        rows = conn.execute("SELECT id, title, date, content FROM entries ORDER BY date DESC")
        return [self._row_to_entry(row, tags.get(row["id"], [])) for row in rows]

    def _update(self, conn: sqlite3.Connection, entry: Entry) -> int:
        cursor = conn.execute(
            "UPDATE entries SET title = ?, date = ?, content = ? WHERE id = ?",
            (entry.title, entry.date.isoformat(), entry.content, entry.id),
        )
        if cursor.rowcount:
            self._write_tags(conn, entry.id, normalize_tags(entry.tags))
        return cursor.rowcount

    @staticmethod
    def _delete(conn: sqlite3.Connection, entry_id: int) -> int:
        return conn.execute("DELETE FROM entries WHERE id = ?", (entry_id,)).rowcount

    def _insert_all(self, conn: sqlite3.Connection, drafts: list[EntryDraft]) -> None:
        for draft in drafts:
            self._insert(conn, draft)

    # ---- DataProvider ----

    async def load_all_entries(self) -> list[Entry]:
        return await self._run(self._select_all)

    async def add_entry(self, draft: EntryDraft) -> Entry:
        validate_draft(draft)
        return await self._run(self._insert, draft)

    async def update_entry(self, entry: Entry) -> Entry:
        validate_draft(entry)
        if not await self._run(self._update, entry):
            raise DataError(f"Entry to modify not found. id: {entry.id}")
        return entry

    async def remove_entry(self, entry_id: int) -> None:
        if not await self._run(self._delete, entry_id):
            raise DataError(f"Entry to remove not found. id: {entry_id}")

    async def get_export_object(self, entry_ids: list[int]) -> EntriesDTO:
        entries = await self.load_all_entries()
        if entry_ids:
            wanted = set(entry_ids)
            entries = [e for e in entries if e.id in wanted]

        return EntriesDTO.new([EntryDraft.from_entry(e) for e in entries])

    async def import_entries(self, dto: EntriesDTO, allow_version_mismatch: bool = False) -> None:
        """Import in one transaction. Drafts before a rejected one are still stored."""
        check_transfer_version(dto, allow_version_mismatch)
        accepted, error = take_valid_drafts(dto.entries)

        if accepted:
            await self._run(self._insert_all, accepted)

        if error is not None:
            raise error
