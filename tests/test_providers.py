"""Tests for the JSON and SQLite storage providers."""

from datetime import datetime, timezone

import pytest

from jotter.adapters import JsonDataProvider, SqliteDataProvider
from jotter.core.entries import TRANSFER_DATA_VERSION, EntriesDTO, Entry, EntryDraft
from jotter.errors import DataError, TransferVersionMismatch, ValidationError


def draft(title, day=1, tags=(), content=""):
    return EntryDraft(
        date=datetime(2025, 3, day, 7, 15, tzinfo=timezone.utc),
        title=title,
        content=content,
        tags=list(tags),
    )


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    if request.param == "json":
        return JsonDataProvider(tmp_path / "data" / "entries.json")
    return SqliteDataProvider(tmp_path / "data" / "entries.db")


def by_id(entries):
    return {e.id: e for e in entries}


class TestCrud:
    @pytest.mark.asyncio
    async def test_new_store_is_empty(self, store):
        assert await store.load_all_entries() == []

    @pytest.mark.asyncio
    async def test_add_assigns_increasing_ids(self, store):
        first = await store.add_entry(draft("First", tags=["a"]))
        second = await store.add_entry(draft("Second", day=2))

        assert first.id == 1
        assert second.id == 2
        assert by_id(await store.load_all_entries()) == {1: first, 2: second}

    @pytest.mark.asyncio
    async def test_fields_survive_storage(self, store):
        added = await store.add_entry(draft("Trip", tags=["travel", "family"], content="Line 1\nLine 2 ü"))

        loaded = (await store.load_all_entries())[0]

        assert loaded == added
        assert loaded.tags == ["travel", "family"]
        assert loaded.date == datetime(2025, 3, 1, 7, 15, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_update_replaces_all_fields(self, store):
        added = await store.add_entry(draft("Old", tags=["x"]))
        changed = Entry(added.id, added.date, "New", "Body", ["y", "z"])

        assert await store.update_entry(changed) == changed
        assert await store.load_all_entries() == [changed]

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, store):
        await store.add_entry(draft("Only"))

        with pytest.raises(DataError, match="not found"):
            await store.update_entry(Entry(99, draft("x").date, "Ghost", "", []))

    @pytest.mark.asyncio
    async def test_remove(self, store):
        first = await store.add_entry(draft("First", tags=["a"]))
        second = await store.add_entry(draft("Second"))

        await store.remove_entry(first.id)

        assert await store.load_all_entries() == [second]

    @pytest.mark.asyncio
    async def test_remove_missing_raises(self, store):
        with pytest.raises(DataError):
            await store.remove_entry(1)

    @pytest.mark.asyncio
    async def test_empty_title_rejected(self, store):
        with pytest.raises(ValidationError):
            await store.add_entry(draft("   "))

        assert await store.load_all_entries() == []

    @pytest.mark.asyncio
    async def test_empty_title_rejected_on_update(self, store):
        added = await store.add_entry(draft("Title"))

        with pytest.raises(ValidationError):
            await store.update_entry(Entry(added.id, added.date, "", "", []))

        assert (await store.load_all_entries())[0].title == "Title"


class TestTransfer:
    @pytest.mark.asyncio
    async def test_export_all_or_selected(self, store):
        await store.add_entry(draft("One"))
        await store.add_entry(draft("Two", day=2))
        await store.add_entry(draft("Three", day=3))

        everything = await store.get_export_object([])
        selected = await store.get_export_object([1, 3])

        assert everything.version == TRANSFER_DATA_VERSION
        assert sorted(d.title for d in everything.entries) == ["One", "Three", "Two"]
        assert sorted(d.title for d in selected.entries) == ["One", "Three"]

    @pytest.mark.asyncio
    async def test_export_import_between_stores(self, store, tmp_path):
        await store.add_entry(draft("Kept", tags=["t"], content="text"))
        dto = EntriesDTO.from_dict((await store.get_export_object([])).to_dict())

        target = JsonDataProvider(tmp_path / "other" / "entries.json")
        await target.add_entry(draft("Existing"))
        await target.import_entries(dto)

        titles = {e.id: e.title for e in await target.load_all_entries()}
        assert titles == {1: "Existing", 2: "Kept"}

    @pytest.mark.asyncio
    async def test_import_stops_at_first_invalid(self, store):
        await store.add_entry(draft("Existing"))
        dto = EntriesDTO.new([draft("Good"), draft(""), draft("Also good")])

        with pytest.raises(ValidationError):
            await store.import_entries(dto)

        titles = {e.id: e.title for e in await store.load_all_entries()}
        assert titles == {1: "Existing", 2: "Good"}

    @pytest.mark.asyncio
    async def test_import_invalid_first_adds_nothing(self, store):
        with pytest.raises(ValidationError):
            await store.import_entries(EntriesDTO.new([draft(" "), draft("Later")]))

        assert await store.load_all_entries() == []

    @pytest.mark.asyncio
    async def test_version_mismatch_rejected(self, store):
        dto = EntriesDTO(version=TRANSFER_DATA_VERSION + 1, entries=[draft("Future")])

        with pytest.raises(TransferVersionMismatch) as exc:
            await store.import_entries(dto)

        assert exc.value.expected == TRANSFER_DATA_VERSION
        assert await store.load_all_entries() == []

    @pytest.mark.asyncio
    async def test_version_mismatch_allowed_with_warning(self, store, caplog):
        dto = EntriesDTO(version=99, entries=[draft("Legacy")])

        await store.import_entries(dto, allow_version_mismatch=True)

        assert [e.title for e in await store.load_all_entries()] == ["Legacy"]
        assert "version 99" in caplog.text


class TestJsonFile:
    @pytest.mark.asyncio
    async def test_empty_file_is_empty_journal(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text("  \n")
        assert await JsonDataProvider(path).load_all_entries() == []

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text("{not json")

        with pytest.raises(DataError, match="corrupted"):
            await JsonDataProvider(path).load_all_entries()

    @pytest.mark.asyncio
    async def test_non_utf8_file_raises(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_bytes(b'[{"id": 1, "date": "2025-01-01T00:00:00Z", "title": "caf\xe9", "content": ""}]')

        with pytest.raises(DataError, match="corrupted"):
            await JsonDataProvider(path).load_all_entries()

    @pytest.mark.asyncio
    async def test_reads_entries_without_tags(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text('[{"id": 4, "date": "2024-12-31T20:00:00Z", "title": "Old", "content": "c"}]')

        [entry] = await JsonDataProvider(path).load_all_entries()

        assert entry.id == 4
        assert entry.tags == []

    @pytest.mark.asyncio
    async def test_creates_parent_dir(self, tmp_path):
        provider = JsonDataProvider(tmp_path / "deep" / "dir" / "entries.json")
        await provider.add_entry(draft("x"))
        assert (tmp_path / "deep" / "dir" / "entries.json").exists()


class TestSqliteFile:
    @pytest.mark.asyncio
    async def test_data_survives_new_provider(self, tmp_path):
        path = tmp_path / "entries.db"
        added = await SqliteDataProvider(path).add_entry(draft("Persisted", tags=["b", "a"]))

        assert await SqliteDataProvider(path).load_all_entries() == [added]

    @pytest.mark.asyncio
    async def test_ids_not_reused_after_remove(self, tmp_path):
        provider = SqliteDataProvider(tmp_path / "entries.db")
        await provider.add_entry(draft("One"))
        second = await provider.add_entry(draft("Two"))
        await provider.remove_entry(second.id)

        third = await provider.add_entry(draft("Three"))

        assert third.id == 3

    @pytest.mark.asyncio
    async def test_unusable_database_raises_data_error(self, tmp_path):
        path = tmp_path / "entries.db"
        path.write_text("this is not a database\n" * 100)

        with pytest.raises(DataError):
            await SqliteDataProvider(path).load_all_entries()
