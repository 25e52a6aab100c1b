"""Shared workflow layer between the CLI commands and the interactive session."""

import json
import logging
from pathlib import Path

import aiofiles

from .adapters.json_provider import JsonDataProvider
from .adapters.sqlite_provider import SqliteDataProvider
from .app import App
from .config import Settings
from .core.entries import EntriesDTO
from .errors import DataError
from .ports.data_provider import DataProvider
from .state import AppState

logger = logging.getLogger(__name__)


def get_data_provider(settings: Settings) -> DataProvider:
    """Build the storage provider selected in the config."""
    match settings.backend:
        case "sqlite":
            return SqliteDataProvider(settings.get_sqlite_path())
        case _:
            return JsonDataProvider(settings.get_json_path())


async def load_app(settings: Settings) -> App:
    """Provider, persisted UI state and loaded entries in one App."""
    app = App(settings, get_data_provider(settings), AppState.load(settings))
    await app.load_entries()
    return app


async def export_to_file(app: App, path: Path, entry_ids: list[int] | None = None) -> EntriesDTO:
    """Write the transfer envelope of the given entries (all if none) to a JSON file."""
    dto = await app.export_entries(entry_ids or [])
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(dto.to_dict(), indent=2, ensure_ascii=False))
    except OSError as e:
        raise DataError(f"Can't write {path}: {e}") from e

    logger.info(f"Exported {len(dto.entries)} entries to {path}")
    return dto


async def read_transfer_file(path: Path) -> EntriesDTO:
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            text = await f.read()
        return EntriesDTO.from_dict(json.loads(text))
    except OSError as e:
        raise DataError(f"Can't read {path}: {e}") from e
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise DataError(f"{path} is not a valid transfer file: {e}") from e


async def import_from_file(app: App, path: Path, allow_version_mismatch: bool = False) -> int:
    """Import a transfer file written by export_to_file. Returns the number of entries."""
    dto = await read_transfer_file(path)
    await app.import_entries(dto, allow_version_mismatch=allow_version_mismatch)

    logger.info(f"Imported {len(dto.entries)} entries from {path}")
    return len(dto.entries)
