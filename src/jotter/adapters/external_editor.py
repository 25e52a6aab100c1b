"""External editor adapter - subprocess wrapper for the user's text editor."""

import asyncio
import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from jotter.config import Settings
from jotter.errors import ExternalEditorError

logger = logging.getLogger(__name__)

TEMP_FILENAME = "jotter_journal"


def resolve_editor_command(settings: Settings) -> list[str]:
    """Editor command from settings, then $VISUAL, then $EDITOR, falling back to vi."""
    command = (
        settings.external_editor_command
        or os.environ.get("VISUAL")
        or os.environ.get("EDITOR")
        or "vi"
    )
    return shlex.split(command)


def temp_file_path(settings: Settings) -> Path:
    """Fixed temp file path, with the configured extension when there is one."""
    extension = settings.external_editor_temp_file_extension.strip().lstrip(".")
    file_name = f"{TEMP_FILENAME}.{extension}" if extension else TEMP_FILENAME
    return Path(tempfile.gettempdir()) / file_name


async def open_editor(file_path: Path, settings: Settings) -> None:
    """Open the file in the external editor and wait until the editor exits."""
    command = resolve_editor_command(settings) + [str(file_path)]
    logger.debug(f"Opening external editor: {command}")

    try:
        proc = await asyncio.to_thread(subprocess.run, command)
    except FileNotFoundError as e:
        raise ExternalEditorError(f"Editor '{command[0]}' not found") from e
    except OSError as e:
        raise ExternalEditorError(f"Editor '{command[0]}' couldn't be started: {e}") from e

    if proc.returncode != 0:
        logger.error(f"External editor exited with status {proc.returncode}")
        raise ExternalEditorError(f"Editor exited with status {proc.returncode}")


async def edit_text(content: str, settings: Settings) -> str | None:
    """
    Round-trip text through the external editor.

    Writes the content to the temp file, runs the editor and returns the new
    content, or None when the editor removed the file. The temp file is
    deleted on every exit path.
    """
    file_path = temp_file_path(settings)
    await _remove_temp_file(file_path)

    try:
        try:
            async with aiofiles.open(file_path, "w", encoding="utf-8") as f:
                await f.write(content)
        except OSError as e:
            raise ExternalEditorError(f"Can't write temp file {file_path}: {e}") from e

        await open_editor(file_path, settings)

        if not await aiofiles.os.path.exists(file_path):
            return None
        try:
            async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Reading temp file {file_path} failed: {e}")
            raise ExternalEditorError(f"Can't read edited text from {file_path}: {e}") from e
    finally:
        await _remove_temp_file(file_path)


async def _remove_temp_file(file_path: Path) -> None:
    try:
        if await aiofiles.os.path.exists(file_path):
            await aiofiles.os.remove(file_path)
    except OSError as e:
        logger.error(f"Temp file {file_path} couldn't be deleted: {e}")
