"""Persisted UI state (sort order, full screen mode)."""

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .config import DATA_DIR, STATE_DIR, Settings
from .core.sorter import Sorter

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "state.json"


@dataclass
class AppState:
    """UI state saved as the whole of the state file."""

    sorter: Sorter = field(default_factory=Sorter)
    full_screen: bool = False

    def to_dict(self) -> dict:
        return {"sorter": self.sorter.to_dict(), "full_screen": self.full_screen}

    @classmethod
    def from_dict(cls, data: dict) -> "AppState":
        return cls(
            sorter=Sorter.from_dict(data.get("sorter", {})),
            full_screen=bool(data.get("full_screen", False)),
        )

    @staticmethod
    def get_persist_path(settings: Settings) -> Path:
        return (settings.get_state_dir() or STATE_DIR) / STATE_FILE_NAME

    def save(self, settings: Settings) -> None:
        """Save state to file."""
        path = self.get_persist_path(settings)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load(cls, settings: Settings) -> "AppState":
        """Load state from file, falling back to defaults."""
        if settings.get_state_dir() is None:
            move_legacy_state()

        path = cls.get_persist_path(settings)
        if not path.exists():
            return cls()
        try:
            return cls.from_dict(json.loads(path.read_text()))
        except (OSError, json.JSONDecodeError, ValueError, AttributeError) as e:
            logger.warning(f"Failed to read state file {path}, using defaults: {e}")
            return cls()


def move_legacy_state(legacy_dir: Path = DATA_DIR, state_dir: Path = STATE_DIR) -> None:
    """
    Move the state file from the legacy data directory to the state directory.

    Best effort: every failure is logged and the move is left for next time.
    """
    # TODO: Drop this once no released version writes state into the data dir.
    legacy_file = legacy_dir / STATE_FILE_NAME
    if not legacy_file.exists():
        return

    new_file = state_dir / STATE_FILE_NAME
    if new_file.exists():
        # New state already in place, the legacy copy is stale
        try:
            legacy_file.unlink()
        except OSError as e:
            logger.error(f"Legacy State: Removing legacy state file failed. path: {legacy_file}, Error {e}")
        return

    try:
        state_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Legacy State: Creating state dir failed. path: {state_dir}, Error {e}")
        return

    try:
        shutil.move(str(legacy_file), str(new_file))
    except OSError as e:
        logger.error(f"Legacy State: Moving legacy state file failed. Error {e}")
        return

    logger.info(f"Moved legacy state file to {new_file}")

    try:
        if not any(legacy_dir.iterdir()):
            legacy_dir.rmdir()
    except OSError as e:
        logger.error(f"Legacy State: Removing legacy directory failed. path: {legacy_dir}, Error {e}")
