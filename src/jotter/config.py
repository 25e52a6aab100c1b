"""Configuration management for Jotter."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

JOTTER_HOME = Path(os.environ.get("JOTTER_HOME", Path.home() / "jotter"))
CONFIG_FILE = JOTTER_HOME / "config" / "jotter.conf"
DATA_DIR = JOTTER_HOME / "data"
STATE_DIR = JOTTER_HOME / "state"

BACKENDS = ("json", "sqlite")


@dataclass
class Settings:
    """Jotter configuration."""

    backend: str = "json"
    json_file_path: str = ""
    sqlite_file_path: str = ""
    export_default_path: str = ""
    app_state_dir: str = ""
    scroll_per_page: int = 5
    default_tags: list[str] = field(default_factory=list)
    # External editor settings
    external_editor_command: str = ""
    external_editor_auto_save: bool = False
    external_editor_temp_file_extension: str = "txt"

    def get_json_path(self) -> Path:
        if self.json_file_path:
            return Path(self.json_file_path).expanduser()
        return DATA_DIR / "entries.json"

    def get_sqlite_path(self) -> Path:
        if self.sqlite_file_path:
            return Path(self.sqlite_file_path).expanduser()
        return DATA_DIR / "entries.db"

    def get_export_dir(self) -> Path:
        if self.export_default_path:
            return Path(self.export_default_path).expanduser()
        return Path.cwd()

    def get_state_dir(self) -> Path | None:
        """Configured state directory, or None to use the default one."""
        if self.app_state_dir:
            return Path(self.app_state_dir).expanduser()
        return None


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from unquoted values."""
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]

    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    logger.warning(f"Invalid boolean for {key.upper()}: {value!r}")
    return default


def load_config(config_file: Path | None = None) -> Settings:
    """Load configuration from jotter.conf file."""
    config_file = config_file or CONFIG_FILE
    settings = Settings()

    if not config_file.exists():
        return settings

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "backend":
                if value.lower() in BACKENDS:
                    settings.backend = value.lower()
                else:
                    logger.warning(f"Unknown BACKEND {value!r}, using {settings.backend}")
            case "json_file_path":
                settings.json_file_path = value
            case "sqlite_file_path":
                settings.sqlite_file_path = value
            case "export_default_path":
                settings.export_default_path = value
            case "app_state_dir":
                settings.app_state_dir = value
            case "scroll_per_page":
                try:
                    settings.scroll_per_page = max(1, int(value))
                except ValueError:
                    logger.warning(f"Invalid SCROLL_PER_PAGE {value!r}")
            case "default_tags":
                settings.default_tags = [t.strip() for t in value.split(",") if t.strip()]
            case "external_editor_command":
                settings.external_editor_command = value
            case "external_editor_auto_save":
                settings.external_editor_auto_save = _parse_bool(
                    key, value, settings.external_editor_auto_save
                )
            case "external_editor_temp_file_extension":
                settings.external_editor_temp_file_extension = value
            case _:
                logger.warning(f"Unknown config key {key.upper()}")

    return settings
