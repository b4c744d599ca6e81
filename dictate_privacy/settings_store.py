"""Persistent settings storage for dictate-privacy."""

import json
import logging
from pathlib import Path

from dictate_privacy.config import APP_DIR
from dictate_privacy.settings_model import (
    Settings,
    SettingsValidationError,
    deep_merge,
    validate_settings,
)

logger = logging.getLogger(__name__)

SETTINGS_FILE = APP_DIR / "settings.json"


class PersistenceError(Exception):
    """Raised when settings cannot be written to disk."""


def load_settings(path: Path | None = None) -> Settings:
    """Load saved settings from disk, returning defaults when absent or unreadable.

    Fields missing from an older file are filled in from the defaults.
    """
    path = path or SETTINGS_FILE
    defaults = Settings.defaults()

    try:
        if path.is_file():
            data = json.loads(path.read_text(encoding="utf-8"))
            return validate_settings(deep_merge(defaults.to_wire(), data))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, SettingsValidationError) as e:
        # OSError: File access errors
        # UnicodeDecodeError: Invalid UTF-8 encoding
        # JSONDecodeError: Invalid JSON format
        # SettingsValidationError: Valid JSON that does not match the schema
        logger.error(f"Could not read saved settings: {e}")
    return defaults


def write_settings(settings: Settings, path: Path) -> None:
    """Write settings to ``path`` as indented JSON.

    Raises:
        PersistenceError: If the file or its directory cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(settings.to_wire(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    except (OSError, UnicodeEncodeError, TypeError, ValueError) as e:
        # OSError: File/directory write errors
        # UnicodeEncodeError: Invalid character encoding
        # TypeError/ValueError: Values JSON cannot represent
        raise PersistenceError(str(e)) from e


def save_settings(settings: Settings, path: Path | None = None) -> bool:
    """Persist settings to disk. Returns True on success, False otherwise."""
    try:
        write_settings(settings, path or SETTINGS_FILE)
        return True
    except PersistenceError as e:
        logger.error(f"Could not save settings: {e}")
        return False
