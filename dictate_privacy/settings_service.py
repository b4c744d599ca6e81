"""The process-wide settings handle: snapshot reads and guarded updates."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dictate_privacy import settings_store
from dictate_privacy.events import SETTINGS_UPDATED, EventBus
from dictate_privacy.settings_model import Settings, merge_settings

logger = logging.getLogger(__name__)


class SettingsService:
    """Owns the single mutable Settings instance.

    Readers get deep copies. Writers hold the lock across merge, validation,
    the disk write and the ``settings:updated`` broadcast, so listeners see
    updates in the order they were applied. The lock is reentrant; a
    listener may call :meth:`get` from the updating thread.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        settings_path: Path | None = None,
        events: EventBus | None = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Initial settings (default: documented defaults)
            settings_path: Where updates are persisted (None disables saving)
            events: Event bus for change notifications (default: a private bus)
        """
        self._settings = settings if settings is not None else Settings.defaults()
        self._settings_path = settings_path
        self._lock = threading.RLock()
        self.events = events or EventBus()

    @classmethod
    def load(cls, path: Path | None = None, events: EventBus | None = None) -> SettingsService:
        """Create a service from settings saved at ``path`` (or the default file)."""
        path = path or settings_store.SETTINGS_FILE
        return cls(settings_store.load_settings(path), settings_path=path, events=events)

    def get(self) -> Settings:
        """Return a snapshot of the current settings."""
        with self._lock:
            return self._settings.model_copy(deep=True)

    def update(self, patch: Mapping[str, Any]) -> Settings:
        """Merge ``patch`` into the current settings, persist, and broadcast.

        A failed save is logged and does not roll back the in-memory update.

        Returns:
            A snapshot of the new settings

        Raises:
            SettingsValidationError: If the merged settings are invalid. The
                current settings stay in place and nothing is written.
        """
        with self._lock:
            updated = merge_settings(self._settings, patch)
            self._settings = updated
            if self._settings_path is not None:
                if not settings_store.save_settings(updated, self._settings_path):
                    logger.warning("Settings updated in memory but not saved to disk")
            snapshot = updated.model_copy(deep=True)
            self.events.emit(SETTINGS_UPDATED, snapshot.model_copy(deep=True))
        return snapshot
