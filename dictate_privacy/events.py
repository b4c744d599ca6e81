"""In-process change notification for UI layers and other observers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

SETTINGS_UPDATED = "settings:updated"
PTT_STATE_CHANGED = "ptt:stateChanged"
DLP_WARNING = "dlp:warning"
DLP_BLOCKED = "dlp:blocked"

Listener = Callable[[Any], None]


class EventBus:
    """Thread-safe publish/subscribe registry keyed by event name."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for ``event``.

        Returns:
            A function that removes the listener again
        """
        with self._lock:
            self._listeners.setdefault(event, []).append(listener)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(event, [])
                if listener in listeners:
                    listeners.remove(listener)

        return unsubscribe

    def emit(self, event: str, payload: Any = None) -> None:
        """Deliver ``payload`` to every listener of ``event``.

        Listeners run on the caller's thread, outside the registry lock. A
        failing listener is logged and does not stop delivery to the others.
        """
        with self._lock:
            listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener for %s failed", event)
