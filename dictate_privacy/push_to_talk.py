"""Push-to-talk lifecycle: idle -> recording -> processing -> idle."""

from __future__ import annotations

import logging
import threading
from typing import Any, Literal, Protocol

from dictate_privacy.events import PTT_STATE_CHANGED, EventBus

logger = logging.getLogger(__name__)

PttState = Literal["idle", "recording", "processing"]


class Recorder(Protocol):
    def start(self) -> None: ...

    def stop(self) -> Any: ...


class PushToTalk:
    """Tracks the push-to-talk state and drives the recorder.

    Every transition is announced on the event bus as ``ptt:stateChanged``
    with the new state as payload.
    """

    def __init__(self, recorder: Recorder | None = None, events: EventBus | None = None):
        if recorder is None:
            from dictate_privacy.audio import AudioRecorder

            recorder = AudioRecorder()
        self.recorder = recorder
        self.events = events or EventBus()
        self._state: PttState = "idle"
        self._lock = threading.RLock()

    @property
    def state(self) -> PttState:
        return self._state

    def _set_state(self, state: PttState) -> None:
        self._state = state
        logger.debug("Push-to-talk state: %s", state)
        self.events.emit(PTT_STATE_CHANGED, state)

    def start(self) -> bool:
        """Begin recording. Returns False if a recording or processing run is active."""
        with self._lock:
            if self._state != "idle":
                return False
            self.recorder.start()
            self._set_state("recording")
            return True

    def stop(self) -> Any:
        """Stop recording and enter ``processing``.

        Returns:
            Whatever the recorder captured, or None when not recording
        """
        with self._lock:
            if self._state != "recording":
                return None
            self._set_state("processing")
            return self.recorder.stop()

    def finish(self) -> None:
        """Return to ``idle`` once the captured audio has been handled."""
        with self._lock:
            if self._state != "idle":
                self._set_state("idle")

    def toggle(self) -> Any:
        """Start when idle, stop when recording; returns captured audio on stop."""
        with self._lock:
            if self._state == "recording":
                return self.stop()
            self.start()
            return None
