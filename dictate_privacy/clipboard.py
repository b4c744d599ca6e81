"""Clipboard writes and paste simulation for delivering dictated text."""

from __future__ import annotations

import logging
import platform
import time

import pyperclip

try:
    import pyautogui

    pyautogui.FAILSAFE = False
except Exception:  # pragma: no cover - needs a display server
    pyautogui = None  # type: ignore[assignment]

from dictate_privacy.config import DEFAULT_PASTE_DELAY

logger = logging.getLogger(__name__)


class ClipboardError(Exception):
    """Raised when a clipboard or paste operation fails."""


def copy_text(text: str) -> None:
    """Place ``text`` on the system clipboard.

    Only masked text may be passed here.
    """
    try:
        pyperclip.copy(text)
        logger.debug("Copied %d characters to clipboard", len(text))
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Clipboard copy failed: {e}") from e


def clear_clipboard() -> None:
    """Replace the clipboard contents with an empty string."""
    try:
        pyperclip.copy("")
        logger.debug("Cleared clipboard")
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Clipboard clear failed: {e}") from e


def paste_into_active_window(delay: float = DEFAULT_PASTE_DELAY) -> None:
    """Send the platform paste shortcut to the focused window after ``delay`` seconds."""
    if pyautogui is None:
        raise ClipboardError("Paste simulation unavailable: pyautogui could not be loaded")

    modifier = "command" if platform.system() == "Darwin" else "ctrl"
    if delay > 0:
        time.sleep(delay)
    try:
        pyautogui.hotkey(modifier, "v")
        logger.debug("Sent %s+v to active window", modifier)
    except Exception as e:  # pragma: no cover - UI automation issues
        raise ClipboardError(f"Paste failed: {e}") from e
