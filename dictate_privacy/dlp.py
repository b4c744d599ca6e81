"""Data-loss-prevention gate evaluated before any masking."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from dictate_privacy.patterns import Category, detect_categories
from dictate_privacy.settings_model import Settings

DlpVerdict = Literal["proceed", "warn", "block"]

DLP_BLOCK_MESSAGE = "DLP block"


class DlpBlockedError(Exception):
    """Raised when the DLP policy rejects text containing sensitive content.

    The message is always ``"DLP block"``; it never carries any part of the
    rejected text. ``flagged`` lists the detector categories that fired.
    """

    def __init__(self, flagged: Iterable[Category] = ()):
        super().__init__(DLP_BLOCK_MESSAGE)
        self.flagged: frozenset[Category] = frozenset(flagged)


@dataclass(frozen=True)
class DlpDecision:
    """Outcome of a DLP evaluation."""

    verdict: DlpVerdict
    flagged: frozenset[Category] = frozenset()

    @property
    def has_sensitive(self) -> bool:
        return bool(self.flagged)


def evaluate(settings: Settings, text: str) -> DlpDecision:
    """Decide whether ``text`` may continue through the masking pipeline.

    Only the built-in detectors take part; custom rules are transformations,
    not detectors.
    """
    if not settings.enable_dlp_scan:
        return DlpDecision("proceed")

    flagged = detect_categories(text)
    if flagged and settings.dlp_action == "block":
        return DlpDecision("block", flagged)
    if flagged and settings.dlp_action == "warn":
        return DlpDecision("warn", flagged)
    return DlpDecision("proceed", flagged)
