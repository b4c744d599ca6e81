"""Dictate Privacy - dictation backend that masks PII before text leaves the machine."""

__version__ = "0.1.0"

__all__ = [
    "credentials",
    "dictation",
    "dlp",
    "masking",
    "patterns",
    "rules",
    "settings_model",
    "settings_service",
    "settings_store",
]
