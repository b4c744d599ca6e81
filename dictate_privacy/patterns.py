"""Built-in PII detectors and their placeholder tokens."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Literal

Category = Literal["email", "phone", "number_sequence"]

CATEGORIES: tuple[Category, ...] = ("email", "phone", "number_sequence")

EMAIL_PLACEHOLDER = "＜メール＞"
PHONE_PLACEHOLDER = "＜電話番号＞"
NUMBER_SEQUENCE_PLACEHOLDER = "＜数列＞"

PLACEHOLDERS: dict[Category, str] = {
    "email": EMAIL_PLACEHOLDER,
    "phone": PHONE_PLACEHOLDER,
    "number_sequence": NUMBER_SEQUENCE_PLACEHOLDER,
}

# Loose on purpose; also matches dates and plain digit runs of 4+ digits.
_PHONE_SOURCE = r"""
    (?:\+?\d{1,4}[-\s]?)?       # country code
    (?:\(?\d{2,4}\)?[-\s]?)?    # area code
    (?:\d{2,4}[-\s]?){2,3}      # local number parts
"""

_SOURCES: dict[Category, tuple[str, int]] = {
    "email": (r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE),
    "phone": (_PHONE_SOURCE, re.VERBOSE),
    "number_sequence": (r"\d{6,}", 0),
}


@lru_cache(maxsize=None)
def get_pattern(category: Category) -> re.Pattern[str]:
    """Return the compiled detector for ``category``, compiling it on first use."""
    try:
        source, flags = _SOURCES[category]
    except KeyError:
        raise ValueError(f"Unknown PII category: {category!r}") from None
    return re.compile(source, flags)


def detect_any(category: Category, text: str) -> bool:
    """Return True if ``text`` contains at least one match for ``category``."""
    return get_pattern(category).search(text) is not None


def replace_all(category: Category, text: str, placeholder: str | None = None) -> str:
    """Replace every match for ``category`` in ``text``.

    Args:
        category: Detector to apply
        text: Input text
        placeholder: Replacement token (default: the category's placeholder)

    Returns:
        Text with all non-overlapping matches substituted
    """
    pattern = get_pattern(category)
    token = PLACEHOLDERS[category] if placeholder is None else placeholder
    # A callable keeps backslashes in the token literal.
    return pattern.sub(lambda _match: token, text)


def detect_categories(text: str) -> frozenset[Category]:
    """Return the set of categories with at least one match in ``text``."""
    return frozenset(category for category in CATEGORIES if detect_any(category, text))
