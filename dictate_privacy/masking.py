"""Masking pipeline: DLP gate, built-in redaction, then custom rules.

Every path that exposes text outside the process (formatter requests,
clipboard writes, CLI output) goes through :func:`mask_text` first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dictate_privacy import dlp, patterns
from dictate_privacy.patterns import Category
from dictate_privacy.rules import apply_rules
from dictate_privacy.settings_model import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaskResult:
    """Masked text plus the DLP verdict that let it through."""

    text: str
    verdict: dlp.DlpVerdict = "proceed"
    flagged: frozenset[Category] = frozenset()

    @property
    def warned(self) -> bool:
        return self.verdict == "warn"


def mask(settings: Settings, text: str, custom_rules: bool = True) -> MaskResult:
    """Run the masking pipeline over ``text``.

    Stage order is fixed: DLP gate, email, phone, digit runs, custom rules.
    Custom rules ignore the mask toggles. Pass ``custom_rules=False`` when
    re-masking text that already went through them once.
    ``mask_address`` and ``mask_names`` are accepted but have no effect yet.

    Args:
        settings: Settings snapshot; never mutated
        text: Raw input text
        custom_rules: Apply the user's replacement rules after the built-in
            detectors

    Returns:
        MaskResult with the final text and the DLP verdict

    Raises:
        DlpBlockedError: If the DLP action is ``block`` and sensitive content
            was detected. No masking happens in that case.
    """
    decision = dlp.evaluate(settings, text)
    if decision.verdict == "block":
        logger.warning("DLP blocked text (flagged: %s)", ", ".join(sorted(decision.flagged)))
        raise dlp.DlpBlockedError(decision.flagged)
    if decision.verdict == "warn":
        logger.warning(
            "DLP scan flagged sensitive content (flagged: %s)",
            ", ".join(sorted(decision.flagged)),
        )

    out = text
    if settings.mask_email:
        out = patterns.replace_all("email", out)
    if settings.mask_phone:
        out = patterns.replace_all("phone", out)
    if settings.mask_numbers:
        out = patterns.replace_all("number_sequence", out)
    if custom_rules:
        out = apply_rules(settings.custom_replace_rules, out)

    return MaskResult(text=out, verdict=decision.verdict, flagged=decision.flagged)


def mask_text(settings: Settings, text: str) -> str:
    """Mask ``text`` and return only the resulting string.

    Raises:
        DlpBlockedError: If the DLP policy blocks the text
    """
    return mask(settings, text).text
