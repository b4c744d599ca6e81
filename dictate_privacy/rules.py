"""User-defined replacement rules applied after built-in masking."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from dictate_privacy.settings_model import ReplaceRule

logger = logging.getLogger(__name__)


class RuleCompileError(Exception):
    """Raised when a custom rule's pattern cannot be compiled."""


def compile_rule(rule: ReplaceRule) -> re.Pattern[str]:
    """Compile a rule, prefixing its flags as an inline modifier group.

    Raises:
        RuleCompileError: If the pattern or flags are invalid
    """
    source = f"(?{rule.flags}){rule.pattern}" if rule.flags else rule.pattern
    try:
        return re.compile(source)
    except (re.error, OverflowError, RecursionError) as e:
        raise RuleCompileError(f"Invalid rule pattern: {e}") from e


def apply_rules(rules: Iterable[ReplaceRule], text: str) -> str:
    """Apply ``rules`` to ``text`` in order.

    Each rule is compiled fresh. A rule that fails to compile, or whose
    replacement template is invalid, is skipped and the rest still run.
    """
    out = text
    for index, rule in enumerate(rules):
        try:
            pattern = compile_rule(rule)
            out = pattern.sub(rule.replace, out)
        except RuleCompileError as e:
            logger.warning("Skipping custom rule #%d: %s", index, e)
        except re.error as e:
            # Bad group reference in the replacement template
            logger.warning("Skipping custom rule #%d: invalid replacement: %s", index, e)
    return out
