"""
Classifier - map prompt text onto at most one operating mode.

Code never triggers a mode: fenced blocks and inline spans are removed before
matching, so a pasted snippet containing "search" or "debug" stays neutral.
Rules are evaluated in priority order and the first match wins.
"""

import re
import string
from typing import Optional

from sisyphus_hooks.catalog import TRIGGER_RULES, ModeDirective, TriggerRule
from sisyphus_hooks.patterns import compile_rule

FENCED_RE = re.compile(r"```[\s\S]*?```")
INLINE_RE = re.compile(r"`[^`]+`")

# ASCII-only folding keeps Python and `tr A-Z a-z` (LC_ALL=C) in agreement.
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

_COMPILED: tuple[tuple[TriggerRule, "re.Pattern[str]"], ...] = tuple(
    (rule, compile_rule(rule)) for rule in TRIGGER_RULES
)


def strip_code(text: str) -> str:
    """Remove fenced code regions, then inline code spans."""
    return INLINE_RE.sub("", FENCED_RE.sub("", text))


def sanitize(text: str) -> str:
    """Strip code, fold ASCII case and join lines so phrases can span them."""
    return strip_code(text).translate(_ASCII_LOWER).replace("\n", " ")


def match_rule(text: str) -> Optional[TriggerRule]:
    if not text:
        return None
    clean = sanitize(text)
    for rule, pattern in _COMPILED:
        if pattern.search(clean):
            return rule
    return None


def classify(text: str) -> Optional[ModeDirective]:
    """Return the directive for the highest-priority matching rule, or None."""
    rule = match_rule(text)
    return rule.directive if rule else None
