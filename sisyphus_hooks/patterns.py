"""Compile catalog matchers into Python ``re`` and POSIX ERE patterns.

Both dialects use ASCII word boundaries so the shell form (run under
LC_ALL=C) and the Python form agree on every input.
"""

import re
from typing import Iterable

from sisyphus_hooks.catalog import TriggerRule

PY_WORD = "A-Za-z0-9_"


def _py_matcher(matcher: str) -> str:
    out = []
    for token in re.split(r"([ ~])", matcher):
        if token == " ":
            out.append(r"\s+")
        elif token == "~":
            out.append(r"[\s_-]?")
        else:
            out.append(token)
    return "".join(out)


def _ere_matcher(matcher: str) -> str:
    out = []
    for token in re.split(r"([ ~])", matcher):
        if token == " ":
            out.append("[[:space:]]+")
        elif token == "~":
            out.append("[[:space:]_-]?")
        else:
            out.append(token)
    return "".join(out)


def python_pattern(matchers: Iterable[str]) -> str:
    """Whole-word alternation for Python ``re`` (compile with re.ASCII)."""
    body = "|".join(_py_matcher(m) for m in matchers)
    return rf"(?<![{PY_WORD}])(?:{body})(?![{PY_WORD}])"


def ere_pattern(matchers: Iterable[str]) -> str:
    """Whole-word alternation for ``grep -E``."""
    body = "|".join(_ere_matcher(m) for m in matchers)
    return f"(^|[^[:alnum:]_])({body})([^[:alnum:]_]|$)"


def compile_rule(rule: TriggerRule) -> "re.Pattern[str]":
    return re.compile(python_pattern(rule.matchers), re.ASCII)
