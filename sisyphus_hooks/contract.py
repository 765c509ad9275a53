"""
Cross-profile contract check.

Decodes the directive texts, rule order and continuation reason back out of
rendered artifacts (undoing each profile's escaping) and compares them with
the catalog. Any difference means the two forms would answer the same event
differently.
"""

import ast
import json
import logging
import re
import shlex
from typing import Optional

from sisyphus_hooks.catalog import TRIGGER_RULES, Mode, continuation_reason, rule_for
from sisyphus_hooks.patterns import ere_pattern, python_pattern
from sisyphus_hooks.profile import ExecutionProfile, Trigger
from sisyphus_hooks.render import render_artifact

logger = logging.getLogger(__name__)

SAMPLE_COUNTS = (1, 2, 42)

_BASH_RULE_RE = re.compile(
    r"^# tier (?P<priority>\d+): (?P<mode>\w+)\n"
    r"if printf .*? grep -qE (?P<pattern>.+?); then\n"
    r"  cat <<'EOF'\n(?P<line>.*?)\nEOF$",
    re.MULTILINE,
)


class ContractError(Exception):
    """Raised when a rendered artifact cannot be decoded."""
    pass


def _shell_assignment(script: str, name: str) -> str:
    m = re.search(rf"^{name}=(.*)$", script, re.MULTILINE)
    if not m:
        raise ContractError(f"{name} not assigned in shell artifact")
    values = shlex.split(m.group(1))
    if len(values) != 1:
        raise ContractError(f"{name} is not a single shell word")
    return values[0]


def _python_literal(script: str, name: str):
    for node in ast.parse(script).body:
        if isinstance(node, ast.Assign) and any(
            isinstance(target, ast.Name) and target.id == name for target in node.targets
        ):
            return ast.literal_eval(node.value)
    raise ContractError(f"{name} not assigned in Python artifact")


def bash_rules(script: str) -> list[tuple[str, str, str]]:
    """Return (mode, pattern, directive) per tier, in script order."""
    rules = []
    for m in _BASH_RULE_RE.finditer(script):
        decision = json.loads(m.group("line"))
        if decision.get("continue") is not True:
            raise ContractError(f"Tier {m.group('mode')} does not continue")
        rules.append((m.group("mode"), shlex.split(m.group("pattern"))[0], decision["message"]))
    return rules


def python_rules(script: str) -> list[tuple[str, str, str]]:
    return [tuple(rule) for rule in _python_literal(script, "RULES")]


def bash_reason(script: str, count: int) -> str:
    prefix = _shell_assignment(script, "BLOCK_PREFIX")
    suffix = _shell_assignment(script, "BLOCK_SUFFIX")
    decision = json.loads(f"{prefix}{count}{suffix}")
    if decision.get("continue") is not False:
        raise ContractError("Blocking decision does not block")
    return decision["reason"]


def python_reason(script: str, count: int) -> str:
    return _python_literal(script, "REASON_TEMPLATE").format(count=count)


def _compare_rules(label: str, rules: list, expected_pattern) -> list[str]:
    problems = []
    expected_modes = [rule.mode.value for rule in TRIGGER_RULES]
    modes = [mode for mode, _, _ in rules]
    if modes != expected_modes:
        problems.append(f"{label}: tier order {modes} != {expected_modes}")
        return problems

    for mode, pattern, text in rules:
        rule = rule_for(Mode(mode))
        if pattern != expected_pattern(rule.matchers):
            problems.append(f"{label}: {mode} pattern differs from the catalog")
        if text != rule.directive.text:
            problems.append(f"{label}: {mode} directive differs from the catalog")
    return problems


def check_equivalence(counts: Optional[tuple[int, ...]] = None) -> list[str]:
    """Render both profiles and list every divergence from the catalog."""
    problems = []
    try:
        py_detector = render_artifact(ExecutionProfile.PYTHON, Trigger.PROMPT_SUBMIT)
        sh_detector = render_artifact(ExecutionProfile.BASH, Trigger.PROMPT_SUBMIT)
        py_stop = render_artifact(ExecutionProfile.PYTHON, Trigger.STOP)
        sh_stop = render_artifact(ExecutionProfile.BASH, Trigger.STOP)

        problems += _compare_rules("python", python_rules(py_detector), python_pattern)
        problems += _compare_rules("bash", bash_rules(sh_detector), ere_pattern)

        for count in counts or SAMPLE_COUNTS:
            expected = continuation_reason(count)
            if python_reason(py_stop, count) != expected:
                problems.append(f"python: continuation reason differs at count={count}")
            if bash_reason(sh_stop, count) != expected:
                problems.append(f"bash: continuation reason differs at count={count}")
    except (ContractError, ValueError, SyntaxError, KeyError) as e:
        problems.append(f"artifact could not be decoded: {e}")

    for problem in problems:
        logger.error(problem)
    return problems
