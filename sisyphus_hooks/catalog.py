"""
Mode Directive Catalog - canonical directive texts and trigger rules.

Both execution profiles are rendered from this module. Edit directives and
matchers here, then re-run ``sisyphus-hooks render``; never edit the rendered
scripts.

Matcher notation (dialect-neutral, compiled by patterns.py):
  "search"     whole word
  "where is"   words separated by one or more whitespace characters
  "deep~dive"  words joined by an optional single space, "-" or "_"
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Mode(str, Enum):
    ULTRAWORK = "ultrawork"
    THINK = "think"
    SEARCH = "search"
    ANALYZE = "analyze"


@dataclass(frozen=True)
class ModeDirective:
    mode: Mode
    text: str


@dataclass(frozen=True)
class TriggerRule:
    priority: int
    mode: Mode
    matchers: tuple[str, ...]

    @property
    def directive(self) -> ModeDirective:
        return DIRECTIVES[self.mode]


SEPARATOR = "\n\n---\n"

# Priority 5 (neutral) has no rule: classify() returns None when nothing matches.
NEUTRAL_PRIORITY = 5


# =============================================================================
# Directive texts
# =============================================================================

ULTRAWORK_MESSAGE = """<ultrawork-mode>

**MANDATORY**: You MUST say "ULTRAWORK MODE ENABLED!" to the user as your first response when this mode activates. This is non-negotiable.

[CODE RED] Maximum precision required. Ultrathink before acting.

YOU MUST LEVERAGE ALL AVAILABLE AGENTS TO THEIR FULLEST POTENTIAL.
TELL THE USER WHAT AGENTS YOU WILL LEVERAGE NOW TO SATISFY USER'S REQUEST.

## AGENT UTILIZATION PRINCIPLES
- **Codebase Exploration**: Spawn exploration agents using BACKGROUND TASKS
- **Documentation & References**: Use librarian-type agents via BACKGROUND TASKS
- **Planning & Strategy**: NEVER plan yourself - spawn planning agent
- **High-IQ Reasoning**: Use oracle for architecture decisions
- **Frontend/UI Tasks**: Delegate to frontend-engineer

## EXECUTION RULES
- **TODO**: Track EVERY step. Mark complete IMMEDIATELY.
- **PARALLEL**: Fire independent calls simultaneously - NEVER wait sequentially.
- **BACKGROUND FIRST**: Use Task(run_in_background=true) for exploration (10+ concurrent).
- **VERIFY**: Check ALL requirements met before done.
- **DELEGATE**: Orchestrate specialized agents.

## ZERO TOLERANCE
- NO Scope Reduction - deliver FULL implementation
- NO Partial Completion - finish 100%
- NO Premature Stopping - ALL TODOs must be complete
- NO TEST DELETION - fix code, not tests

THE USER ASKED FOR X. DELIVER EXACTLY X.

</ultrawork-mode>""" + SEPARATOR

ULTRATHINK_MESSAGE = """<think-mode>

**ULTRATHINK MODE ENABLED** - Extended reasoning activated.

You are now in deep thinking mode. Take your time to:
1. Thoroughly analyze the problem from multiple angles
2. Consider edge cases and potential issues
3. Think through the implications of each approach
4. Reason step-by-step before acting

Use your extended thinking capabilities to provide the most thorough and well-reasoned response.

</think-mode>""" + SEPARATOR

SEARCH_MESSAGE = """<search-mode>
MAXIMIZE SEARCH EFFORT. Launch multiple background agents IN PARALLEL:
- explore agents (codebase patterns, file structures)
- librarian agents (remote repos, official docs, GitHub examples)
Plus direct tools: Grep, Glob
NEVER stop at first result - be exhaustive.
</search-mode>""" + SEPARATOR

ANALYZE_MESSAGE = """<analyze-mode>
ANALYSIS MODE. Gather context before diving deep:

CONTEXT GATHERING (parallel):
- 1-2 explore agents (codebase patterns, implementations)
- 1-2 librarian agents (if external library involved)
- Direct tools: Grep, Glob, LSP for targeted searches

IF COMPLEX (architecture, multi-system, debugging after 2+ failures):
- Consult oracle agent for strategic guidance

SYNTHESIZE findings before proceeding.
</analyze-mode>""" + SEPARATOR

DIRECTIVES: dict[Mode, ModeDirective] = {
    Mode.ULTRAWORK: ModeDirective(Mode.ULTRAWORK, ULTRAWORK_MESSAGE),
    Mode.THINK: ModeDirective(Mode.THINK, ULTRATHINK_MESSAGE),
    Mode.SEARCH: ModeDirective(Mode.SEARCH, SEARCH_MESSAGE),
    Mode.ANALYZE: ModeDirective(Mode.ANALYZE, ANALYZE_MESSAGE),
}

# {count} is the only placeholder; the text must stay free of other braces.
CONTINUATION_TEMPLATE = """[SYSTEM REMINDER - TODO CONTINUATION]

Incomplete tasks remain in your todo list ({count} remaining). Continue working on the next pending task.

- Proceed without asking for permission
- Mark each task complete when finished
- Do not stop until all tasks are done"""


# =============================================================================
# Trigger rules (highest priority first)
# =============================================================================

TRIGGER_RULES: tuple[TriggerRule, ...] = (
    TriggerRule(1, Mode.ULTRAWORK, ("ultrawork", "ulw")),
    TriggerRule(2, Mode.THINK, ("ultrathink", "think")),
    TriggerRule(3, Mode.SEARCH, (
        "search", "find", "locate", "lookup", "explore", "discover", "scan",
        "grep", "query", "browse", "detect", "trace", "seek", "track",
        "pinpoint", "hunt",
        "where is", "show me", "list all",
    )),
    TriggerRule(4, Mode.ANALYZE, (
        "analyze", "analyse", "investigate", "examine", "research", "study",
        "deep~dive", "inspect", "audit", "evaluate", "assess", "review",
        "diagnose", "scrutinize", "dissect", "debug", "comprehend",
        "interpret", "breakdown", "understand",
        "why is", "how does", "how to",
    )),
)

_MATCHER_RE = re.compile(r"[a-z]+(?:[ ~][a-z]+)*")


def continuation_reason(count: int) -> str:
    return CONTINUATION_TEMPLATE.format(count=count)


def rule_for(mode: Mode) -> Optional[TriggerRule]:
    for rule in TRIGGER_RULES:
        if rule.mode == mode:
            return rule
    return None


def _check_catalog() -> None:
    priorities = [rule.priority for rule in TRIGGER_RULES]
    if priorities != sorted(set(priorities)) or max(priorities) >= NEUTRAL_PRIORITY:
        raise ValueError(f"Trigger priorities must be unique and ascending: {priorities}")
    for rule in TRIGGER_RULES:
        for matcher in rule.matchers:
            if not _MATCHER_RE.fullmatch(matcher):
                raise ValueError(f"Invalid matcher for {rule.mode.value}: {matcher!r}")
    for directive in DIRECTIVES.values():
        if not directive.text.endswith(SEPARATOR):
            raise ValueError(f"Directive {directive.mode.value} lacks the separator marker")
    if CONTINUATION_TEMPLATE.count("{") != 1 or CONTINUATION_TEMPLATE.count("}") != 1:
        raise ValueError("Continuation template may only contain the {count} placeholder")


_check_catalog()
