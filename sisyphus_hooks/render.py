"""
Artifact renderer - generate both execution profiles from the catalog.

The Python form embeds the directives and compiled patterns as Python
literals; the bash form embeds each decision as a pre-serialised JSON line
(heredoc) and each rule as a POSIX ERE. Both print exactly what
``ContinuationDecision.to_json()`` prints for the same outcome.
"""

import logging
import pprint
import re
import shlex
from pathlib import Path

from sisyphus_hooks import __version__
from sisyphus_hooks.catalog import CONTINUATION_TEMPLATE, TRIGGER_RULES, TriggerRule
from sisyphus_hooks.classifier import FENCED_RE, INLINE_RE
from sisyphus_hooks.config import MAX_PAYLOAD_BYTES, MAX_TASK_FILES
from sisyphus_hooks.extractor import FALLBACK_RE
from sisyphus_hooks.patterns import ere_pattern, python_pattern
from sisyphus_hooks.profile import ExecutionProfile, ProfileConfig, Trigger
from sisyphus_hooks.protocol import ContinuationDecision
from sisyphus_hooks.transaction import atomic_write_json, atomic_write_text, validate_hooks_settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
SETTINGS_FRAGMENT = "hooks-settings.json"
COUNT_MARKER = "@@COUNT@@"

_PLACEHOLDER_RE = re.compile(r"@@([A-Z_]+)@@")


# =============================================================================
# jq / sed programs used by the bash form
# =============================================================================

# Input is slurped (-s) so anything but exactly one JSON document fails and
# falls through to the quoted-value scan, like json.loads does.
# NUL is emitted as \001: the shell cannot hold NUL, and both are non-word,
# non-space characters to the matcher.
JQ_EXTRACT = r'''def s: if type == "string" then . else "" end;
if length != 1 then error("expected one document") else .[0] end
| if type != "object" then ""
  elif (.prompt | s) != "" then .prompt
  elif ((.message | if type == "object" then .content else null end) | s) != "" then .message.content
  elif (.parts | type) == "array" then [.parts[] | select(type == "object" and .type == "text") | .text | s] | join(" ")
  else "" end
| explode | map(if . == 0 then 1 else . end) | implode'''

JQ_SANITIZE = r'''gsub("```[\\s\\S]*?```"; "") | gsub("`[^`]+`"; "")'''

JQ_COUNT = r'''if length == 1 and (.[0] | type) == "array" and all(.[0][]; type == "object")
then [.[0][] | select(.status != "completed" and .status != "cancelled")] | length
else 0 end'''

FALLBACK_ERE = '"(prompt|content|text)"[[:blank:]]*:[[:blank:]]*"[^"]+"'
FALLBACK_SED = 's/^"(prompt|content|text)"[[:blank:]]*:[[:blank:]]*"//; s/"$//'
SANITIZE_SED = "s/```[^`]*```//g; s/`[^`]+`//g"


def fill_template(name: str, values: dict[str, str]) -> str:
    """Substitute @@NAME@@ placeholders; unknown or unused names are errors."""
    text = (TEMPLATES_DIR / name).read_text(encoding="utf-8")
    used = set()

    def replace(m: re.Match) -> str:
        key = m.group(1)
        if key not in values:
            raise KeyError(f"{name}: no value for placeholder {key}")
        used.add(key)
        return values[key]

    rendered = _PLACEHOLDER_RE.sub(replace, text)
    unused = set(values) - used
    if unused:
        raise KeyError(f"{name}: unused values {sorted(unused)}")
    return rendered


def block_line_parts() -> tuple[str, str]:
    """Split the blocking decision JSON around the task count."""
    line = ContinuationDecision.block(
        CONTINUATION_TEMPLATE.replace("{count}", COUNT_MARKER)
    ).to_json()
    prefix, suffix = line.split(COUNT_MARKER)
    return prefix, suffix


# =============================================================================
# Bash form
# =============================================================================

def _bash_rule_block(rule: TriggerRule) -> str:
    line = ContinuationDecision.inject(rule.directive.text).to_json()
    return (
        f"# tier {rule.priority}: {rule.mode.value}\n"
        f"if printf '%s\\n' \"$CLEAN\" | grep -qE {shlex.quote(ere_pattern(rule.matchers))}; then\n"
        f"  cat <<'EOF'\n"
        f"{line}\n"
        f"EOF\n"
        f"  exit 0\n"
        f"fi\n"
    )


def render_bash_keyword_detector() -> str:
    return fill_template("keyword-detector.sh.tmpl", {
        "VERSION": __version__,
        "MAX_PAYLOAD_BYTES": str(MAX_PAYLOAD_BYTES),
        "JQ_EXTRACT": shlex.quote(JQ_EXTRACT),
        "JQ_SANITIZE": shlex.quote(JQ_SANITIZE),
        "FALLBACK_ERE": shlex.quote(FALLBACK_ERE),
        "FALLBACK_SED": shlex.quote(FALLBACK_SED),
        "SANITIZE_SED": shlex.quote(SANITIZE_SED),
        "RULE_BLOCKS": "\n".join(_bash_rule_block(rule) for rule in TRIGGER_RULES),
    })


def render_bash_stop_continuation() -> str:
    prefix, suffix = block_line_parts()
    return fill_template("stop-continuation.sh.tmpl", {
        "VERSION": __version__,
        "MAX_TASK_FILES": str(MAX_TASK_FILES),
        "JQ_COUNT": shlex.quote(JQ_COUNT),
        "BLOCK_PREFIX": shlex.quote(prefix),
        "BLOCK_SUFFIX": shlex.quote(suffix),
    })


# =============================================================================
# Python form
# =============================================================================

def python_rules() -> list[tuple[str, str, str]]:
    return [
        (rule.mode.value, python_pattern(rule.matchers), rule.directive.text)
        for rule in TRIGGER_RULES
    ]


def render_python_keyword_detector() -> str:
    return fill_template("keyword-detector.py.tmpl", {
        "VERSION": __version__,
        "MAX_PAYLOAD_BYTES": str(MAX_PAYLOAD_BYTES),
        "RULES": pprint.pformat(python_rules(), width=100),
        "FALLBACK_PATTERN": repr(FALLBACK_RE.pattern),
        "FENCED_PATTERN": repr(FENCED_RE.pattern),
        "INLINE_PATTERN": repr(INLINE_RE.pattern),
    })


def render_python_stop_continuation() -> str:
    return fill_template("stop-continuation.py.tmpl", {
        "VERSION": __version__,
        "MAX_TASK_FILES": str(MAX_TASK_FILES),
        "REASON_TEMPLATE": repr(CONTINUATION_TEMPLATE),
    })


_RENDERERS = {
    (ExecutionProfile.PYTHON, Trigger.PROMPT_SUBMIT): render_python_keyword_detector,
    (ExecutionProfile.PYTHON, Trigger.STOP): render_python_stop_continuation,
    (ExecutionProfile.BASH, Trigger.PROMPT_SUBMIT): render_bash_keyword_detector,
    (ExecutionProfile.BASH, Trigger.STOP): render_bash_stop_continuation,
}


def render_artifact(profile: ExecutionProfile, trigger: Trigger) -> str:
    return _RENDERERS[(profile, trigger)]()


def render_artifacts(config: ProfileConfig) -> dict[str, str]:
    """Return {filename: script} for the configured profile."""
    return {
        config.artifact_name(trigger): render_artifact(config.profile, trigger)
        for trigger in Trigger
    }


def write_artifacts(out_dir: Path, config: ProfileConfig) -> list[Path]:
    """Write the profile's scripts and the settings fragment into out_dir."""
    out_dir = Path(out_dir)
    written = []
    for name, content in render_artifacts(config).items():
        path = out_dir / name
        atomic_write_text(path, content, mode=0o755)
        logger.info("Rendered %s", path)
        written.append(path)

    fragment = out_dir / SETTINGS_FRAGMENT
    atomic_write_json(fragment, config.hooks_settings(), validate_fn=validate_hooks_settings)
    logger.info("Wrote host registration fragment %s", fragment)
    written.append(fragment)
    return written
