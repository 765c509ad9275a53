"""
Configuration - environment-driven settings and debug logging.

Hook invocations own stdout (it carries the decision JSON), so logging goes to
a debug file under CLAUDE_HOME instead.

Environment Variables:
  CLAUDE_HOME          - Claude config directory (default: ~/.claude)
  SISYPHUS_LOG_LEVEL   - Debug log level (default: WARNING)
  SISYPHUS_DEBUG_LOG   - Debug log path (default: $CLAUDE_HOME/debug/sisyphus-hooks.log)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


# =============================================================================
# Bounds (baked into rendered artifacts, keep them plain integers)
# =============================================================================

MAX_PAYLOAD_BYTES = 1024 * 1024  # stdin bytes read per event
MAX_TASK_FILES = 1000  # todo files scanned per stop event

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
DEBUG_LOG_NAME = "sisyphus-hooks.log"


def claude_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return CLAUDE_HOME, defaulting to ~/.claude."""
    env = os.environ if environ is None else environ
    value = env.get("CLAUDE_HOME")
    if value:
        return Path(value)
    return Path.home() / ".claude"


@dataclass(frozen=True)
class HookSettings:
    claude_home: Path
    log_level: str = "WARNING"
    debug_log: Optional[Path] = None

    @property
    def log_path(self) -> Path:
        return self.debug_log or self.claude_home / "debug" / DEBUG_LOG_NAME

    @property
    def todos_dir(self) -> Path:
        return self.claude_home / "todos"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> HookSettings:
    """Load hook settings from the environment."""
    env = os.environ if environ is None else environ

    level = env.get("SISYPHUS_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "WARNING"

    debug_log = env.get("SISYPHUS_DEBUG_LOG")
    return HookSettings(
        claude_home=claude_home(env),
        log_level=level,
        debug_log=Path(debug_log) if debug_log else None,
    )


def configure_logging(settings: HookSettings) -> None:
    """Send package logs to the debug log file.

    A hook must never fail because its log directory is missing or read-only,
    so an unwritable location silently drops records.
    """
    root = logging.getLogger("sisyphus_hooks")
    root.setLevel(settings.log_level)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    handler: logging.Handler
    try:
        settings.log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(settings.log_path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    root.addHandler(handler)


def configure_cli_logging(verbose: bool = False) -> None:
    """Log tool commands (render, verify, profile) to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
