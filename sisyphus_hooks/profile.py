"""
Execution Profile Selector - choose which artifact pair the host runs.

Two functionally equivalent forms exist:
  python  cross-platform scripts (keyword-detector.py, stop-continuation.py)
  bash    native-shell scripts   (keyword-detector.sh, stop-continuation.sh)

The profile is resolved once at setup time and passed down as a
ProfileConfig; nothing reads the override switches per event.

Environment Variables:
  SISYPHUS_USE_PYTHON_HOOKS=1 - Force the Python form on any host
  SISYPHUS_USE_BASH_HOOKS=1   - Force the bash form (checked second)
"""

import logging
import os
import shutil
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

FORCE_PYTHON_ENV = "SISYPHUS_USE_PYTHON_HOOKS"
FORCE_BASH_ENV = "SISYPHUS_USE_BASH_HOOKS"


class ExecutionProfile(str, Enum):
    PYTHON = "python"
    BASH = "bash"


class HostFamily(str, Enum):
    WINDOWS = "windows"
    POSIX = "posix"


class Trigger(str, Enum):
    PROMPT_SUBMIT = "UserPromptSubmit"
    STOP = "Stop"


ARTIFACT_STEMS = {
    Trigger.PROMPT_SUBMIT: "keyword-detector",
    Trigger.STOP: "stop-continuation",
}

_SUFFIXES = {ExecutionProfile.PYTHON: ".py", ExecutionProfile.BASH: ".sh"}


def detect_host(platform: Optional[str] = None) -> HostFamily:
    platform = sys.platform if platform is None else platform
    return HostFamily.WINDOWS if platform == "win32" else HostFamily.POSIX


def select_profile(
    environ: Optional[Mapping[str, str]] = None,
    host: Optional[HostFamily] = None,
) -> ExecutionProfile:
    """Resolve the profile: Python override, then bash override, then host default."""
    env = os.environ if environ is None else environ
    if env.get(FORCE_PYTHON_ENV) == "1":
        return ExecutionProfile.PYTHON
    if env.get(FORCE_BASH_ENV) == "1":
        return ExecutionProfile.BASH
    host = host or detect_host()
    # Windows has no POSIX shell by default
    return ExecutionProfile.PYTHON if host == HostFamily.WINDOWS else ExecutionProfile.BASH


@dataclass(frozen=True)
class ProfileConfig:
    profile: ExecutionProfile
    host: HostFamily

    @property
    def home_placeholder(self) -> str:
        return "%USERPROFILE%" if self.host == HostFamily.WINDOWS else "$HOME"

    @property
    def hooks_dir(self) -> str:
        """Hooks directory as written into host configuration."""
        sep = "\\" if self.host == HostFamily.WINDOWS else "/"
        return sep.join([self.home_placeholder, ".claude", "hooks"])

    @property
    def interpreter(self) -> str:
        if self.profile == ExecutionProfile.BASH:
            return "bash"
        return "python" if self.host == HostFamily.WINDOWS else "python3"

    def artifact_name(self, trigger: Trigger) -> str:
        return ARTIFACT_STEMS[trigger] + _SUFFIXES[self.profile]

    def command_for(self, trigger: Trigger) -> str:
        sep = "\\" if self.host == HostFamily.WINDOWS else "/"
        script = f"{self.hooks_dir}{sep}{self.artifact_name(trigger)}"
        return f'{self.interpreter} "{script}"'

    def hooks_settings(self) -> dict:
        """Host settings.json fragment registering both triggers."""
        return {
            "hooks": {
                trigger.value: [
                    {"hooks": [{"type": "command", "command": self.command_for(trigger)}]}
                ]
                for trigger in Trigger
            }
        }


def check_profile(config: ProfileConfig) -> list[str]:
    """Return setup warnings for the resolved profile."""
    warnings = []
    if config.profile == ExecutionProfile.BASH:
        if shutil.which("jq") is None:
            warnings.append(
                "jq not found: bash hooks fall back to line-based prompt scanning "
                "and cannot count todos"
            )
        if config.host == HostFamily.WINDOWS and shutil.which("bash") is None:
            warnings.append("bash not found on PATH; set SISYPHUS_USE_PYTHON_HOOKS=1")
    return warnings


def resolve_profile_config(
    environ: Optional[Mapping[str, str]] = None,
    platform: Optional[str] = None,
) -> ProfileConfig:
    host = detect_host(platform)
    config = ProfileConfig(select_profile(environ, host), host)
    for warning in check_profile(config):
        logger.warning(warning)
    logger.debug("Resolved execution profile: %s on %s", config.profile.value, config.host.value)
    return config
