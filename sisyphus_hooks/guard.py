"""
Continuation Guard - block session stop while todos are incomplete.

The todo store ($CLAUDE_HOME/todos/*.json) belongs to the host: each file is
a JSON array of task records written by the TodoWrite tool. The guard only
reads it and takes no lock. A file caught mid-write fails to parse and counts
as zero incomplete tasks.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from sisyphus_hooks.catalog import continuation_reason
from sisyphus_hooks.config import MAX_TASK_FILES, claude_home
from sisyphus_hooks.protocol import ContinuationDecision

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED.value, TaskStatus.CANCELLED.value})


@dataclass(frozen=True)
class TaskRecord:
    id: Optional[str]
    status: object

    @property
    def incomplete(self) -> bool:
        # Non-string statuses (lists, objects) are never terminal
        return not (isinstance(self.status, str) and self.status in TERMINAL_STATUSES)

    @classmethod
    def from_dict(cls, data: dict) -> "TaskRecord":
        record_id = data.get("id")
        return cls(
            id=str(record_id) if record_id is not None else None,
            status=data.get("status"),
        )


def todos_dir(home: Optional[Path] = None) -> Path:
    return (home or claude_home()) / "todos"


def task_files(directory: Path, max_files: int = MAX_TASK_FILES) -> list[Path]:
    """List todo files in name order, hidden files skipped, capped at max_files."""
    try:
        candidates = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        logger.warning("Cannot list %s: %s", directory, e)
        return []

    files = []
    for path in candidates:
        if not path.name.endswith(".json") or path.name.startswith("."):
            continue
        if not path.is_file():
            continue
        if len(files) >= max_files:
            logger.warning("More than %d todo files in %s, scanning the first %d",
                           max_files, directory, max_files)
            break
        files.append(path)
    return files


def load_task_file(path: Path) -> Optional[list[TaskRecord]]:
    """Parse one todo file; None when it is not an array of task objects."""
    try:
        data = json.loads(path.read_bytes().decode("utf-8", errors="replace"))
    except (OSError, ValueError, RecursionError) as e:
        logger.debug("Skipping unreadable todo file %s: %s", path, e)
        return None

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        logger.debug("Skipping todo file with unexpected shape: %s", path)
        return None
    return [TaskRecord.from_dict(item) for item in data]


def count_incomplete(directory: Path, max_files: int = MAX_TASK_FILES) -> int:
    total = 0
    for path in task_files(directory, max_files):
        records = load_task_file(path)
        if records:
            total += sum(1 for record in records if record.incomplete)
    return total


def decide(directory: Optional[Path] = None) -> ContinuationDecision:
    """Allow the stop unless the todo store holds incomplete tasks."""
    directory = directory or todos_dir()
    if not directory.is_dir():
        return ContinuationDecision.allow()

    remaining = count_incomplete(directory)
    if remaining == 0:
        return ContinuationDecision.allow()

    logger.info("Blocking stop: %d incomplete task(s) in %s", remaining, directory)
    return ContinuationDecision.block(continuation_reason(remaining))
