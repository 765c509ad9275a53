r"""Atomic file writes for rendered hook artifacts.

The host may spawn a hook while ``render`` is replacing it, so every artifact
is written to a temp file in the target directory and renamed over the old
one. Readers see either the previous script or the new one, never a partial
file.

**Error handling:**
- ValidationError: Schema check failed before writing
- TransactionError: Write or rename failed (temp file is removed)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional


class TransactionError(Exception):
    """Base exception for write failures."""
    pass


class ValidationError(TransactionError):
    """Raised when schema validation fails."""
    pass


def atomic_write_text(
    path: Path | str,
    content: str,
    fsync: bool = True,
    mode: Optional[int] = None,
) -> None:
    """Write text content atomically using temp file + rename.

    Args:
        path: Target file path
        content: Text content to write
        fsync: Force OS flush to disk (default: True)
        mode: Permission bits applied before the rename (e.g. 0o755 for scripts)

    Raises:
        TransactionError: On write or rename failure
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_file = None
    tmp_path = None

    try:
        # newline="" keeps "\n" line endings in shell scripts on Windows
        tmp_file = tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            newline='',
            dir=path.parent,
            delete=False,
            suffix='.tmp'
        )
        tmp_path = Path(tmp_file.name)

        tmp_file.write(content)
        tmp_file.flush()

        if fsync:
            os.fsync(tmp_file.fileno())

        tmp_file.close()

        if mode is not None:
            os.chmod(tmp_path, mode)

        # Atomic rename
        os.replace(tmp_path, path)

    except Exception as e:
        if tmp_file is not None and not tmp_file.closed:
            tmp_file.close()
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise TransactionError(f"Atomic text write failed for {path}: {e}") from e


def atomic_write_json(
    path: Path | str,
    data: Any,
    fsync: bool = True,
    validate_fn: Optional[Callable[[Any], bool]] = None,
) -> None:
    """Write JSON data atomically; validate_fn rejects the data before any write.

    Raises:
        ValidationError: If validate_fn returns False
        TransactionError: On write or rename failure
    """
    path = Path(path)

    if validate_fn is not None and not validate_fn(data):
        raise ValidationError(f"Validation failed for data: {path}")

    atomic_write_text(path, json.dumps(data, indent=2) + "\n", fsync=fsync)


def validate_hooks_settings(data: Any) -> bool:
    """Validate a settings.json hooks fragment.

    **Expected structure:**
    {
        "hooks": {
            "<Event>": [{"hooks": [{"type": "command", "command": "..."}]}],
            ...
        }
    }
    """
    if not isinstance(data, dict):
        return False

    hooks = data.get("hooks")
    if not isinstance(hooks, dict) or not hooks:
        return False

    for matchers in hooks.values():
        if not isinstance(matchers, list) or not matchers:
            return False
        for matcher in matchers:
            if not isinstance(matcher, dict):
                return False
            entries = matcher.get("hooks")
            if not isinstance(entries, list) or not entries:
                return False
            for entry in entries:
                if not isinstance(entry, dict):
                    return False
                if entry.get("type") != "command":
                    return False
                if not isinstance(entry.get("command"), str) or not entry["command"]:
                    return False

    return True
