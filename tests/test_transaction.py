"""Unit tests for sisyphus_hooks/transaction.py atomic writes."""
import json
import os

import pytest

from sisyphus_hooks.transaction import (
    TransactionError,
    ValidationError,
    atomic_write_json,
    atomic_write_text,
    validate_hooks_settings,
)


# ==============================================================================
# atomic_write_text Tests
# ==============================================================================

def test_atomic_write_text_keeps_lf(tmp_path):
    """Verify shell scripts keep LF line endings on every platform."""
    target = tmp_path / "hook.sh"
    content = "#!/bin/bash\necho ok\n"

    atomic_write_text(target, content)

    assert target.read_bytes() == content.encode("utf-8")


def test_atomic_write_text_replaces_existing(tmp_path):
    target = tmp_path / "hook.py"
    target.write_text("old", encoding="utf-8")

    atomic_write_text(target, "new")

    assert target.read_text(encoding="utf-8") == "new"
    assert list(tmp_path.glob("*.tmp")) == []


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_atomic_write_text_mode(tmp_path):
    """Verify the requested mode is applied."""
    target = tmp_path / "hook.sh"

    atomic_write_text(target, "echo\n", mode=0o755)

    assert target.stat().st_mode & 0o777 == 0o755


def test_atomic_write_text_creates_parent(tmp_path):
    target = tmp_path / "a" / "b" / "hook.sh"
    atomic_write_text(target, "x")
    assert target.read_text(encoding="utf-8") == "x"


def test_atomic_write_text_failure_cleans_up(tmp_path):
    """Verify no orphaned .tmp files when the rename fails."""
    target = tmp_path / "taken"
    target.mkdir()
    (target / "child").write_text("x")

    with pytest.raises(TransactionError):
        atomic_write_text(target, "content")

    assert list(tmp_path.glob("*.tmp")) == []


# ==============================================================================
# atomic_write_json Tests
# ==============================================================================

def test_atomic_write_json_validation_fail(tmp_path):
    """Verify validation rejects the data before anything is written."""
    target = tmp_path / "hooks-settings.json"

    with pytest.raises(ValidationError):
        atomic_write_json(target, {"hooks": {}}, validate_fn=validate_hooks_settings)

    assert not target.exists()


def test_atomic_write_json_roundtrip(tmp_path):
    target = tmp_path / "hooks-settings.json"
    data = {"hooks": {"Stop": [{"hooks": [{"type": "command", "command": "bash x.sh"}]}]}}

    atomic_write_json(target, data, validate_fn=validate_hooks_settings)

    assert json.loads(target.read_text(encoding="utf-8")) == data


# ==============================================================================
# validate_hooks_settings Tests
# ==============================================================================

def test_validate_hooks_settings_invalid():
    """Verify malformed registration fragments are rejected."""
    assert not validate_hooks_settings([])
    assert not validate_hooks_settings({"hooks": []})
    assert not validate_hooks_settings({"hooks": {"Stop": []}})
    assert not validate_hooks_settings({"hooks": {"Stop": [{"hooks": []}]}})
    assert not validate_hooks_settings({"hooks": {"Stop": [{"hooks": [{"type": "prompt"}]}]}})
    assert not validate_hooks_settings(
        {"hooks": {"Stop": [{"hooks": [{"type": "command", "command": ""}]}]}}
    )
