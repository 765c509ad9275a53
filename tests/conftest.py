"""Shared pytest fixtures for hook tests."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest


@pytest.fixture
def claude_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point CLAUDE_HOME at an empty temporary directory."""
    home = tmp_path / "claude"
    home.mkdir()
    monkeypatch.setenv("CLAUDE_HOME", str(home))
    monkeypatch.setenv("SISYPHUS_DEBUG_LOG", str(tmp_path / "debug.log"))
    return home


@pytest.fixture
def todos_dir(claude_home: Path) -> Path:
    path = claude_home / "todos"
    path.mkdir()
    return path


@pytest.fixture
def write_todos(todos_dir: Path) -> Callable[[str, Any], Path]:
    """Write a todo file; str content is written verbatim, anything else as JSON."""
    def _write(name: str, content: Any) -> Path:
        path = todos_dir / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def prompt_payload() -> Callable[[str], bytes]:
    """Build a UserPromptSubmit payload for a prompt."""
    def _payload(prompt: str) -> bytes:
        return json.dumps({"session_id": "test", "prompt": prompt}).encode("utf-8")
    return _payload


@pytest.fixture
def mock_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear profile override switches."""
    monkeypatch.delenv("SISYPHUS_USE_PYTHON_HOOKS", raising=False)
    monkeypatch.delenv("SISYPHUS_USE_BASH_HOOKS", raising=False)

