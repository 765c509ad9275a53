"""Tests for sisyphus_hooks.guard"""

from sisyphus_hooks.catalog import continuation_reason
from sisyphus_hooks.guard import (
    TaskRecord,
    count_incomplete,
    decide,
    load_task_file,
    task_files,
    todos_dir as default_todos_dir,
)


def test_blocks_with_incomplete_tasks(todos_dir, write_todos):
    """Test two pending tasks plus one completed blocks with a count of 2."""
    write_todos("session.json", [
        {"id": "1", "status": "pending"},
        {"id": "2", "status": "in_progress"},
        {"id": "3", "status": "completed"},
    ])
    decision = decide(todos_dir)
    assert decision.continue_ is False
    assert decision.reason == continuation_reason(2)
    assert "2 remaining" in decision.reason


def test_allows_when_all_terminal(todos_dir, write_todos):
    """Test completed and cancelled tasks never block."""
    write_todos("a.json", [{"status": "completed"}] * 3)
    write_todos("b.json", [{"status": "cancelled"}])
    assert decide(todos_dir).to_dict() == {"continue": True}


def test_allows_when_store_missing(claude_home):
    """Test an absent todos directory allows the stop."""
    assert decide(claude_home / "todos").to_dict() == {"continue": True}


def test_allows_when_store_empty(todos_dir):
    assert decide(todos_dir).continue_ is True


def test_counts_across_files(todos_dir, write_todos):
    """Test incomplete counts are summed over every todo file."""
    write_todos("a.json", [{"status": "pending"}])
    write_todos("b.json", [{"status": "pending"}, {"status": "completed"}])
    write_todos("c.json", [{"status": "in_progress"}])
    assert count_incomplete(todos_dir) == 3
    assert "3 remaining" in decide(todos_dir).reason


def test_corrupt_file_counts_zero(todos_dir, write_todos):
    """Test a corrupt file is skipped while others still count."""
    write_todos("good.json", [{"status": "pending"}, {"status": "pending"}])
    write_todos("half-written.json", '[{"status": "pend')
    write_todos("object.json", {"status": "pending"})
    write_todos("mixed.json", [{"status": "pending"}, "not a task"])
    assert "2 remaining" in decide(todos_dir).reason


def test_unknown_and_missing_status_are_incomplete(todos_dir, write_todos):
    """Test that anything but completed/cancelled counts as incomplete."""
    write_todos("a.json", [
        {"id": "1"},
        {"id": "2", "status": "blocked"},
        {"id": "3", "status": None},
        {"id": "4", "status": ["completed"]},
        {"id": "5", "status": "COMPLETED"},
    ])
    assert count_incomplete(todos_dir) == 5


def test_ignores_hidden_and_non_json_files(todos_dir, write_todos):
    """Test that only visible *.json files are scanned."""
    write_todos(".hidden.json", [{"status": "pending"}])
    write_todos("notes.txt", [{"status": "pending"}])
    (todos_dir / "dir.json").mkdir()
    assert task_files(todos_dir) == []
    assert decide(todos_dir).continue_ is True


def test_task_files_sorted_and_capped(todos_dir, write_todos):
    """Test name ordering and the file cap."""
    for name in ("c.json", "a.json", "b.json"):
        write_todos(name, [])
    assert [p.name for p in task_files(todos_dir)] == ["a.json", "b.json", "c.json"]
    assert [p.name for p in task_files(todos_dir, max_files=2)] == ["a.json", "b.json"]


def test_load_task_file(todos_dir, write_todos):
    path = write_todos("a.json", [{"id": 7, "status": "pending"}])
    assert load_task_file(path) == [TaskRecord(id="7", status="pending")]
    assert load_task_file(todos_dir / "missing.json") is None


def test_decide_is_idempotent(todos_dir, write_todos):
    """Test the guard never mutates the store."""
    path = write_todos("a.json", [{"status": "pending"}])
    before = path.read_bytes()
    first = decide(todos_dir)
    second = decide(todos_dir)
    assert first == second
    assert path.read_bytes() == before


def test_default_directory_follows_claude_home(claude_home, write_todos):
    """Test that decide() without arguments reads $CLAUDE_HOME/todos."""
    write_todos("a.json", [{"status": "pending"}])
    assert default_todos_dir() == claude_home / "todos"
    assert decide().continue_ is False
