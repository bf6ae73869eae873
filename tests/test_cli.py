import json
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from loguru import logger

from povboard.cli import cli
from povboard.exceptions import PersistenceError
from povboard.managers.board_store import BoardStore
from povboard.models.base import Stage


def ids(items):
    return [item.id for item in items]


@pytest.fixture(autouse=True)
def drop_log_sinks():
    """Remove sinks bound to the runner's stderr once a test is done."""
    yield
    logger.remove()


@pytest.fixture
def invoke(board_dir):
    """Run the CLI against the test board directory."""
    runner = CliRunner()

    def _invoke(*args, **kwargs):
        return runner.invoke(cli, ["--board-dir", str(board_dir), *args], **kwargs)

    return _invoke


def test_cli_registers_groups():
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for group in ("board", "stage", "task", "config"):
        assert group in result.output


# =============================================================================
# Stage commands
# =============================================================================


@patch("povboard.commands.stage.open_core")
def test_stage_add_calls_core(mock_open_core):
    mock_open_core.return_value.add_stage.return_value = Stage(id="s1", name="Review")
    runner = CliRunner()
    result = runner.invoke(
        cli, ["stage", "add", "-p", "discovery", "-n", "Review", "-d", "Final check", "-s", "active"]
    )
    assert result.exit_code == 0
    mock_open_core.return_value.add_stage.assert_called_once_with("Review", "Final check", "ACTIVE")
    assert "Stage 'Review' created successfully (s1)." in result.output


def test_stage_add_and_list(invoke):
    result = invoke("stage", "add", "-p", "discovery", "-n", "Backlog")
    assert result.exit_code == 0
    assert "Stage 'Backlog' created successfully" in result.output

    invoke("stage", "add", "-p", "discovery", "-n", "Done", "-s", "completed")
    result = invoke("stage", "list", "-p", "discovery")
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert lines[0].startswith("0. Backlog [PENDING] (0 tasks)")
    assert lines[1].startswith("1. Done [COMPLETED] (0 tasks)")


def test_stage_list_empty(invoke):
    result = invoke("stage", "list", "-p", "discovery")
    assert result.exit_code == 0
    assert "No stages." in result.output


def test_stage_list_requires_phase(invoke):
    result = invoke("stage", "list")
    assert result.exit_code == 2
    assert "No phase given" in result.output


def test_stage_list_uses_default_phase(invoke, saved_board):
    assert invoke("config", "set", "default_phase", "discovery").exit_code == 0

    result = invoke("stage", "list")
    assert result.exit_code == 0
    assert "0. backlog [PENDING] (3 tasks) backlog" in result.output


def test_stage_invalid_phase(invoke):
    result = invoke("stage", "list", "-p", "not/a/phase")
    assert result.exit_code == 1
    assert "Phase id must contain only" in result.output


def test_stage_edit_requires_fields(invoke, saved_board):
    result = invoke("stage", "edit", "done", "-p", "discovery")
    assert result.exit_code == 1
    assert "No update parameters provided" in result.output


def test_stage_edit(invoke, storage, saved_board):
    result = invoke("stage", "edit", "done", "-p", "discovery", "-n", "Shipped")
    assert result.exit_code == 0
    assert "Stage 'Shipped' updated successfully." in result.output
    assert storage.load_board("discovery").stages[2].name == "Shipped"


def test_stage_edit_missing(invoke, saved_board):
    result = invoke("stage", "edit", "ghost", "-p", "discovery", "-n", "x")
    assert result.exit_code == 1
    assert "Stage not found: 'ghost'" in result.output


def test_stage_delete(invoke, storage, saved_board):
    result = invoke("stage", "delete", "in-progress", "-p", "discovery", "--yes")
    assert result.exit_code == 0
    assert "Stage 'in-progress' deleted successfully." in result.output
    assert ids(storage.load_board("discovery").stages) == ["backlog", "done"]


def test_stage_move_persists(invoke, storage, saved_board):
    result = invoke("stage", "move", "0", "2", "-p", "discovery")
    assert result.exit_code == 0
    assert "Stage 'backlog' moved to position 2." in result.output

    stages = storage.load_board("discovery").stages
    assert ids(stages) == ["in-progress", "done", "backlog"]
    assert [s.order for s in stages] == [0, 1, 2]


def test_stage_move_same_position(invoke, saved_board):
    result = invoke("stage", "move", "1", "1", "-p", "discovery")
    assert result.exit_code == 0
    assert "Stage already at that position." in result.output


def test_stage_move_out_of_range(invoke, storage, saved_board):
    result = invoke("stage", "move", "0", "3", "-p", "discovery")
    assert result.exit_code == 1
    assert "Operation Error" in result.output
    assert ids(storage.load_board("discovery").stages) == ["backlog", "in-progress", "done"]


def test_stage_move_rejected(invoke, storage, saved_board, monkeypatch):
    def reject(self, phase_id, stage_ids):
        raise PersistenceError("server unavailable")

    monkeypatch.setattr(BoardStore, "reorder_stages", reject)

    result = invoke("stage", "move", "0", "2", "-p", "discovery")
    assert result.exit_code == 1
    assert "Error: Failed to reorder stages" in result.output
    assert "Stage 'backlog' could not be moved." in result.output
    assert ids(storage.load_board("discovery").stages) == ["backlog", "in-progress", "done"]


# =============================================================================
# Task commands
# =============================================================================


def test_task_add_with_details(invoke, saved_board):
    due = (datetime.now() + timedelta(days=30)).strftime("%Y-%m-%d")
    result = invoke(
        "task", "add", "backlog", "-p", "discovery",
        "-t", "Define success criteria",
        "--priority", "high",
        "--due", due,
        "--assignee-id", "u1", "--assignee-name", "Sam",
    )
    assert result.exit_code == 0
    assert "Task 'Define success criteria' created successfully" in result.output

    result = invoke("board", "show", "-p", "discovery", "--json")
    payload = json.loads(result.output)
    created = payload["stages"][0]["tasks"][-1]
    assert created["title"] == "Define success criteria"
    assert created["priority"] == "HIGH"
    assert created["order"] == 3
    assert created["due_date"].startswith(due)
    assert created["assignee"]["name"] == "Sam"


def test_task_add_bad_due_date(invoke, saved_board):
    result = invoke("task", "add", "backlog", "-p", "discovery", "-t", "x", "--due", "someday")
    assert result.exit_code == 2
    assert "Invalid date format" in result.output


def test_task_add_assignee_needs_id(invoke, saved_board):
    result = invoke("task", "add", "backlog", "-p", "discovery", "-t", "x", "--assignee-name", "Sam")
    assert result.exit_code == 2
    assert "--assignee-id is required" in result.output


def test_task_add_unknown_stage(invoke, saved_board):
    result = invoke("task", "add", "ghost", "-p", "discovery", "-t", "x")
    assert result.exit_code == 1
    assert "Stage not found: 'ghost'" in result.output


def test_task_edit(invoke, storage, saved_board):
    result = invoke("task", "edit", "B", "-p", "discovery", "--priority", "urgent")
    assert result.exit_code == 0
    assert storage.load_board("discovery").stages[0].tasks[1].priority.value == "URGENT"


def test_task_edit_clear_due_and_assignee(invoke, storage, saved_board):
    due = (datetime.now() + timedelta(days=7)).strftime("%Y-%m-%d")
    invoke("task", "edit", "A", "-p", "discovery", "--due", due, "--assignee-id", "u1")
    task = storage.load_board("discovery").stages[0].tasks[0]
    assert task.due_date is not None
    assert task.assignee.id == "u1"

    result = invoke("task", "edit", "A", "-p", "discovery", "--clear-due", "--clear-assignee")
    assert result.exit_code == 0
    task = storage.load_board("discovery").stages[0].tasks[0]
    assert task.due_date is None
    assert task.assignee is None


def test_task_edit_due_and_clear_due_conflict(invoke, saved_board):
    result = invoke("task", "edit", "A", "-p", "discovery", "--due", "2030-01-01", "--clear-due")
    assert result.exit_code == 2
    assert "cannot be used together" in result.output


def test_task_delete(invoke, storage, saved_board):
    result = invoke("task", "delete", "A", "-p", "discovery", "--yes")
    assert result.exit_code == 0
    assert "Task 'Task A' deleted successfully." in result.output
    assert ids(storage.load_board("discovery").stages[0].tasks) == ["B", "C"]


def test_task_move_across_stages(invoke, storage, saved_board):
    result = invoke("task", "move", "B", "-p", "discovery", "--to", "done", "-i", "0")
    assert result.exit_code == 0
    assert "Task 'Task B' moved to 'done' at position 0." in result.output

    stages = storage.load_board("discovery").stages
    assert ids(stages[0].tasks) == ["A", "C"]
    assert ids(stages[2].tasks) == ["B", "D"]


def test_task_move_appends_without_index(invoke, storage, saved_board):
    result = invoke("task", "move", "A", "-p", "discovery", "--to", "done")
    assert result.exit_code == 0
    assert "at position 1." in result.output
    assert ids(storage.load_board("discovery").stages[2].tasks) == ["D", "A"]


def test_task_move_within_stage(invoke, storage, saved_board):
    result = invoke("task", "move", "A", "-p", "discovery", "--to", "backlog", "-i", "2")
    assert result.exit_code == 0
    assert ids(storage.load_board("discovery").stages[0].tasks) == ["B", "C", "A"]


def test_task_move_unknown_task(invoke, saved_board):
    result = invoke("task", "move", "ghost", "-p", "discovery", "--to", "done")
    assert result.exit_code == 1
    assert "Task 'ghost' not found" in result.output


def test_task_move_bad_index(invoke, saved_board):
    result = invoke("task", "move", "A", "-p", "discovery", "--to", "done", "-i", "5")
    assert result.exit_code == 1
    assert "Operation Error" in result.output


def test_task_move_rejected(invoke, storage, saved_board, monkeypatch):
    def reject(self, phase_id, task_id, destination_stage_id, destination_order):
        raise PersistenceError("server unavailable")

    monkeypatch.setattr(BoardStore, "move_task", reject)

    result = invoke("task", "move", "A", "-p", "discovery", "--to", "done", "-i", "0")
    assert result.exit_code == 1
    assert "Error: Failed to move task" in result.output
    assert "Task 'A' could not be moved." in result.output
    assert ids(storage.load_board("discovery").stages[0].tasks) == ["A", "B", "C"]


# =============================================================================
# Board commands
# =============================================================================


def test_board_show(invoke, saved_board):
    result = invoke("board", "show", "-p", "discovery")
    assert result.exit_code == 0
    assert "Phase: discovery (3 stages)" in result.output
    assert "[0] backlog  PENDING  (3 tasks)  (backlog)" in result.output
    assert "0. Task A  MEDIUM  (A)" in result.output
    assert "    No tasks." in result.output


def test_board_show_json(invoke, saved_board):
    result = invoke("board", "show", "-p", "discovery", "-j")
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["phase_id"] == "discovery"
    assert [s["id"] for s in payload["stages"]] == ["backlog", "in-progress", "done"]


def test_board_phases(invoke, storage):
    result = invoke("board", "phases")
    assert result.exit_code == 0
    assert "No boards found." in result.output

    invoke("stage", "add", "-p", "rollout", "-n", "Backlog")
    invoke("stage", "add", "-p", "discovery", "-n", "Backlog")
    result = invoke("board", "phases")
    assert result.output.splitlines() == ["discovery", "rollout"]


# =============================================================================
# Config commands
# =============================================================================


def test_config_show(invoke):
    result = invoke("config", "show")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["default_task_priority"] == "MEDIUM"
    assert data["board_column_width"] == 28


def test_config_set_and_get(invoke, board_dir):
    result = invoke("config", "set", "board_column_width", "40")
    assert result.exit_code == 0
    assert "Set board_column_width = 40" in result.output

    result = invoke("config", "get", "board_column_width")
    assert result.output.strip() == "40"
    assert json.loads((board_dir / "config.json").read_text())["board_column_width"] == 40


def test_config_set_list(invoke):
    result = invoke("config", "set", "date_formats", "%d.%m.%Y, %Y-%m-%d")
    assert result.exit_code == 0

    result = invoke("config", "get", "date_formats")
    assert json.loads(result.output) == ["%d.%m.%Y", "%Y-%m-%d"]


def test_config_set_unknown_key(invoke):
    result = invoke("config", "set", "colour", "blue")
    assert result.exit_code == 1
    assert "Unknown config key 'colour'" in result.output


def test_config_set_bad_int(invoke):
    result = invoke("config", "set", "board_column_width", "wide")
    assert result.exit_code == 2
    assert "expects an integer" in result.output


def test_config_default_priority_applies(invoke, saved_board):
    invoke("config", "set", "default_task_priority", "LOW")

    invoke("task", "add", "done", "-p", "discovery", "-t", "Retro")
    result = invoke("board", "show", "-p", "discovery", "-j")
    created = json.loads(result.output)["stages"][2]["tasks"][-1]
    assert created["priority"] == "LOW"
