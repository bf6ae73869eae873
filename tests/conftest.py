"""
Test fixtures for the povboard test suite.

Provides:
- Temporary directory fixtures (isolated from any real .povboard/)
- Mock data builders for creating stages and tasks
- A sample working set used by the reorder tests
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator, List, Optional

import pytest

from povboard.constants import reset_config_manager
from povboard.managers.board_store import BoardStore
from povboard.managers.events import get_event_bus
from povboard.managers.storage_manager import StorageManager
from povboard.models.base import Stage, StageStatus, Task, TaskPriority
from povboard.models.files import BoardFile


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test in a fresh cwd with no listeners or cached config."""
    monkeypatch.chdir(tmp_path)
    get_event_bus().clear()
    reset_config_manager()
    yield
    get_event_bus().clear()
    reset_config_manager()


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test isolation."""
    temp_path = Path(tempfile.mkdtemp(prefix="povboard_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def board_dir(temp_dir: Path) -> Path:
    """Path of a .povboard/ directory inside the temp dir (not created)."""
    return temp_dir / ".povboard"


@pytest.fixture
def storage(board_dir: Path) -> StorageManager:
    """StorageManager writing into the temp board dir."""
    return StorageManager(board_dir=board_dir)


@pytest.fixture
def store(storage: StorageManager) -> BoardStore:
    """BoardStore on top of the temp storage."""
    return BoardStore(storage)


# =============================================================================
# Mock Data Builders
# =============================================================================


class MockDataBuilder:
    """Helper class for building stages and tasks for testing."""

    @staticmethod
    def create_task(
        task_id: str,
        title: Optional[str] = None,
        order: int = 0,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> Task:
        """Create a Task with a fixed id."""
        return Task(id=task_id, title=title or f"Task {task_id}", order=order, priority=priority)

    @staticmethod
    def create_stage(
        stage_id: str,
        name: Optional[str] = None,
        order: int = 0,
        task_ids: Optional[List[str]] = None,
        status: StageStatus = StageStatus.PENDING,
    ) -> Stage:
        """Create a Stage with a fixed id and tasks numbered in list order."""
        tasks = [
            MockDataBuilder.create_task(task_id, order=index)
            for index, task_id in enumerate(task_ids or [])
        ]
        return Stage(id=stage_id, name=name or stage_id, order=order, tasks=tasks, status=status)

    @staticmethod
    def create_working_set(layout: dict) -> List[Stage]:
        """Create stages from an ordered {stage_id: [task_ids]} mapping."""
        return [
            MockDataBuilder.create_stage(stage_id, order=index, task_ids=task_ids)
            for index, (stage_id, task_ids) in enumerate(layout.items())
        ]


@pytest.fixture
def builder() -> type[MockDataBuilder]:
    """Expose the data builder to tests."""
    return MockDataBuilder


@pytest.fixture
def sample_stages() -> List[Stage]:
    """Backlog [A, B, C], In Progress [], Done [D]."""
    return MockDataBuilder.create_working_set(
        {"backlog": ["A", "B", "C"], "in-progress": [], "done": ["D"]}
    )


@pytest.fixture
def saved_board(storage: StorageManager, sample_stages: List[Stage]) -> BoardFile:
    """Persist the sample stages as the board of phase 'discovery'."""
    board = BoardFile(phase_id="discovery", stages=[s.model_copy(deep=True) for s in sample_stages])
    storage.save_board(board)
    return board


