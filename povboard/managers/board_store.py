"""
Board persistence for povboard.

PersistenceBackend is the contract the ReorderEngine consumes. BoardStore is
the authoritative, file-backed implementation: it validates each request the
way the stage/task API does and rewrites the phase's board file.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Tuple

from loguru import logger

from povboard.constants import (
    VALIDATION_EMPTY_STAGE_IDS,
    VALIDATION_INVALID_STAGE_IDS,
    VALIDATION_STAGE_NAME_REQUIRED,
    VALIDATION_TASK_TITLE_REQUIRED,
    get_default_stage_status,
    get_default_task_priority,
)
from povboard.exceptions import (
    ConfigurationError,
    InvalidIndexError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from povboard.managers import reorder
from povboard.managers.storage_manager import StorageManager
from povboard.models.base import Assignee, Stage, StageStatus, Task, TaskPriority
from povboard.models.files import BoardFile


class PersistenceBackend(ABC):
    """Persistence collaborator used by the ReorderEngine.

    Implementations raise PersistenceError (or a subclass) on any failure.
    """

    @abstractmethod
    def fetch_stages(self, phase_id: str) -> List[Stage]:
        """Return the authoritative stages of a phase, each with its tasks, in order."""
        pass

    @abstractmethod
    def reorder_stages(self, phase_id: str, stage_ids: List[str]) -> None:
        """Store a new stage order given as the full ordered list of stage ids."""
        pass

    @abstractmethod
    def move_task(
        self,
        phase_id: str,
        task_id: str,
        destination_stage_id: str,
        destination_order: int,
    ) -> None:
        """Move a task to a stage at the given position."""
        pass


def _parse_status(value: Optional[str | StageStatus]) -> StageStatus:
    if isinstance(value, StageStatus):
        return value
    valid = ", ".join(s.value for s in StageStatus)
    if value is None:
        default = get_default_stage_status()
        try:
            return StageStatus(str(default).upper())
        except ValueError:
            raise ConfigurationError(
                f"Config 'default_stage_status' is '{default}'. Must be one of: {valid}."
            )
    try:
        return StageStatus(str(value).upper())
    except ValueError:
        raise ValidationError(f"Invalid stage status '{value}'. Must be one of: {valid}.")


def _parse_priority(value: Optional[str | TaskPriority]) -> TaskPriority:
    if isinstance(value, TaskPriority):
        return value
    valid = ", ".join(p.value for p in TaskPriority)
    if value is None:
        default = get_default_task_priority()
        try:
            return TaskPriority(str(default).upper())
        except ValueError:
            raise ConfigurationError(
                f"Config 'default_task_priority' is '{default}'. Must be one of: {valid}."
            )
    try:
        return TaskPriority(str(value).upper())
    except ValueError:
        raise ValidationError(f"Invalid task priority '{value}'. Must be one of: {valid}.")


class BoardStore(PersistenceBackend):
    """
    File-backed board store.

    Handles:
    - Fetching a phase's stages with their tasks
    - Reordering stages and moving tasks (server-side validation)
    - Creating, updating and deleting stages and tasks

    Every write keeps stage and task orders dense.
    """

    def __init__(self, storage: StorageManager) -> None:
        """
        Initialize BoardStore.

        Args:
            storage: StorageManager for reading and writing board files.
        """
        self.storage = storage

    def _load(self, phase_id: str) -> BoardFile:
        """Load a board with stages and tasks in ``order`` sequence."""
        board = self.storage.load_board(phase_id)
        board.stages.sort(key=lambda s: s.order)
        for stage in board.stages:
            stage.tasks.sort(key=lambda t: t.order)
        return board

    @contextmanager
    def _edit(self, phase_id: str) -> Iterator[BoardFile]:
        """Load a board for modification and save it if the block succeeds."""
        board = self._load(phase_id)
        yield board
        board.updated_at = datetime.now()
        self.storage.save_board(board)

    def _require_stage(self, board: BoardFile, stage_id: str) -> Stage:
        for stage in board.stages:
            if stage.id == stage_id:
                return stage
        raise NotFoundError(f"Stage not found: '{stage_id}' in phase '{board.phase_id}'.")

    def _locate_task(self, board: BoardFile, task_id: str) -> Tuple[Stage, Task]:
        for stage in board.stages:
            task = stage.find_task(task_id)
            if task is not None:
                return stage, task
        raise NotFoundError(f"Task not found: '{task_id}' in phase '{board.phase_id}'.")

    # =========================================================================
    # Queries
    # =========================================================================

    def fetch_stages(self, phase_id: str) -> List[Stage]:
        """Return the stages of a phase ordered by ``order``, tasks likewise."""
        stages = self._load(phase_id).stages
        logger.debug("Fetched {} stages for phase {}", len(stages), phase_id)
        return stages

    def get_stage(self, phase_id: str, stage_id: str) -> Stage:
        """Return one stage of a phase.

        Raises:
            NotFoundError: If the stage does not belong to the phase.
        """
        return self._require_stage(self.storage.load_board(phase_id), stage_id)

    def find_task(self, phase_id: str, task_id: str) -> Tuple[Stage, Task]:
        """Return the stage holding a task, and the task.

        Raises:
            NotFoundError: If no stage of the phase holds the task.
        """
        return self._locate_task(self.storage.load_board(phase_id), task_id)

    def list_phases(self) -> List[str]:
        """Return the ids of phases with a stored board."""
        return self.storage.list_phase_ids()

    # =========================================================================
    # Reordering
    # =========================================================================

    def reorder_stages(self, phase_id: str, stage_ids: List[str]) -> None:
        """Apply a full stage order.

        Raises:
            PersistenceError: If the list is empty, has duplicates, or does not
                name exactly the stages of the phase.
        """
        if not stage_ids:
            raise PersistenceError(VALIDATION_EMPTY_STAGE_IDS)

        with self._edit(phase_id) as board:
            by_id = {stage.id: stage for stage in board.stages}
            if len(set(stage_ids)) != len(stage_ids) or set(stage_ids) != set(by_id):
                raise PersistenceError(VALIDATION_INVALID_STAGE_IDS)

            board.stages = [by_id[stage_id] for stage_id in stage_ids]
            reorder.reindex(board.stages)

        logger.info("Reordered {} stages in phase {}", len(stage_ids), phase_id)

    def move_task(
        self,
        phase_id: str,
        task_id: str,
        destination_stage_id: str,
        destination_order: int,
    ) -> None:
        """Move a task to a stage at the given position.

        Raises:
            PersistenceError: If the task or stage is unknown or the order is
                out of range. The stored board is left unchanged.
        """
        with self._edit(phase_id) as board:
            try:
                self._require_stage(board, destination_stage_id)
                source, _ = self._locate_task(board, task_id)
                board.stages = reorder.move_task(
                    board.stages, task_id, source.id, destination_stage_id, destination_order
                )
            except (NotFoundError, InvalidIndexError) as e:
                raise PersistenceError(str(e)) from e
            for stage in board.stages:
                if stage.id == destination_stage_id:
                    moved = stage.find_task(task_id)
                    if moved is not None:
                        moved.updated_at = datetime.now()

        logger.info(
            "Moved task {} to stage {} at {} in phase {}",
            task_id,
            destination_stage_id,
            destination_order,
            phase_id,
        )

    # =========================================================================
    # Stage CRUD
    # =========================================================================

    def create_stage(
        self,
        phase_id: str,
        name: str,
        description: Optional[str] = None,
        status: Optional[str | StageStatus] = None,
    ) -> Stage:
        """Append a new stage to a phase's board.

        Raises:
            ValidationError: If the name is blank or the status is unknown.
        """
        if not name or not name.strip():
            raise ValidationError(VALIDATION_STAGE_NAME_REQUIRED)
        stage_status = _parse_status(status)

        with self._edit(phase_id) as board:
            stage = Stage(
                name=name,
                description=description or None,
                status=stage_status,
                order=len(board.stages),
            )
            board.stages.append(stage)

        logger.info("Created stage {} ({}) in phase {}", stage.id, stage.name, phase_id)
        return stage

    def update_stage(
        self,
        phase_id: str,
        stage_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str | StageStatus] = None,
    ) -> Stage:
        """Update the given fields of a stage.

        Raises:
            NotFoundError: If the stage does not exist.
            ValidationError: If a new name is blank or the status is unknown.
        """
        if name is not None and not name.strip():
            raise ValidationError(VALIDATION_STAGE_NAME_REQUIRED)

        with self._edit(phase_id) as board:
            stage = self._require_stage(board, stage_id)
            if name is not None:
                stage.name = name.strip()
            if description is not None:
                stage.description = description or None
            if status is not None:
                stage.status = _parse_status(status)
            stage.updated_at = datetime.now()

        return stage

    def delete_stage(self, phase_id: str, stage_id: str) -> Stage:
        """Delete a stage together with its tasks.

        Raises:
            NotFoundError: If the stage does not exist.
        """
        with self._edit(phase_id) as board:
            stage = self._require_stage(board, stage_id)
            board.stages.remove(stage)
            reorder.reindex(board.stages)

        logger.info("Deleted stage {} and {} tasks from phase {}", stage_id, len(stage.tasks), phase_id)
        return stage

    # =========================================================================
    # Task CRUD
    # =========================================================================

    def create_task(
        self,
        phase_id: str,
        stage_id: str,
        title: str,
        description: Optional[str] = None,
        priority: Optional[str | TaskPriority] = None,
        due_date: Optional[datetime] = None,
        assignee: Optional[Assignee] = None,
    ) -> Task:
        """Append a new task to a stage.

        Raises:
            NotFoundError: If the stage does not exist.
            ValidationError: If the title is blank or the priority is unknown.
        """
        if not title or not title.strip():
            raise ValidationError(VALIDATION_TASK_TITLE_REQUIRED)
        task_priority = _parse_priority(priority)

        with self._edit(phase_id) as board:
            stage = self._require_stage(board, stage_id)
            task = Task(
                title=title,
                description=description or None,
                priority=task_priority,
                due_date=due_date,
                assignee=assignee,
                order=len(stage.tasks),
            )
            stage.tasks.append(task)

        logger.info("Created task {} in stage {} of phase {}", task.id, stage_id, phase_id)
        return task

    def update_task(
        self,
        phase_id: str,
        task_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        priority: Optional[str | TaskPriority] = None,
        due_date: Optional[datetime] = None,
        assignee: Optional[Assignee] = None,
        clear_due_date: bool = False,
        clear_assignee: bool = False,
    ) -> Task:
        """Update the given fields of a task.

        ``None`` leaves a field unchanged; the ``clear_*`` flags remove the
        due date or the assignee.

        Raises:
            NotFoundError: If the task does not exist.
            ValidationError: If a new title is blank or the priority is unknown.
        """
        if title is not None and not title.strip():
            raise ValidationError(VALIDATION_TASK_TITLE_REQUIRED)

        with self._edit(phase_id) as board:
            _, task = self._locate_task(board, task_id)
            if title is not None:
                task.title = title.strip()
            if description is not None:
                task.description = description or None
            if priority is not None:
                task.priority = _parse_priority(priority)
            if clear_due_date:
                task.due_date = None
            elif due_date is not None:
                task.due_date = due_date
            if clear_assignee:
                task.assignee = None
            elif assignee is not None:
                task.assignee = assignee
            task.updated_at = datetime.now()

        return task

    def delete_task(self, phase_id: str, task_id: str) -> Task:
        """Delete a task and renumber the rest of its stage.

        Raises:
            NotFoundError: If the task does not exist.
        """
        with self._edit(phase_id) as board:
            stage, task = self._locate_task(board, task_id)
            stage.tasks.remove(task)
            reorder.reindex(stage.tasks)

        logger.info("Deleted task {} from stage {} of phase {}", task_id, stage.id, phase_id)
        return task
