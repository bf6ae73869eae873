"""
BoardCore - Core business logic for povboard.

Orchestrates manager classes for all board operations of one phase.
Uses StorageManager for .povboard/ folder-based storage exclusively.
Uses EventBus for decoupled notification of move failures.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from povboard.constants import VALIDATION_INVALID_PHASE_ID
from povboard.exceptions import InvalidIndexError, NotFoundError, RefreshError, ValidationError
from povboard.managers import (
    BoardStore,
    NotificationListener,
    ReorderEngine,
    StorageManager,
    get_event_bus,
    subscribe_listener,
)
from povboard.models.base import Assignee, Stage, Task
from povboard.utils import is_valid_phase_id


class BoardCore:
    """
    Core class for a phase's Kanban board.

    Orchestrates:
    - StorageManager: Persistence to .povboard/ folder
    - BoardStore: Authoritative stage/task operations
    - ReorderEngine: Optimistic stage and task moves
    - EventBus: Event-driven communication
    - NotificationListener: Error notices for failed moves
    """

    def __init__(
        self,
        phase_id: str,
        board_dir: Optional[Path] = None,
        notifications_enabled: bool = True,
    ):
        """
        Initialize the BoardCore for a phase and load its board.

        Args:
            phase_id: Phase whose board is managed.
            board_dir: Path to .povboard/ directory. Defaults to .povboard/ in current directory.
            notifications_enabled: Whether to print notices for failed moves.

        Raises:
            ValidationError: If the phase id is not usable.
            RefreshError: If the board cannot be loaded.
        """
        if not is_valid_phase_id(phase_id):
            raise ValidationError(f"{VALIDATION_INVALID_PHASE_ID} Got: '{phase_id}'")

        self.phase_id = phase_id
        self.storage = StorageManager(board_dir)
        self.store = BoardStore(self.storage)

        self.event_bus = get_event_bus()
        self.engine = ReorderEngine(self.store, phase_id, event_bus=self.event_bus)

        self.notification_listener: Optional[NotificationListener] = None
        if notifications_enabled:
            self.notification_listener = NotificationListener()
            subscribe_listener(self.notification_listener)

        try:
            self.engine.load()
        except RefreshError:
            self.close()
            raise

    def close(self) -> None:
        """Detach this core's listeners from the global event bus."""
        if self.notification_listener is not None:
            self.event_bus.unsubscribe(self.notification_listener)
            self.notification_listener = None

    @property
    def stages(self) -> List[Stage]:
        """Current stages of the board."""
        return self.engine.stages

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_stage(self, stage_id: str) -> Stage:
        """Return a stage of the working set by id."""
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        raise NotFoundError(f"Stage '{stage_id}' not found in phase '{self.phase_id}'.")

    def stage_index(self, stage_id: str) -> int:
        """Return the position of a stage on the board."""
        return self.stages.index(self.get_stage(stage_id))

    def find_task(self, task_id: str) -> tuple[Stage, Task]:
        """Return the stage holding a task, and the task."""
        for stage in self.stages:
            task = stage.find_task(task_id)
            if task is not None:
                return stage, task
        raise NotFoundError(f"Task '{task_id}' not found in phase '{self.phase_id}'.")

    # =========================================================================
    # Moves
    # =========================================================================

    def move_stage(self, stage_id: str, destination_index: int) -> List[Stage]:
        """Move a stage to a new position."""
        return self.engine.move_stage(self.stage_index(stage_id), destination_index)

    def move_task(
        self,
        task_id: str,
        destination_stage_id: str,
        destination_index: Optional[int] = None,
        source_stage_id: Optional[str] = None,
    ) -> List[Stage]:
        """Move a task, appending it to the destination when no index is given."""
        if source_stage_id is None:
            source_stage_id = self.find_task(task_id)[0].id

        if destination_index is None:
            destination = self.get_stage(destination_stage_id)
            destination_index = len(destination.tasks)
            if destination_stage_id == source_stage_id:
                destination_index -= 1
            if destination_index < 0:
                raise InvalidIndexError("Destination stage has no position to move to.")

        return self.engine.move_task(task_id, source_stage_id, destination_stage_id, destination_index)

    # =========================================================================
    # Stage and task CRUD
    # =========================================================================

    def add_stage(
        self,
        name: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Stage:
        """Create a stage at the end of the board."""
        stage = self.store.create_stage(self.phase_id, name, description, status)
        self.engine.load()
        return stage

    def update_stage(
        self,
        stage_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Stage:
        """Update an existing stage."""
        stage = self.store.update_stage(self.phase_id, stage_id, name, description, status)
        self.engine.load()
        return stage

    def delete_stage(self, stage_id: str) -> Stage:
        """Delete a stage and its tasks."""
        stage = self.store.delete_stage(self.phase_id, stage_id)
        self.engine.load()
        return stage

    def add_task(
        self,
        stage_id: str,
        title: str,
        description: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[datetime] = None,
        assignee: Optional[Assignee] = None,
    ) -> Task:
        """Create a task at the end of a stage."""
        task = self.store.create_task(
            self.phase_id, stage_id, title, description, priority, due_date, assignee
        )
        self.engine.load()
        return task

    def update_task(
        self,
        task_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[datetime] = None,
        assignee: Optional[Assignee] = None,
        clear_due_date: bool = False,
        clear_assignee: bool = False,
    ) -> Task:
        """Update an existing task."""
        task = self.store.update_task(
            self.phase_id, task_id, title, description, priority, due_date, assignee,
            clear_due_date=clear_due_date,
            clear_assignee=clear_assignee,
        )
        self.engine.load()
        return task

    def delete_task(self, task_id: str) -> Task:
        """Delete a task."""
        task = self.store.delete_task(self.phase_id, task_id)
        self.engine.load()
        return task
