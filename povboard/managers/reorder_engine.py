"""
ReorderEngine for povboard.

Holds the working set of one phase's board and applies stage/task moves
optimistically: the new order is taken and announced first, then sent to the
persistence backend. If the backend fails, the working set is thrown away
and replaced by a fresh fetch.
"""

from typing import List, Optional

from loguru import logger

from povboard.constants import NOTIFY_LOAD_FAILED, NOTIFY_MOVE_FAILED, NOTIFY_REORDER_FAILED
from povboard.exceptions import PersistenceError, RefreshError
from povboard.managers import reorder
from povboard.managers.board_store import PersistenceBackend
from povboard.managers.events import BoardEvent, EventBus, EventType, get_event_bus
from povboard.models.base import Stage
from povboard.signals import signal


class ReorderEngine:
    """
    Optimistic reordering of a phase's stages and tasks.

    Handles:
    - Loading the working set from the backend
    - Moving stages (full stage-id list sent to the backend)
    - Moving tasks within or between stages
    - Reverting to the backend's state when a persistence call fails

    Moves are expected one at a time. A failed persistence call discards every
    local change that was not yet confirmed, including later moves.
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        phase_id: str,
        stages: Optional[List[Stage]] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        """
        Initialize ReorderEngine.

        Args:
            backend: Persistence collaborator.
            phase_id: Phase whose board this engine manages.
            stages: Initial working set. Use load() to fetch it instead.
            event_bus: Bus for move/refresh events. Defaults to the global bus.
        """
        self.backend = backend
        self.phase_id = phase_id
        self._stages: List[Stage] = list(stages) if stages else []
        self.event_bus = event_bus if event_bus is not None else get_event_bus()

    @signal
    def stages_changed(self, stages: list) -> None:
        """Emitted whenever the held working set is replaced."""

    @property
    def stages(self) -> List[Stage]:
        """The current working set."""
        return self._stages

    def _replace(self, stages: List[Stage]) -> None:
        self._stages = stages
        self.stages_changed(stages)

    def _publish(self, event_type: EventType, message: str = "", entity_id: Optional[str] = None, **data) -> None:
        self.event_bus.publish(
            BoardEvent(
                type=event_type,
                phase_id=self.phase_id,
                entity_id=entity_id,
                message=message,
                data=data,
            )
        )

    # =========================================================================
    # Loading
    # =========================================================================

    def load(self) -> List[Stage]:
        """Replace the working set with the backend's current stages.

        Raises:
            RefreshError: If the backend cannot be read.
        """
        try:
            stages = self.backend.fetch_stages(self.phase_id)
        except PersistenceError as e:
            logger.error("Fetching stages for phase {} failed: {}", self.phase_id, e)
            self._publish(EventType.REFRESH_FAILED, NOTIFY_LOAD_FAILED, error=str(e))
            raise RefreshError(f"{NOTIFY_LOAD_FAILED} for phase '{self.phase_id}': {e}") from e

        self._replace(stages)
        self._publish(EventType.BOARD_REFRESHED, stage_count=len(stages))
        return stages

    def _revert(self, error: PersistenceError, message: str, entity_id: Optional[str]) -> None:
        logger.warning("{} in phase {}: {}; reloading board", message, self.phase_id, error)
        self._publish(EventType.MOVE_FAILED, message, entity_id=entity_id, error=str(error))
        self.load()

    # =========================================================================
    # Moves
    # =========================================================================

    def move_stage(self, source_index: int, destination_index: int) -> List[Stage]:
        """Move the stage at source_index to destination_index.

        Args:
            source_index: Current position of the stage.
            destination_index: New position of the stage.

        Returns:
            The optimistic working set. After a persistence failure the
            engine's ``stages`` hold the re-fetched board instead.

        Raises:
            InvalidIndexError: If an index is out of range (nothing changes).
            RefreshError: If persistence failed and the re-fetch failed too.
        """
        new_stages = reorder.move_stage(self._stages, source_index, destination_index)
        if new_stages is self._stages:
            return new_stages

        moved_id = new_stages[destination_index].id
        self._replace(new_stages)

        try:
            self.backend.reorder_stages(self.phase_id, [stage.id for stage in new_stages])
        except PersistenceError as e:
            self._revert(e, NOTIFY_REORDER_FAILED, moved_id)
            return new_stages

        logger.debug("Stage {} moved from {} to {}", moved_id, source_index, destination_index)
        self._publish(
            EventType.STAGES_REORDERED,
            entity_id=moved_id,
            source_index=source_index,
            destination_index=destination_index,
        )
        return new_stages

    def move_task(
        self,
        task_id: str,
        source_stage_id: str,
        destination_stage_id: str,
        destination_index: int,
    ) -> List[Stage]:
        """Move a task within its stage or into another stage.

        Args:
            task_id: Task to move.
            source_stage_id: Stage currently holding the task.
            destination_stage_id: Stage receiving the task (may be the source).
            destination_index: Position of the task in the destination stage.

        Returns:
            The optimistic working set. After a persistence failure the
            engine's ``stages`` hold the re-fetched board instead.

        Raises:
            NotFoundError: If the task or a stage is not in the working set.
            InvalidIndexError: If destination_index is out of range.
            RefreshError: If persistence failed and the re-fetch failed too.
        """
        new_stages = reorder.move_task(
            self._stages, task_id, source_stage_id, destination_stage_id, destination_index
        )
        self._replace(new_stages)

        try:
            self.backend.move_task(self.phase_id, task_id, destination_stage_id, destination_index)
        except PersistenceError as e:
            self._revert(e, NOTIFY_MOVE_FAILED, task_id)
            return new_stages

        logger.debug(
            "Task {} moved from stage {} to stage {} at {}",
            task_id,
            source_stage_id,
            destination_stage_id,
            destination_index,
        )
        self._publish(
            EventType.TASK_MOVED,
            entity_id=task_id,
            source_stage_id=source_stage_id,
            destination_stage_id=destination_stage_id,
            destination_index=destination_index,
        )
        return new_stages
