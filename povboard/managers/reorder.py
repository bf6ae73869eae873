"""
Pure reordering functions for a phase's Kanban board.

A working set is the ordered list of stages of one phase. Every function
here takes a working set and returns a new one; the input is never mutated.
"""

from typing import List, Sequence

from povboard.exceptions import InvalidIndexError, NotFoundError
from povboard.models.base import Stage, Task


def reindex(items: Sequence[Stage | Task]) -> None:
    """Assign each item its list position as ``order``."""
    for index, item in enumerate(items):
        item.order = index


def is_dense(items: Sequence[Stage | Task]) -> bool:
    """Check that ``order`` values are exactly 0..n-1 in list order."""
    return [item.order for item in items] == list(range(len(items)))


def _copy(working_set: Sequence[Stage]) -> List[Stage]:
    return [stage.model_copy(deep=True) for stage in working_set]


def _stage_index(working_set: Sequence[Stage], stage_id: str) -> int:
    for index, stage in enumerate(working_set):
        if stage.id == stage_id:
            return index
    raise NotFoundError(f"Stage '{stage_id}' not found in the working set.")


def _check_index(index: int, upper: int, what: str) -> None:
    """Raise unless 0 <= index <= upper."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidIndexError(f"{what} must be an integer, got {index!r}.")
    if index < 0 or index > upper:
        raise InvalidIndexError(
            f"{what} {index} is out of range (expected 0 to {upper})."
        )


def move_stage(
    working_set: List[Stage], source_index: int, destination_index: int
) -> List[Stage]:
    """Move a stage to a new position and renumber every stage.

    Args:
        working_set: Current stages in order.
        source_index: Position of the stage to move.
        destination_index: Position the stage ends up at.

    Returns:
        A new working set, or ``working_set`` itself when the indices are equal.

    Raises:
        InvalidIndexError: If either index is outside the stage list.
    """
    last = len(working_set) - 1
    if last < 0:
        raise InvalidIndexError("Cannot move a stage on an empty board.")
    _check_index(source_index, last, "Source index")
    _check_index(destination_index, last, "Destination index")

    if source_index == destination_index:
        return working_set

    stages = _copy(working_set)
    moved = stages.pop(source_index)
    stages.insert(destination_index, moved)
    reindex(stages)
    return stages


def move_task(
    working_set: List[Stage],
    task_id: str,
    source_stage_id: str,
    destination_stage_id: str,
    destination_index: int,
) -> List[Stage]:
    """Move a task within its stage or into another stage.

    For a same-stage move, ``destination_index`` is a position in the task
    list after the task has been taken out of it.

    Args:
        working_set: Current stages in order.
        task_id: Id of the task to move.
        source_stage_id: Id of the stage currently holding the task.
        destination_stage_id: Id of the stage receiving the task.
        destination_index: Position of the task in the destination stage.

    Returns:
        A new working set with both affected stages renumbered.

    Raises:
        NotFoundError: If a stage id is unknown or the task is not in the source stage.
        InvalidIndexError: If destination_index is outside the destination list.
    """
    source_pos = _stage_index(working_set, source_stage_id)
    destination_pos = _stage_index(working_set, destination_stage_id)

    task_pos = working_set[source_pos].task_index(task_id)
    if task_pos == -1:
        raise NotFoundError(
            f"Task '{task_id}' not found in stage '{source_stage_id}'."
        )

    destination_count = len(working_set[destination_pos].tasks)
    if source_pos == destination_pos:
        destination_count -= 1
    _check_index(destination_index, destination_count, "Destination index")

    stages = _copy(working_set)
    source = stages[source_pos]
    destination = stages[destination_pos]

    task = source.tasks.pop(task_pos)
    destination.tasks.insert(destination_index, task)

    reindex(source.tasks)
    if destination is not source:
        reindex(destination.tasks)
    return stages
