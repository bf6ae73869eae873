"""
Board item models for povboard.

A phase's board is an ordered list of stages; each stage holds an ordered
list of tasks. The ``order`` field is the zero-based position of an item
within its parent.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class StageStatus(str, Enum):
    """Valid status values for stages."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    BLOCKED = "BLOCKED"


class TaskPriority(str, Enum):
    """Valid priority values for tasks."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


def _new_id() -> str:
    return str(uuid.uuid4())


class Assignee(BaseModel):
    """User a task is assigned to. Display only."""

    id: str
    name: str
    email: Optional[str] = None


class Task(BaseModel):
    """A unit of work belonging to exactly one stage."""

    id: str = Field(default_factory=_new_id)
    title: str
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee: Optional[Assignee] = None
    due_date: Optional[datetime] = None
    order: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject blank titles."""
        if not v or not v.strip():
            raise ValueError("Task title is required")
        return v.strip()


class Stage(BaseModel):
    """
    A named Kanban column within a phase.

    Tasks are kept in display order; ``task.order`` mirrors the list
    position once the stage has been reindexed.
    """

    id: str = Field(default_factory=_new_id)
    name: str
    description: Optional[str] = None
    status: StageStatus = StageStatus.PENDING
    order: int = Field(default=0, ge=0)
    tasks: List[Task] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank names."""
        if not v or not v.strip():
            raise ValueError("Stage name is required")
        return v.strip()

    def find_task(self, task_id: str) -> Optional[Task]:
        """Return the task with the given id, or None."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def task_index(self, task_id: str) -> int:
        """Return the list position of a task, or -1 if absent."""
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                return index
        return -1

    @property
    def task_ids(self) -> List[str]:
        """Task ids in display order."""
        return [task.id for task in self.tasks]
