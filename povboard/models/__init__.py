"""
Data models for povboard.

Import models explicitly from their modules:
    from povboard.models.base import Stage, Task, Assignee, StageStatus, TaskPriority
    from povboard.models.files import BoardFile, ConfigFile
"""

from .base import Assignee, Stage, StageStatus, Task, TaskPriority

__all__ = ["Assignee", "Stage", "StageStatus", "Task", "TaskPriority"]
