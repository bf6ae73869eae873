"""
File models for povboard.

Models representing the structure of JSON files in the .povboard/ directory.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from povboard.constants import (
    DEFAULT_BOARD_COLUMN_WIDTH,
    DEFAULT_DATE_FORMATS,
    DEFAULT_DATE_MAX_YEARS_FUTURE,
    DEFAULT_DATE_MAX_YEARS_PAST,
    DEFAULT_STAGE_STATUS,
    DEFAULT_TASK_PRIORITY,
)

from .base import Stage


class BoardFile(BaseModel):
    """Model for phases/<phase_id>.json.

    The authoritative board of one phase: stages in order, each with its
    tasks in order.
    """

    phase_id: str
    stages: List[Stage] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=datetime.now)


class ConfigFile(BaseModel):
    """Model for config.json file.

    Board settings and configuration.
    """

    schema_version: str = "0.1.0"

    default_phase: Optional[str] = None

    # Defaults for new items
    default_stage_status: str = DEFAULT_STAGE_STATUS
    default_task_priority: str = DEFAULT_TASK_PRIORITY

    # Date settings
    date_formats: List[str] = Field(default_factory=lambda: list(DEFAULT_DATE_FORMATS))
    date_max_years_future: int = DEFAULT_DATE_MAX_YEARS_FUTURE
    date_max_years_past: int = DEFAULT_DATE_MAX_YEARS_PAST

    # Display settings
    board_column_width: int = DEFAULT_BOARD_COLUMN_WIDTH
