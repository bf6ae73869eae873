"""
Constants for the povboard application.

Note: These constants serve as default fallback values.
Actual values are loaded from .povboard/config.json at runtime via ConfigManager.
"""
from pathlib import Path
from typing import Any, Optional
import json

# =============================================================================
# Default Fallback Values
# These are used if config.json doesn't exist or doesn't specify a value.
# =============================================================================

DEFAULT_BOARD_DIR = ".povboard"

# Board defaults
DEFAULT_STAGE_STATUS = "PENDING"
DEFAULT_TASK_PRIORITY = "MEDIUM"
DEFAULT_BOARD_COLUMN_WIDTH = 28

# Phase ids double as file names under phases/
PHASE_ID_PATTERN = r"^[A-Za-z0-9_-]+$"

# Validation error messages (not configurable)
VALIDATION_STAGE_NAME_REQUIRED = "Stage name is required"
VALIDATION_TASK_TITLE_REQUIRED = "Task title is required"
VALIDATION_INVALID_PHASE_ID = (
    "Phase id must contain only letters, digits, hyphens and underscores."
)
VALIDATION_INVALID_STAGE_IDS = "Some stage IDs are invalid or do not belong to this phase"
VALIDATION_EMPTY_STAGE_IDS = "Invalid stageIds. Expected non-empty array."

# Failure notifications shown to the user
NOTIFY_REORDER_FAILED = "Failed to reorder stages"
NOTIFY_MOVE_FAILED = "Failed to move task"
NOTIFY_LOAD_FAILED = "Failed to load stages"

# Date format defaults
DEFAULT_DATE_FORMATS = [
    "%Y-%m-%d",      # YYYY-MM-DD (ISO 8601)
    "%Y/%m/%d",      # YYYY/MM/DD
    "%d-%m-%Y",      # DD-MM-YYYY
    "%d/%m/%Y",      # DD/MM/YYYY
    "%Y%m%d",        # YYYYMMDD
    "%d %B %Y",      # DD Month YYYY (e.g., 31 December 2024)
    "%B %d, %Y",     # Month DD, YYYY (e.g., December 31, 2024)
]
DEFAULT_DATE_MAX_YEARS_FUTURE = 10
DEFAULT_DATE_MAX_YEARS_PAST = 1

DATE_FORMAT_ERROR = (
    "Invalid date format. Supported formats: YYYY-MM-DD, YYYY/MM/DD, DD-MM-YYYY, "
    "DD/MM/YYYY, YYYYMMDD, 'DD Month YYYY', 'Month DD, YYYY'. "
    "Examples: 2024-12-31, 31/12/2024, '31 December 2024'."
)


# =============================================================================
# Config Loader
# Load values from .povboard/config.json at runtime.
# =============================================================================

_config_manager_instance: Optional['ConfigManager'] = None


class ConfigManager:
    """
    Manages loading configuration from a config.json file with fallback to defaults.

    This class is independent of StorageManager to avoid cyclic dependencies.
    StorageManager handles persistence; ConfigManager handles runtime access.

    Usage:
        config = ConfigManager()
        priority = config.get('default_task_priority', DEFAULT_TASK_PRIORITY)

        config = ConfigManager(board_dir=Path("/tmp/.povboard"))
        phase_id = config.get('default_phase')
    """

    def __init__(self, config_path: Optional[Path] = None, board_dir: Optional[Path] = None) -> None:
        """
        Initialize ConfigManager.

        Args:
            config_path: Direct path to config.json file. Takes precedence over board_dir.
            board_dir: Path to .povboard/ directory. Config path will be board_dir/config.json.
        """
        self._config: Optional[dict] = None

        if config_path is not None:
            self._config_path = config_path
        elif board_dir is not None:
            self._config_path = board_dir / "config.json"
        else:
            self._config_path = Path(DEFAULT_BOARD_DIR) / "config.json"

    def _load_config(self) -> dict:
        """Load config from config.json file."""
        if self._config is not None:
            return self._config

        if self._config_path.exists():
            try:
                with open(self._config_path, "r") as f:
                    self._config = json.load(f)
            except (json.JSONDecodeError, IOError):
                self._config = {}
        else:
            self._config = {}

        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value with fallback to default.

        Args:
            key: Configuration key name.
            default: Default value if key not found.

        Returns:
            Config value or default.
        """
        config = self._load_config()
        value = config.get(key)
        return default if value is None else value

    def get_int(self, key: str, default: int) -> int:
        """Get an integer config value with fallback."""
        value = self.get(key, default)
        return int(value) if value is not None else default

    def get_list(self, key: str, default: list) -> list:
        """Get a list config value with fallback."""
        value = self.get(key, default)
        return list(value) if isinstance(value, (list, tuple)) else default

    def get_str(self, key: str, default: str) -> str:
        """Get a string config value with fallback."""
        value = self.get(key, default)
        return str(value) if value is not None else default

    def reload(self) -> dict:
        """Force reload of config from disk."""
        self._config = None
        return self._load_config()

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        return self._config_path


def get_config_manager(reset: bool = False, board_dir: Optional[Path] = None) -> ConfigManager:
    """
    Get the singleton ConfigManager instance.

    Args:
        reset: If True, reset the singleton and create a new instance.
        board_dir: Board directory for a newly created instance.

    Returns:
        ConfigManager singleton instance.
    """
    global _config_manager_instance
    if _config_manager_instance is None or reset:
        _config_manager_instance = ConfigManager(board_dir=board_dir)
    return _config_manager_instance


def reset_config_manager() -> None:
    """Reset the singleton ConfigManager instance (useful for testing)."""
    global _config_manager_instance
    _config_manager_instance = None


def get_default_phase() -> Optional[str]:
    """Get the phase used when commands are not given one."""
    return get_config_manager().get('default_phase')


def get_default_stage_status() -> str:
    """Get default stage status from config or default."""
    return get_config_manager().get_str('default_stage_status', DEFAULT_STAGE_STATUS)


def get_default_task_priority() -> str:
    """Get default task priority from config or default."""
    return get_config_manager().get_str('default_task_priority', DEFAULT_TASK_PRIORITY)


def get_date_formats() -> list:
    """Get date formats from config or default."""
    return get_config_manager().get_list('date_formats', DEFAULT_DATE_FORMATS)


def get_date_max_years_future() -> int:
    """Get date max years future from config or default."""
    return get_config_manager().get_int('date_max_years_future', DEFAULT_DATE_MAX_YEARS_FUTURE)


def get_date_max_years_past() -> int:
    """Get date max years past from config or default."""
    return get_config_manager().get_int('date_max_years_past', DEFAULT_DATE_MAX_YEARS_PAST)


def get_board_column_width() -> int:
    """Get board column width from config or default."""
    return get_config_manager().get_int('board_column_width', DEFAULT_BOARD_COLUMN_WIDTH)
