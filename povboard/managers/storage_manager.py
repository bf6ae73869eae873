"""
Storage manager for povboard.

Handles loading and saving of all JSON files in the .povboard/ directory.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from povboard.constants import DEFAULT_BOARD_DIR, VALIDATION_INVALID_PHASE_ID
from povboard.exceptions import StorageError
from povboard.models.files import BoardFile, ConfigFile
from povboard.utils import is_valid_phase_id


class StorageManager:
    """
    Manages persistence of board data to JSON files in the .povboard/ directory.

    Layout:
        .povboard/config.json
        .povboard/phases/<phase_id>.json

    Handles atomic writes to prevent data corruption.
    """

    def __init__(self, board_dir: Optional[Path] = None) -> None:
        """
        Initialize the StorageManager with a .povboard/ directory path.

        Args:
            board_dir: Path to the .povboard/ directory. Defaults to .povboard/ in current directory.
        """
        self.board_dir = board_dir if board_dir else Path(DEFAULT_BOARD_DIR)
        self.phases_dir = self.board_dir / "phases"
        self._ensure_board_dir()

    def _ensure_board_dir(self) -> None:
        """Create the .povboard/ directory and phases subdirectory if they don't exist."""
        self.board_dir.mkdir(parents=True, exist_ok=True)
        self.phases_dir.mkdir(exist_ok=True)

    def _atomic_write(self, file_path: Path, data: Dict[str, Any]) -> None:
        """Write data to a JSON file atomically to prevent corruption.

        Args:
            file_path: Path to the file to write.
            data: Dictionary data to write as JSON.

        Raises:
            StorageError: If writing to file fails.
        """
        temp_path: Optional[str] = None
        try:
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.board_dir, prefix=".tmp_povboard_", suffix=".json"
            )
            with os.fdopen(temp_fd, "w") as temp_file:
                json.dump(data, temp_file, indent=2)
            os.replace(temp_path, file_path)
        except Exception as e:
            if temp_path is not None:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
            raise StorageError(f"Failed to write to {file_path}: {e}") from e
        logger.debug("Wrote {}", file_path)

    # =========================================================================
    # Board Files (one per phase)
    # =========================================================================

    def board_path(self, phase_id: str) -> Path:
        """Return the file path of a phase's board.

        Raises:
            StorageError: If the phase id is not a safe file name.
        """
        if not is_valid_phase_id(phase_id):
            raise StorageError(f"{VALIDATION_INVALID_PHASE_ID} Got: '{phase_id}'")
        return self.phases_dir / f"{phase_id}.json"

    def board_exists(self, phase_id: str) -> bool:
        """Check whether a board file has been saved for a phase."""
        return self.board_path(phase_id).exists()

    def load_board(self, phase_id: str) -> BoardFile:
        """Load phases/<phase_id>.json and return as BoardFile model.

        A phase without a file has an empty board.
        """
        file_path = self.board_path(phase_id)
        if not file_path.exists():
            return BoardFile(phase_id=phase_id)

        try:
            with open(file_path, "r") as f:
                data = json.load(f)
            return BoardFile.model_validate(data)
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            raise StorageError(f"Failed to load board for phase '{phase_id}': {e}") from e

    def save_board(self, data: BoardFile) -> None:
        """Save BoardFile model to phases/<phase_id>.json."""
        file_path = self.board_path(data.phase_id)
        self._atomic_write(file_path, data.model_dump(mode="json"))

    def list_phase_ids(self) -> List[str]:
        """Return the ids of all phases with a saved board, sorted."""
        return sorted(path.stem for path in self.phases_dir.glob("*.json"))

    # =========================================================================
    # Config File
    # =========================================================================

    def load_config(self) -> ConfigFile:
        """Load config.json and return as ConfigFile model."""
        file_path = self.board_dir / "config.json"
        if not file_path.exists():
            return ConfigFile()

        try:
            with open(file_path, "r") as f:
                data = json.load(f)
            return ConfigFile.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Failed to load config.json: {e}") from e

    def save_config(self, data: ConfigFile) -> None:
        """Save ConfigFile model to config.json."""
        file_path = self.board_dir / "config.json"
        self._atomic_write(file_path, data.model_dump(mode="json"))
