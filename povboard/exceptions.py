"""
Custom exceptions for the povboard application.
"""


class PovBoardError(Exception):
    """Base exception for all povboard errors."""
    pass


class ValidationError(PovBoardError):
    """Raised when validation fails for an item or operation."""
    pass


class NotFoundError(PovBoardError):
    """Raised when a stage or task cannot be resolved in the working set."""
    pass


class InvalidOperationError(PovBoardError):
    """Raised when an operation is not allowed in the current state."""
    pass


class InvalidIndexError(InvalidOperationError):
    """Raised when a move index is outside the target sequence."""
    pass


class ConfigurationError(PovBoardError):
    """Raised when there's a configuration or setup issue."""
    pass


class PersistenceError(PovBoardError):
    """Raised when the persistence collaborator rejects or fails a call."""
    pass


class StorageError(PersistenceError):
    """Raised when reading or writing board files fails."""
    pass


class RefreshError(PovBoardError):
    """Raised when re-fetching the board after a failed move also fails."""
    pass
