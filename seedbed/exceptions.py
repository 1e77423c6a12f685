"""Custom exceptions for Seedbed.

This module provides exception classes used throughout the package.
"""


class SeedbedError(Exception):
    """Base exception for all Seedbed errors."""

    def __init__(self, message: str, details: dict | None = None):
        """Initialize exception with message and optional details.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details


class ResourceNotFound(SeedbedError):
    """Exception raised when a requested area, plant or row is not found."""

    pass


class ValidationError(SeedbedError):
    """Exception raised when input validation fails."""

    pass


class PersistenceError(SeedbedError):
    """Exception raised when the durable store cannot be opened or configured.

    Every operation that depends on the store fails after this; the garden
    and settings stores keep working in memory for the rest of the session.

    Attributes:
        database_path: Path of the database file that failed to open
    """

    database_path: str | None

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details)
        self.database_path = details.get("database_path") if details else None


class WriteFailed(SeedbedError):
    """Record of a background write that was rejected by the durable store.

    Instances are collected by the background writer rather than raised
    into the caller; the in-memory state has already moved on.

    Attributes:
        operation: Name of the data access operation (e.g. "insert_area")
        error: The exception raised by the durable store
    """

    operation: str
    error: BaseException

    def __init__(self, operation: str, error: BaseException):
        super().__init__(
            f"Background write '{operation}' failed: {error}",
            details={"operation": operation, "error": repr(error)},
        )
        self.operation = operation
        self.error = error
