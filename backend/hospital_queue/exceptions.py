"""
Queue engine error types.
"""

from typing import Optional


class QueueError(Exception):
    """Base class for queue engine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QueueError):
    """Malformed registration input or unknown department."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(QueueError):
    """Unknown patient id or token."""


class ConflictError(QueueError):
    """Operation not allowed in the current queue state."""


class PersistenceError(QueueError):
    """Snapshot load or save failed."""
