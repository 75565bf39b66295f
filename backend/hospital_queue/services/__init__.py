"""Services package for the queue tracker."""

from .queue_service import QueueEngine, resolve_department

__all__ = [
    "QueueEngine",
    "resolve_department"
]
