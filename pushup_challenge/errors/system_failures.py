"""
System failure error classifications for collaborator failures.

These exceptions are raised by the store, scheduler and notification
layers. The engine catches them at its boundary and degrades instead of
letting them reach the host UI.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for failures of an external collaborator."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Database or file system persistence failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class SchedulingError(SystemFailureError):
    """Wake time could not be computed or armed."""

    def __init__(self, message: str, timezone_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timezone_name = timezone_name


class NotificationError(SystemFailureError):
    """Reminder could not be shown to the user."""

    def __init__(self, message: str, sink_name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.sink_name = sink_name
