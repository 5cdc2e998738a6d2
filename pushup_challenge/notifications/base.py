"""Base classes for reminder notification sinks."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import structlog

from ..errors import NotificationError


class ReminderResult(Enum):
    """What the user answered."""
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ReminderOutcome:
    """Result of presenting one reminder."""
    result: ReminderResult
    message: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def confirmed(self) -> bool:
        return self.result is ReminderResult.DONE


class BaseNotificationSink(ABC):
    """Base class for reminder sinks."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"notifications.{name}")
        self._shown_count = 0
        self._confirmed_count = 0
        self._error_count = 0

    @abstractmethod
    def confirm(self, title: str, body: str) -> bool:
        """
        Show a reminder and block until the user answers.

        Args:
            title: Reminder title
            body: Reminder text with the rep count

        Returns:
            True if the user confirmed the set was done

        Raises:
            NotificationError: If the reminder could not be shown
        """

    def remind(self, title: str, body: str) -> ReminderOutcome:
        """Show a reminder, converting failures into a FAILED outcome."""
        self._shown_count += 1
        try:
            confirmed = self.confirm(title, body)
        except NotificationError as e:
            self._error_count += 1
            self.logger.error("reminder_failed", sink=self.name, error=str(e))
            return ReminderOutcome(result=ReminderResult.FAILED, message=str(e), error=e)

        if confirmed:
            self._confirmed_count += 1
            return ReminderOutcome(result=ReminderResult.DONE)
        return ReminderOutcome(result=ReminderResult.SKIPPED)

    def get_stats(self) -> dict[str, Any]:
        """Get reminder statistics."""
        return {
            "name": self.name,
            "shown_count": self._shown_count,
            "confirmed_count": self._confirmed_count,
            "error_count": self._error_count,
        }


class CallbackNotificationSink(BaseNotificationSink):
    """Delegates the answer to a host-provided callable (e.g. a GUI dialog)."""

    def __init__(self, callback: Callable[[str, str], bool], name: str = "callback"):
        super().__init__(name)
        self.callback = callback

    def confirm(self, title: str, body: str) -> bool:
        try:
            return bool(self.callback(title, body))
        except Exception as e:
            raise NotificationError(f"Reminder callback failed: {e}", sink_name=self.name) from e
