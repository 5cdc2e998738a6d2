"""
Reminder notification module.

Sinks that show a reminder and report whether the user did the set.
"""
from .base import BaseNotificationSink, CallbackNotificationSink, ReminderOutcome, ReminderResult
from .console import AutoConfirmNotificationSink, ConsoleNotificationSink

__all__ = [
    "BaseNotificationSink",
    "CallbackNotificationSink",
    "ReminderOutcome",
    "ReminderResult",
    "AutoConfirmNotificationSink",
    "ConsoleNotificationSink",
]
