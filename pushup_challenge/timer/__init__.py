"""
Timer module.

One-second countdown between reminders and the schedulers that deliver
tick and resume-wake callbacks on the control thread.
"""
from .countdown import CountdownTimer, TickOutcome, TimerState
from .scheduler import LoopScheduler, ManualScheduler, Scheduler, TimerHandle

__all__ = [
    "CountdownTimer",
    "TickOutcome",
    "TimerState",
    "LoopScheduler",
    "ManualScheduler",
    "Scheduler",
    "TimerHandle",
]
