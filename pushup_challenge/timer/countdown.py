"""
Reminder countdown.

A plain state machine: STOPPED, RUNNING, PAUSED. It has no notion of wall
clock time; the engine drives it by calling tick() once per second and
decides what a reminder means.
"""

from enum import Enum

from ..logging.config import get_timer_logger

logger = get_timer_logger(__name__)


class TimerState(str, Enum):
    """Countdown states."""
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class TickOutcome(str, Enum):
    """Result of a single tick."""
    IDLE = "idle"              # Not running, nothing counted
    COUNTED = "counted"        # One second consumed
    REMINDER = "reminder"      # Reached zero and re-armed


class CountdownTimer:
    """Countdown from interval_minutes*60 to zero, re-arming indefinitely."""

    def __init__(self) -> None:
        self.state = TimerState.STOPPED
        self.interval_minutes = 0
        self.remaining_seconds = 0

    @classmethod
    def restore(cls, interval_minutes: int, remaining_seconds: int,
                paused: bool = False) -> "CountdownTimer":
        """Rebuild a running or paused countdown from persisted values."""
        timer = cls()
        timer.interval_minutes = max(0, interval_minutes)
        full = timer.interval_minutes * 60
        if remaining_seconds <= 0 or remaining_seconds > full:
            remaining_seconds = full
        timer.remaining_seconds = remaining_seconds
        timer.state = TimerState.PAUSED if paused else TimerState.RUNNING
        return timer

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state is TimerState.PAUSED

    @property
    def is_stopped(self) -> bool:
        return self.state is TimerState.STOPPED

    def start(self, interval_minutes: int) -> None:
        """Arm the countdown at the full interval and run it."""
        self.interval_minutes = interval_minutes
        self.remaining_seconds = interval_minutes * 60
        self.state = TimerState.RUNNING
        logger.debug("countdown_started", interval_minutes=interval_minutes)

    def pause(self) -> bool:
        if self.state is not TimerState.RUNNING:
            return False
        self.state = TimerState.PAUSED
        return True

    def resume(self) -> bool:
        if self.state is not TimerState.PAUSED:
            return False
        self.state = TimerState.RUNNING
        return True

    def stop(self) -> None:
        """Stop from any state and clear the remaining time."""
        self.state = TimerState.STOPPED
        self.remaining_seconds = 0

    def reset(self, interval_minutes: int) -> None:
        """Stop, keeping a full interval ready for the next start."""
        self.state = TimerState.STOPPED
        self.interval_minutes = interval_minutes
        self.remaining_seconds = interval_minutes * 60

    def tick(self, seconds: int = 1) -> TickOutcome:
        """Consume elapsed seconds; on zero, re-arm and report a reminder."""
        if self.state is not TimerState.RUNNING:
            return TickOutcome.IDLE

        self.remaining_seconds -= seconds
        if self.remaining_seconds > 0:
            return TickOutcome.COUNTED

        self.remaining_seconds = self.interval_minutes * 60
        logger.info("countdown_elapsed", interval_minutes=self.interval_minutes)
        return TickOutcome.REMINDER
