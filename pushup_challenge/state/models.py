"""
Challenge state data models.

This module defines the immutable snapshot of everything the engine knows
about the current cycle, and the tagged UI mode that replaces a set of
independent "show this screen" flags.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional


class UIMode(str, Enum):
    """Mutually exclusive UI modes. Exactly one is current at any time."""
    WELCOME = "welcome"
    AWAITING_MAX_TEST = "awaiting_max_test"
    DONE_FOR_TODAY = "done_for_today"
    AWAITING_NEXT_DAY = "awaiting_next_day"
    COMPLETED = "completed"
    ACTIVE_SESSION = "active_session"
    CONFIRMING_STOP = "confirming_stop"


# Modes a re-evaluation keeps once entered, until something else wins
STICKY_MODES = frozenset({
    UIMode.DONE_FOR_TODAY,
    UIMode.AWAITING_NEXT_DAY,
    UIMode.CONFIRMING_STOP,
})


@dataclass(frozen=True)
class ChallengeState:
    """Snapshot of one challenge cycle and the session within it."""

    ui_mode: UIMode = UIMode.WELCOME

    # Cycle
    start_date: Optional[datetime] = None
    baseline: int = 0
    daily_totals: dict[date, int] = field(default_factory=dict)
    max_test_counted: bool = False
    challenge_started: bool = False

    # Today's prescription
    last_updated_day: Optional[date] = None
    current_target_reps: int = 0
    current_interval_minutes: int = 0

    # Countdown mirror
    is_active: bool = False
    is_timer_paused: bool = False
    remaining_seconds: int = 0

    @property
    def has_baseline(self) -> bool:
        return self.baseline > 0

    def with_mode(self, ui_mode: UIMode) -> "ChallengeState":
        return replace(self, ui_mode=ui_mode)

    def with_reps_logged(self, day: date, reps: int) -> "ChallengeState":
        """Add reps to a day's total. Totals only ever grow."""
        totals = dict(self.daily_totals)
        totals[day] = totals.get(day, 0) + max(0, reps)
        return replace(self, daily_totals=totals)

    def with_target(self, day: date, reps: int, interval_minutes: int) -> "ChallengeState":
        return replace(
            self,
            last_updated_day=day,
            current_target_reps=reps,
            current_interval_minutes=interval_minutes,
        )

    def with_timer(self, is_active: bool, is_paused: bool, remaining_seconds: int) -> "ChallengeState":
        return replace(
            self,
            is_active=is_active,
            is_timer_paused=is_paused,
            remaining_seconds=remaining_seconds,
        )

    def progress(self) -> list[tuple[date, int]]:
        """Daily totals sorted by day."""
        return sorted(self.daily_totals.items())


@dataclass(frozen=True)
class DayEvaluation:
    """Outcome of running the day-transition rules once."""

    ui_mode: UIMode
    rule: str                                   # Which rule matched
    today: date
    stop_timer: bool = False
    recompute_target: bool = False
    in_restricted_window: bool = False
    wake_at: Optional[datetime] = None          # Resume wake to arm, if any

    @property
    def session_eligible(self) -> bool:
        """Whether a session may be (re)started without further checks."""
        return (
            not self.in_restricted_window
            and self.ui_mode in (UIMode.ACTIVE_SESSION, UIMode.AWAITING_NEXT_DAY)
        )
