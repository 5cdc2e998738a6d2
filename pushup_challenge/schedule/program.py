"""
Two-week pushup program and the challenge clock.

The program is a fixed 2x7 table of (intensity, interval) pairs. Intensity
is a fraction of the user's baseline; interval is the number of minutes
between reminders. Week and day are never stored: they are derived from
the start date and the current instant every time they are needed.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..utils.time import whole_days_between

WEEKS = 2
DAYS_PER_WEEK = 7
PROGRAM_DAYS = WEEKS * DAYS_PER_WEEK


@dataclass(frozen=True)
class ProgramDay:
    """One cell of the program table."""
    week: int
    intensity: float
    interval_minutes: int


@dataclass(frozen=True)
class DailyTarget:
    """Reps per reminder and minutes between reminders for one day."""
    reps: int
    interval_minutes: int


PROGRAM_SCHEDULE: tuple[tuple[ProgramDay, ...], ...] = (
    (
        ProgramDay(week=1, intensity=0.3, interval_minutes=60),
        ProgramDay(week=1, intensity=0.5, interval_minutes=60),
        ProgramDay(week=1, intensity=0.6, interval_minutes=45),
        ProgramDay(week=1, intensity=0.25, interval_minutes=60),
        ProgramDay(week=1, intensity=0.45, interval_minutes=30),
        ProgramDay(week=1, intensity=0.4, interval_minutes=60),
        ProgramDay(week=1, intensity=0.2, interval_minutes=90),
    ),
    (
        ProgramDay(week=2, intensity=0.35, interval_minutes=45),
        ProgramDay(week=2, intensity=0.55, interval_minutes=20),
        ProgramDay(week=2, intensity=0.3, interval_minutes=15),
        ProgramDay(week=2, intensity=0.65, interval_minutes=60),
        ProgramDay(week=2, intensity=0.35, interval_minutes=60),
        ProgramDay(week=2, intensity=0.45, interval_minutes=60),
        ProgramDay(week=2, intensity=0.25, interval_minutes=120),
    ),
)


def lookup_day(week: int, day_index: int) -> ProgramDay:
    """Table cell for (week, day_index), clamped into the table."""
    week = min(max(week, 1), WEEKS)
    day_index = min(max(day_index, 0), DAYS_PER_WEEK - 1)
    return PROGRAM_SCHEDULE[week - 1][day_index]


def daily_target(
    week: int,
    day_index: int,
    baseline: int,
    baseline_day_uncounted: bool
) -> DailyTarget:
    """
    Resolve the day's target reps and reminder interval.

    Args:
        week: Program week (1 or 2)
        day_index: Day within the week (0-6)
        baseline: User's max test result for the cycle
        baseline_day_uncounted: True while the max test has not been logged

    Returns:
        DailyTarget. On the first day of a week whose max test is still
        unlogged, reps equal the raw baseline; otherwise
        max(1, floor(baseline * intensity)).
    """
    day = lookup_day(week, day_index)

    if day_index == 0 and baseline_day_uncounted:
        reps = baseline
    else:
        reps = max(1, math.floor(baseline * day.intensity))

    return DailyTarget(reps=reps, interval_minutes=day.interval_minutes)


@dataclass(frozen=True)
class ProgramPosition:
    """Where the challenge stands at a given instant."""
    days_since_start: int
    week: int
    day_index: int
    is_completed: bool


def program_position(start_date: Optional[datetime], now: datetime) -> ProgramPosition:
    """
    Derive week, day and completion from the start date.

    Without a start date the challenge sits on week 1, day 0, not completed.
    """
    if start_date is None:
        return ProgramPosition(days_since_start=0, week=1, day_index=0, is_completed=False)

    days = whole_days_between(start_date, now)
    week = min(days // DAYS_PER_WEEK + 1, WEEKS)
    day_index = min(days % DAYS_PER_WEEK, DAYS_PER_WEEK - 1) if days < PROGRAM_DAYS else DAYS_PER_WEEK - 1

    return ProgramPosition(
        days_since_start=days,
        week=week,
        day_index=day_index,
        is_completed=days >= PROGRAM_DAYS,
    )
