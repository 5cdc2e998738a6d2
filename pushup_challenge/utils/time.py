"""
Time semantics utilities for the reference time zone.

This module provides the pluggable clock used by the engine and the
calendar helpers built on top of it: calendar-day truncation, elapsed
whole days, the restricted-window check and the next resume boundary.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import SchedulingError

SECONDS_PER_DAY = 86400


def reference_zone(name: str) -> ZoneInfo:
    """
    Resolve the reference time zone.

    Raises:
        SchedulingError: If the zone name is unknown
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise SchedulingError(f"Unknown time zone: {name}", timezone_name=name) from e


class Clock(ABC):
    """Source of the current instant, expressed in the reference zone."""

    def __init__(self, zone: tzinfo):
        self.zone = zone

    @abstractmethod
    def now(self) -> datetime:
        """Current aware datetime in the reference zone."""


class SystemClock(Clock):
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(self.zone)


class ManualClock(Clock):
    """Clock that only moves when told to. Used by tests and simulations."""

    def __init__(self, start: datetime, zone: Optional[tzinfo] = None):
        if start.tzinfo is None:
            raise ValueError("ManualClock requires an aware datetime")
        super().__init__(zone or start.tzinfo)
        self._now = start

    def now(self) -> datetime:
        return self._now.astimezone(self.zone)

    def set(self, when: datetime) -> None:
        if when.tzinfo is None:
            raise ValueError("ManualClock requires an aware datetime")
        self._now = when

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        """Move forward by seconds and/or timedelta keyword arguments."""
        self._now = self._now + timedelta(seconds=seconds, **kwargs)
        return self.now()


def calendar_day(moment: datetime, zone: tzinfo) -> date:
    """Truncate an instant to its calendar day in the given zone."""
    return moment.astimezone(zone).date()


def whole_days_between(start: datetime, end: datetime) -> int:
    """
    Whole elapsed days from start to end, floored and clamped at zero.

    Computed on UTC instants so a DST change does not shift the count.
    """
    elapsed = (end.astimezone(timezone.utc) - start.astimezone(timezone.utc)).total_seconds()
    if elapsed <= 0:
        return 0
    return int(elapsed // SECONDS_PER_DAY)


def in_restricted_window(moment: datetime, zone: tzinfo,
                         start_hour: int = 0, end_hour: int = 9) -> bool:
    """Whether the wall-clock hour in the zone falls in [start_hour, end_hour)."""
    hour = moment.astimezone(zone).hour
    return start_hour <= hour < end_hour


def next_resume_time(moment: datetime, zone: tzinfo, hour: int = 9) -> datetime:
    """
    Next occurrence of hour:00 in the zone strictly after moment.

    Raises:
        SchedulingError: If the boundary cannot be computed
    """
    try:
        local = moment.astimezone(zone)
        candidate = datetime.combine(local.date(), time(hour), tzinfo=zone)
        if candidate <= local:
            candidate = datetime.combine(local.date() + timedelta(days=1), time(hour), tzinfo=zone)
        return candidate
    except (OverflowError, ValueError) as e:
        raise SchedulingError(f"Cannot compute resume time after {moment!r}: {e}") from e


def seconds_until(moment: datetime, target: datetime) -> float:
    """Seconds from moment to target, measured on UTC instants."""
    return (target.astimezone(timezone.utc) - moment.astimezone(timezone.utc)).total_seconds()


def format_countdown(seconds: int) -> str:
    """Format remaining seconds as zero-padded MM:SS."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def parse_stored_datetime(raw: object) -> Optional[datetime]:
    """Parse an ISO8601 instant; None for anything unusable."""
    if not isinstance(raw, str):
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_stored_day(raw: object) -> Optional[date]:
    """Parse a YYYY-MM-DD calendar day; also accepts full ISO timestamps."""
    if not isinstance(raw, str):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    parsed = parse_stored_datetime(raw)
    return parsed.date() if parsed else None
