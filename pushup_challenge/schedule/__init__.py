"""
Program schedule module.

Fixed two-week training table, daily target resolution and the challenge
clock derived from the start date.
"""
from .program import (
    PROGRAM_DAYS,
    PROGRAM_SCHEDULE,
    DailyTarget,
    ProgramDay,
    ProgramPosition,
    daily_target,
    program_position,
)

__all__ = [
    "PROGRAM_DAYS",
    "PROGRAM_SCHEDULE",
    "DailyTarget",
    "ProgramDay",
    "ProgramPosition",
    "daily_target",
    "program_position",
]
