"""
Day-transition rules.

Decides which UI mode the session belongs in for a given instant. The
rules are evaluated in order and the first match wins:

1. no start date and no baseline      -> welcome
2. no baseline                        -> awaiting max test
3. fourteen days elapsed              -> completed (timer off)
4. inside the restricted window       -> done for today (timer off, wake at 09:00)
5. target last computed on another day -> awaiting next day (recompute target)
6. otherwise                          -> keep a sticky mode, else active session.
   When the resume wake itself fires, done for today is released.

The evaluation is pure: it reads a ChallengeState and an instant and
returns a DayEvaluation. Applying it is the engine's job.
"""

from datetime import datetime
from typing import Optional

from ..config.defaults import TimeParams
from ..errors import SchedulingError
from ..logging.config import get_state_logger
from ..schedule.program import program_position
from ..utils.time import calendar_day, in_restricted_window, next_resume_time, reference_zone
from .models import STICKY_MODES, ChallengeState, DayEvaluation, UIMode

logger = get_state_logger(__name__)


def resume_wake_time(now: datetime, params: TimeParams) -> Optional[datetime]:
    """
    Next resume boundary, or None when it cannot be computed.

    A failure here leaves the engine without an armed wake; the next user
    action or restart re-evaluates.
    """
    try:
        zone = reference_zone(params.timezone)
        return next_resume_time(now, zone, params.restricted_end_hour)
    except SchedulingError as e:
        logger.error(
            "resume_wake_unavailable",
            error=str(e),
            timezone=params.timezone,
            now=now.isoformat(),
        )
        return None


def evaluate_day_transition(
    state: ChallengeState,
    now: datetime,
    params: TimeParams,
    resume_due: bool = False
) -> DayEvaluation:
    """
    Run the day-transition rules for one instant.

    Args:
        state: Current challenge state
        now: Current instant (aware)
        params: Reference zone and restricted window
        resume_due: True when evaluating for the resume wake, so a
            done-for-today entered before the boundary ends here

    Returns:
        DayEvaluation describing the target mode and side effects to apply
    """
    zone = reference_zone(params.timezone)
    today = calendar_day(now, zone)

    if state.start_date is None and not state.has_baseline:
        return DayEvaluation(ui_mode=UIMode.WELCOME, rule="not_started", today=today)

    if not state.has_baseline:
        return DayEvaluation(ui_mode=UIMode.AWAITING_MAX_TEST, rule="no_baseline", today=today)

    if program_position(state.start_date, now).is_completed:
        return DayEvaluation(
            ui_mode=UIMode.COMPLETED,
            rule="completed",
            today=today,
            stop_timer=True,
        )

    if in_restricted_window(now, zone, params.restricted_start_hour, params.restricted_end_hour):
        return DayEvaluation(
            ui_mode=UIMode.DONE_FOR_TODAY,
            rule="restricted_window",
            today=today,
            stop_timer=True,
            in_restricted_window=True,
            wake_at=resume_wake_time(now, params),
        )

    if state.last_updated_day != today:
        return DayEvaluation(
            ui_mode=UIMode.AWAITING_NEXT_DAY,
            rule="new_day",
            today=today,
            stop_timer=True,
            recompute_target=True,
        )

    if resume_due and state.ui_mode is UIMode.DONE_FOR_TODAY:
        return DayEvaluation(ui_mode=UIMode.ACTIVE_SESSION, rule="resumed", today=today)

    if state.ui_mode in STICKY_MODES:
        wake_at = None
        if state.ui_mode is UIMode.DONE_FOR_TODAY:
            wake_at = resume_wake_time(now, params)
        return DayEvaluation(ui_mode=state.ui_mode, rule="unchanged", today=today, wake_at=wake_at)

    return DayEvaluation(ui_mode=UIMode.ACTIVE_SESSION, rule="same_day", today=today)
