"""
Challenge state engine.

Owns the whole cycle: the program position, today's prescription, the
reminder countdown, the resume wake and the daily totals. Hosts issue
commands and read queries; time reaches the engine only through the
injected clock and scheduler callbacks. Every mutation ends in a snapshot
write, so the state can be recovered after a restart.
"""

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional

import structlog

from .config.defaults import ChallengeConfig, get_default_config
from .errors import InvalidBaselineError
from .logging.config import get_state_logger, get_timer_logger, log_state_transition
from .notifications.base import BaseNotificationSink
from .persistence.settings_store import SettingsStore
from .persistence.snapshot import SnapshotRepository
from .schedule.program import ProgramPosition, daily_target, program_position
from .state.models import ChallengeState, DayEvaluation, UIMode
from .state.transitions import evaluate_day_transition, resume_wake_time
from .timer.countdown import CountdownTimer, TickOutcome
from .timer.scheduler import Scheduler, TimerHandle
from .utils.time import (
    Clock,
    SystemClock,
    calendar_day,
    format_countdown,
    in_restricted_window,
    reference_zone,
    seconds_until,
)

logger = structlog.get_logger(__name__)
state_logger = get_state_logger(__name__)
timer_logger = get_timer_logger(__name__)

INACTIVE_MODES = (UIMode.WELCOME, UIMode.AWAITING_MAX_TEST, UIMode.COMPLETED)


def validate_baseline(reps: Any) -> int:
    """
    Check a max test result.

    Raises:
        InvalidBaselineError: Unless reps is a positive integer
    """
    if isinstance(reps, bool) or not isinstance(reps, int) or reps <= 0:
        raise InvalidBaselineError("Max test must be a positive number of reps", reps=reps)
    return reps


class ChallengeEngine:
    """
    Single source of truth for what the user should be doing right now.

    Commands never raise into the host: each either changes state
    consistently or is a logged no-op.
    """

    def __init__(
        self,
        store: SettingsStore,
        notifier: BaseNotificationSink,
        scheduler: Scheduler,
        clock: Optional[Clock] = None,
        config: Optional[ChallengeConfig] = None,
    ) -> None:
        self.config = config or get_default_config()
        self.time_params = self.config.time
        self.zone = reference_zone(self.time_params.timezone)
        self.clock = clock or SystemClock(self.zone)
        self.notifier = notifier
        self.scheduler = scheduler
        self.repository = SnapshotRepository(store)

        self._tick_handle: Optional[TimerHandle] = None
        self._wake_handle: Optional[TimerHandle] = None
        self._mode_before_stop: Optional[UIMode] = None

        self.state = self.repository.load()
        self.timer = self._restore_timer(self.state)
        self._restore()

    # ------------------------------------------------------------------
    # Queries

    @property
    def ui_mode(self) -> UIMode:
        return self.state.ui_mode

    @property
    def baseline(self) -> int:
        return self.state.baseline

    @property
    def current_target(self) -> int:
        return self.state.current_target_reps

    @property
    def current_interval_minutes(self) -> int:
        return self.state.current_interval_minutes

    @property
    def remaining_seconds(self) -> int:
        return self.timer.remaining_seconds

    @property
    def time_remaining(self) -> str:
        return format_countdown(self.timer.remaining_seconds)

    @property
    def is_active(self) -> bool:
        return not self.timer.is_stopped

    @property
    def is_timer_paused(self) -> bool:
        return self.timer.is_paused

    @property
    def resume_wake_pending(self) -> bool:
        return self._wake_handle is not None and self._wake_handle.pending

    def position(self) -> ProgramPosition:
        return program_position(self.state.start_date, self.clock.now())

    @property
    def current_week(self) -> int:
        return self.position().week

    @property
    def current_day_index(self) -> int:
        return self.position().day_index

    @property
    def is_completed(self) -> bool:
        return self.position().is_completed

    def get_progress_history(self) -> list[tuple[date, int]]:
        """Daily totals as (day, total) pairs, oldest first."""
        return self.state.progress()

    def status(self) -> dict[str, Any]:
        """Summary for hosts and the command line."""
        position = self.position()
        return {
            "ui_mode": self.state.ui_mode.value,
            "week": position.week,
            "day": position.day_index + 1,
            "completed": position.is_completed,
            "baseline": self.state.baseline,
            "target_reps": self.state.current_target_reps,
            "interval_minutes": self.state.current_interval_minutes,
            "time_remaining": self.time_remaining,
            "timer": self.timer.state.value,
            "resume_wake_pending": self.resume_wake_pending,
            "today_total": self.state.daily_totals.get(self._today(), 0),
        }

    # ------------------------------------------------------------------
    # Commands

    def start_challenge(self) -> UIMode:
        """Begin the cycle, or continue it for today when allowed."""
        now = self.clock.now()
        state = replace(
            self.state,
            start_date=self.state.start_date or now,
            challenge_started=True,
        )

        if not state.has_baseline:
            self._commit(state, UIMode.AWAITING_MAX_TEST, trigger="start_challenge")
            return self.state.ui_mode

        self._commit(state, trigger="start_challenge")
        evaluation = self._apply_evaluation(trigger="start_challenge")

        if evaluation.session_eligible or (
            evaluation.ui_mode is UIMode.DONE_FOR_TODAY and not evaluation.in_restricted_window
        ):
            self.setup_daily_challenge()

        return self.state.ui_mode

    def submit_max_test(self, reps: Any) -> bool:
        """
        Record the cycle's baseline and start today's session.

        Returns:
            False if reps was rejected; nothing changes in that case
        """
        try:
            baseline = validate_baseline(reps)
        except InvalidBaselineError as e:
            logger.warning("max_test_rejected", reps=e.reps, reason=str(e))
            return False

        now = self.clock.now()
        today = calendar_day(now, self.zone)
        uncounted = not self.state.max_test_counted

        state = replace(
            self.state,
            baseline=baseline,
            start_date=self.state.start_date or now,
            challenge_started=True,
        )
        if uncounted:
            state = replace(state.with_reps_logged(today, baseline), max_test_counted=True)

        state = self._with_today_target(state, now, today, baseline_day_uncounted=uncounted)
        self._commit(state, trigger="max_test_submitted")

        logger.info(
            "max_test_recorded",
            baseline=baseline,
            logged=uncounted,
            target_reps=state.current_target_reps,
        )

        self.setup_daily_challenge()
        return True

    def setup_daily_challenge(self) -> UIMode:
        """Arm the countdown for today and enter the active session."""
        now = self.clock.now()

        if not self.state.has_baseline:
            self._commit(self.state, UIMode.AWAITING_MAX_TEST, trigger="setup_daily_challenge")
            return self.state.ui_mode

        if program_position(self.state.start_date, now).is_completed:
            self._halt_countdown()
            self._cancel_resume_wake()
            self._commit(self.state, UIMode.COMPLETED, trigger="setup_daily_challenge")
            return self.state.ui_mode

        today = calendar_day(now, self.zone)
        state = self.state
        if state.last_updated_day != today:
            state = self._with_today_target(state, now, today)

        self._cancel_resume_wake()
        self._cancel_tick()
        self.timer.start(state.current_interval_minutes)
        self._commit(state, UIMode.ACTIVE_SESSION, trigger="setup_daily_challenge")
        self._schedule_tick()
        return self.state.ui_mode

    def mark_done_for_today(self) -> bool:
        """Stop reminders until the next resume boundary."""
        if not self.state.has_baseline or self.state.ui_mode in INACTIVE_MODES:
            logger.info("done_for_today_ignored", ui_mode=self.state.ui_mode.value)
            return False

        now = self.clock.now()
        self._cancel_tick()
        self.timer.reset(self.state.current_interval_minutes)
        self._commit(self.state, UIMode.DONE_FOR_TODAY, trigger="done_for_today")

        wake_at = resume_wake_time(now, self.time_params)
        if wake_at is not None:
            self._arm_resume_wake(wake_at, now)
        return True

    def pause_timer(self) -> bool:
        if self.state.ui_mode is not UIMode.ACTIVE_SESSION or not self.timer.pause():
            return False
        self._commit(self.state, trigger="pause_timer")
        timer_logger.info("countdown_paused", remaining_seconds=self.timer.remaining_seconds)
        return True

    def resume_timer(self) -> bool:
        if self.state.ui_mode is not UIMode.ACTIVE_SESSION or not self.timer.resume():
            return False
        self._commit(self.state, trigger="resume_timer")
        if self._tick_handle is None or not self._tick_handle.pending:
            self._schedule_tick()
        timer_logger.info("countdown_resumed", remaining_seconds=self.timer.remaining_seconds)
        return True

    def request_stop(self) -> bool:
        """First step of the destructive reset: ask for confirmation."""
        if self.state.ui_mode in (UIMode.WELCOME, UIMode.CONFIRMING_STOP):
            return False
        self._mode_before_stop = self.state.ui_mode
        self._cancel_tick()
        self._commit(self.state, UIMode.CONFIRMING_STOP, trigger="request_stop")
        return True

    def cancel_stop(self) -> bool:
        if self.state.ui_mode is not UIMode.CONFIRMING_STOP:
            return False
        previous = self._mode_before_stop or UIMode.ACTIVE_SESSION
        self._mode_before_stop = None
        self._commit(self.state, previous, trigger="cancel_stop")

        if previous is UIMode.ACTIVE_SESSION and not self.timer.is_stopped:
            self._schedule_tick()
        elif previous is UIMode.DONE_FOR_TODAY and not self.resume_wake_pending:
            now = self.clock.now()
            wake_at = resume_wake_time(now, self.time_params)
            if wake_at is not None:
                self._arm_resume_wake(wake_at, now)
        return True

    def stop_and_reset(self) -> None:
        """Cancel all timers and wipe the cycle. Irreversible."""
        previous = self.state.ui_mode

        self._cancel_tick()
        self._cancel_resume_wake()
        self.timer = CountdownTimer()
        self._mode_before_stop = None

        self.repository.clear()
        self.state = ChallengeState()

        log_state_transition(
            state_logger,
            from_mode=previous.value,
            to_mode=UIMode.WELCOME.value,
            trigger="stop_and_reset",
        )

    def check_day_transition(self) -> UIMode:
        """Re-run the day rules, e.g. after the machine wakes from sleep."""
        self._apply_evaluation(trigger="check_day_transition")
        return self.state.ui_mode

    def tick(self) -> TickOutcome:
        """
        Advance the countdown by one tick.

        Called by the scheduler; hosts and tests may call it directly.
        """
        if self.timer.is_stopped:
            return TickOutcome.IDLE

        now = self.clock.now()
        if in_restricted_window(now, self.zone,
                                self.time_params.restricted_start_hour,
                                self.time_params.restricted_end_hour):
            self._enter_restricted_window(now)
            return TickOutcome.IDLE

        if calendar_day(now, self.zone) != self.state.last_updated_day:
            # Today's target was computed on another calendar day
            self._apply_evaluation(trigger="day_changed")
            return TickOutcome.IDLE

        outcome = self.timer.tick(self.time_params.tick_seconds)
        if outcome is TickOutcome.REMINDER:
            self._deliver_reminder()

        self._commit(self.state)
        self._schedule_tick()
        return outcome

    def shutdown(self) -> None:
        """Release scheduled callbacks. Persisted state is left as is."""
        self._cancel_tick()
        self._cancel_resume_wake()

    # ------------------------------------------------------------------
    # Internals

    def _today(self) -> date:
        return calendar_day(self.clock.now(), self.zone)

    @staticmethod
    def _restore_timer(state: ChallengeState) -> CountdownTimer:
        if state.is_active and state.current_interval_minutes > 0:
            return CountdownTimer.restore(
                state.current_interval_minutes,
                state.remaining_seconds,
                paused=state.is_timer_paused,
            )

        timer = CountdownTimer()
        timer.interval_minutes = state.current_interval_minutes
        timer.remaining_seconds = state.remaining_seconds
        return timer

    def _restore(self) -> None:
        """Settle the loaded state against the current instant."""
        self._apply_evaluation(trigger="restore")

        if self.timer.is_stopped:
            return

        if self.state.ui_mode is UIMode.ACTIVE_SESSION:
            self._schedule_tick()
            timer_logger.info(
                "countdown_restored",
                remaining_seconds=self.timer.remaining_seconds,
                paused=self.timer.is_paused,
            )
        else:
            self._halt_countdown()
            self._commit(self.state, trigger="restore")

    def _with_today_target(
        self,
        state: ChallengeState,
        now: datetime,
        today: date,
        baseline_day_uncounted: Optional[bool] = None,
    ) -> ChallengeState:
        if baseline_day_uncounted is None:
            baseline_day_uncounted = not state.max_test_counted

        position = program_position(state.start_date, now)
        target = daily_target(position.week, position.day_index, state.baseline, baseline_day_uncounted)

        logger.info(
            "daily_target_computed",
            day=today.isoformat(),
            week=position.week,
            day_index=position.day_index,
            reps=target.reps,
            interval_minutes=target.interval_minutes,
        )
        return state.with_target(today, target.reps, target.interval_minutes)

    def _apply_evaluation(self, trigger: str, resume_due: bool = False) -> DayEvaluation:
        now = self.clock.now()
        evaluation = evaluate_day_transition(self.state, now, self.time_params, resume_due=resume_due)

        state = self.state
        if evaluation.recompute_target:
            state = self._with_today_target(state, now, evaluation.today)

        if evaluation.stop_timer:
            self._halt_countdown()

        if evaluation.wake_at is not None:
            self._arm_resume_wake(evaluation.wake_at, now)
        else:
            self._cancel_resume_wake()

        self._commit(state, evaluation.ui_mode, trigger=trigger, context={"rule": evaluation.rule})
        return evaluation

    def _enter_restricted_window(self, now: datetime) -> None:
        self._halt_countdown()
        self._commit(self.state, UIMode.DONE_FOR_TODAY, trigger="restricted_window")

        wake_at = resume_wake_time(now, self.time_params)
        if wake_at is not None:
            self._arm_resume_wake(wake_at, now)

    def _deliver_reminder(self) -> None:
        reps = self.state.current_target_reps
        params = self.config.notification
        outcome = self.notifier.remind(params.title, params.body_template.format(reps=reps))

        if not outcome.confirmed:
            logger.info("reminder_not_confirmed", result=outcome.result.value, reps=reps)
            return

        today = self._today()
        state = self.state.with_reps_logged(today, reps)
        self._commit(state, trigger="reminder_done")
        logger.info("reps_logged", day=today.isoformat(), reps=reps, total=state.daily_totals[today])

    def _commit(
        self,
        state: ChallengeState,
        ui_mode: Optional[UIMode] = None,
        trigger: str = "",
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        """Mirror the countdown into the snapshot, install it and persist it."""
        target_mode = ui_mode or state.ui_mode
        previous_mode = self.state.ui_mode

        self.state = state.with_mode(target_mode).with_timer(
            is_active=not self.timer.is_stopped,
            is_paused=self.timer.is_paused,
            remaining_seconds=self.timer.remaining_seconds,
        )

        if target_mode is not previous_mode:
            log_state_transition(
                state_logger,
                from_mode=previous_mode.value,
                to_mode=target_mode.value,
                trigger=trigger,
                context=context,
            )

        self.repository.save(self.state)

    def _halt_countdown(self) -> None:
        self._cancel_tick()
        self.timer.stop()

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        self._tick_handle = self.scheduler.call_later(
            self.time_params.tick_seconds, self._on_tick, label="tick"
        )

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _on_tick(self) -> None:
        self._tick_handle = None
        self.tick()

    def _arm_resume_wake(self, wake_at: datetime, now: datetime) -> None:
        self._cancel_resume_wake()
        delay = max(0.0, seconds_until(now, wake_at))
        self._wake_handle = self.scheduler.call_later(delay, self._on_resume_wake, label="resume_wake")
        timer_logger.info("resume_wake_armed", wake_at=wake_at.isoformat(), delay_seconds=delay)

    def _cancel_resume_wake(self) -> None:
        if self._wake_handle is not None:
            self._wake_handle.cancel()
            self._wake_handle = None

    def _on_resume_wake(self) -> None:
        self._wake_handle = None
        timer_logger.info("resume_wake_fired")

        evaluation = self._apply_evaluation(trigger="resume_wake", resume_due=True)
        if evaluation.session_eligible:
            self.setup_daily_challenge()
