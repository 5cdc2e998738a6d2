"""Tests for ChallengeEngine commands and queries."""

from datetime import date, datetime
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest

from pushup_challenge.engine import ChallengeEngine, validate_baseline
from pushup_challenge.errors import InvalidBaselineError, PersistenceError
from pushup_challenge.notifications.base import CallbackNotificationSink
from pushup_challenge.persistence import keys
from pushup_challenge.persistence.settings_store import InMemorySettingsStore
from pushup_challenge.state.models import UIMode
from pushup_challenge.timer.countdown import TickOutcome, TimerState
from pushup_challenge.timer.scheduler import ManualScheduler
from pushup_challenge.utils.time import ManualClock

CET = ZoneInfo("CET")


def cet(*args) -> datetime:
    return datetime(*args, tzinfo=CET)


class TestValidateBaseline:
    """Test max test validation."""

    @pytest.mark.parametrize("reps", [1, 40, 150])
    def test_accepts_positive_ints(self, reps):
        assert validate_baseline(reps) == reps

    @pytest.mark.parametrize("reps", [0, -3, "40", 12.5, None, True])
    def test_rejects_everything_else(self, reps):
        with pytest.raises(InvalidBaselineError) as exc_info:
            validate_baseline(reps)
        assert exc_info.value.reps == reps


class TestStartup:
    """Test a fresh engine."""

    def test_fresh_engine_is_welcome(self, engine):
        assert engine.ui_mode is UIMode.WELCOME
        assert engine.baseline == 0
        assert not engine.is_active
        assert not engine.resume_wake_pending

    def test_status_of_fresh_engine(self, engine):
        status = engine.status()
        assert status["ui_mode"] == "welcome"
        assert status["week"] == 1
        assert status["day"] == 1
        assert status["completed"] is False
        assert status["time_remaining"] == "00:00"
        assert status["today_total"] == 0

    def test_start_without_baseline_asks_for_max_test(self, engine, clock):
        assert engine.start_challenge() is UIMode.AWAITING_MAX_TEST
        assert engine.state.start_date == clock.now()
        assert engine.state.challenge_started


class TestMaxTest:
    """Test max test submission."""

    def test_first_submission_is_logged_and_is_the_target(self, engine):
        engine.start_challenge()

        assert engine.submit_max_test(40)

        assert engine.baseline == 40
        assert engine.get_progress_history() == [(date(2024, 3, 4), 40)]
        assert engine.current_target == 40
        assert engine.current_interval_minutes == 60
        assert engine.ui_mode is UIMode.ACTIVE_SESSION
        assert engine.time_remaining == "60:00"
        assert engine.state.max_test_counted

    @pytest.mark.parametrize("reps", [0, -1, "abc", None])
    def test_invalid_submission_changes_nothing(self, engine, reps):
        engine.start_challenge()
        before = engine.state

        assert not engine.submit_max_test(reps)

        assert engine.state == before
        assert engine.ui_mode is UIMode.AWAITING_MAX_TEST

    def test_retest_is_not_logged_twice(self, started_engine):
        assert started_engine.submit_max_test(50)

        assert started_engine.baseline == 50
        assert started_engine.get_progress_history() == [(date(2024, 3, 4), 40)]
        # Max test already counted, so day 0 uses its intensity
        assert started_engine.current_target == 15

    def test_submission_without_start_sets_start_date(self, engine, clock):
        assert engine.submit_max_test(30)
        assert engine.state.start_date == clock.now()
        assert engine.ui_mode is UIMode.ACTIVE_SESSION


class TestCountdown:
    """Test ticking and reminders."""

    def test_tick_counts_down(self, started_engine, scheduler):
        scheduler.advance(10)
        assert started_engine.remaining_seconds == 3590
        assert started_engine.time_remaining == "59:50"

    def test_reminder_logs_target_reps(self, started_engine, scheduler, answers):
        scheduler.advance(3600)

        assert len(answers) == 1
        title, body = answers[0]
        assert "40" in body
        assert started_engine.get_progress_history() == [(date(2024, 3, 4), 80)]
        assert started_engine.remaining_seconds == 3600
        assert started_engine.is_active

    def test_skipped_reminder_is_not_logged(self, make_engine, scheduler):
        engine = make_engine(notifier=CallbackNotificationSink(lambda title, body: False))
        engine.submit_max_test(40)

        scheduler.advance(3600)

        assert engine.get_progress_history() == [(date(2024, 3, 4), 40)]
        assert engine.ui_mode is UIMode.ACTIVE_SESSION

    def test_failing_notifier_is_not_fatal(self, make_engine, scheduler):
        def broken(title, body):
            raise RuntimeError("display unavailable")

        engine = make_engine(notifier=CallbackNotificationSink(broken))
        engine.submit_max_test(40)

        scheduler.advance(3600)

        assert engine.get_progress_history() == [(date(2024, 3, 4), 40)]
        assert engine.is_active
        assert engine.notifier.get_stats()["error_count"] == 1

    def test_tick_when_stopped_is_idle(self, engine):
        assert engine.tick() is TickOutcome.IDLE

    def test_single_tick_handle(self, started_engine, scheduler):
        started_engine.pause_timer()
        started_engine.resume_timer()
        started_engine.setup_daily_challenge()

        assert len(scheduler.pending("tick")) == 1

    def test_tick_in_restricted_window_ends_the_day(self, started_engine, clock):
        clock.set(cet(2024, 3, 5, 0, 0, 30))

        assert started_engine.tick() is TickOutcome.IDLE

        assert started_engine.ui_mode is UIMode.DONE_FOR_TODAY
        assert not started_engine.is_active
        assert started_engine.resume_wake_pending


class TestPauseResume:
    """Test pausing the countdown."""

    def test_pause_freezes_remaining(self, started_engine, scheduler):
        scheduler.advance(5)
        assert started_engine.pause_timer()

        scheduler.advance(60)

        assert started_engine.is_timer_paused
        assert started_engine.remaining_seconds == 3595
        assert started_engine.state.is_timer_paused

    def test_resume_continues(self, started_engine, scheduler):
        started_engine.pause_timer()
        assert started_engine.resume_timer()

        scheduler.advance(5)

        assert started_engine.remaining_seconds == 3595

    def test_pause_twice_is_noop(self, started_engine):
        assert started_engine.pause_timer()
        assert not started_engine.pause_timer()

    def test_resume_while_running_is_noop(self, started_engine):
        assert not started_engine.resume_timer()

    def test_pause_outside_session_is_noop(self, engine):
        assert not engine.pause_timer()


class TestDoneForToday:
    """Test the done-for-today command."""

    def test_stops_timer_and_arms_wake(self, started_engine, scheduler):
        assert started_engine.mark_done_for_today()

        assert started_engine.ui_mode is UIMode.DONE_FOR_TODAY
        assert not started_engine.is_active
        assert started_engine.remaining_seconds == 3600
        assert started_engine.resume_wake_pending
        assert scheduler.pending("tick") == []
        assert len(scheduler.pending("resume_wake")) == 1

    def test_ignored_before_baseline(self, engine):
        assert not engine.mark_done_for_today()
        assert engine.ui_mode is UIMode.WELCOME

    def test_sticky_across_day_checks(self, started_engine, clock):
        started_engine.mark_done_for_today()
        clock.advance(hours=2)

        assert started_engine.check_day_transition() is UIMode.DONE_FOR_TODAY
        assert started_engine.resume_wake_pending

    def test_start_resumes_same_day(self, started_engine, clock):
        started_engine.mark_done_for_today()
        clock.advance(hours=1)

        assert started_engine.start_challenge() is UIMode.ACTIVE_SESSION
        assert started_engine.is_active
        assert not started_engine.resume_wake_pending

    def test_wake_starts_next_day(self, started_engine, scheduler, clock):
        started_engine.mark_done_for_today()

        scheduler.advance(23 * 3600)

        assert clock.now() == cet(2024, 3, 5, 9, 0)
        assert started_engine.ui_mode is UIMode.ACTIVE_SESSION
        # 23h after the start: still day 0, now with the max test counted
        assert started_engine.current_target == 12
        assert started_engine.state.last_updated_day == date(2024, 3, 5)

    def test_single_wake_handle(self, started_engine, scheduler):
        started_engine.mark_done_for_today()
        started_engine.mark_done_for_today()
        started_engine.check_day_transition()

        assert len(scheduler.pending("resume_wake")) == 1


class TestDayTransition:
    """Test check_day_transition."""

    def test_new_day_awaits_and_recomputes(self, started_engine, clock):
        clock.set(cet(2024, 3, 5, 10, 0))

        assert started_engine.check_day_transition() is UIMode.AWAITING_NEXT_DAY

        assert started_engine.current_target == 20
        assert started_engine.current_interval_minutes == 60
        assert not started_engine.is_active
        assert started_engine.state.last_updated_day == date(2024, 3, 5)

    def test_awaiting_next_day_is_sticky(self, started_engine, clock):
        clock.set(cet(2024, 3, 5, 10, 0))
        started_engine.check_day_transition()

        clock.advance(minutes=10)

        assert started_engine.check_day_transition() is UIMode.AWAITING_NEXT_DAY

    def test_start_from_awaiting_next_day(self, started_engine, clock):
        clock.set(cet(2024, 3, 5, 10, 0))
        started_engine.check_day_transition()

        assert started_engine.start_challenge() is UIMode.ACTIVE_SESSION
        assert started_engine.time_remaining == "60:00"
        assert started_engine.current_target == 20

    def test_restricted_window(self, started_engine, clock):
        clock.set(cet(2024, 3, 5, 2, 0))

        assert started_engine.check_day_transition() is UIMode.DONE_FOR_TODAY
        assert not started_engine.is_active
        assert started_engine.resume_wake_pending

    def test_completed_after_fourteen_days(self, started_engine, clock):
        clock.set(cet(2024, 3, 18, 10, 0))

        assert started_engine.check_day_transition() is UIMode.COMPLETED
        assert started_engine.is_completed
        assert not started_engine.is_active

    def test_setup_after_completion_stays_completed(self, started_engine, clock):
        clock.set(cet(2024, 3, 20, 10, 0))

        assert started_engine.setup_daily_challenge() is UIMode.COMPLETED
        assert not started_engine.is_active

    def test_same_day_is_active(self, started_engine, clock):
        clock.advance(hours=3)
        assert started_engine.check_day_transition() is UIMode.ACTIVE_SESSION
        assert started_engine.is_active

    def test_position_queries(self, started_engine, clock):
        clock.set(cet(2024, 3, 12, 10, 0))
        assert started_engine.current_week == 2
        assert started_engine.current_day_index == 1
        assert not started_engine.is_completed


class TestStop:
    """Test the two-step stop and reset."""

    def test_request_and_cancel(self, started_engine):
        assert started_engine.request_stop()
        assert started_engine.ui_mode is UIMode.CONFIRMING_STOP

        assert started_engine.cancel_stop()
        assert started_engine.ui_mode is UIMode.ACTIVE_SESSION

    def test_cancel_restores_previous_mode(self, started_engine):
        started_engine.mark_done_for_today()
        started_engine.request_stop()
        started_engine.cancel_stop()
        assert started_engine.ui_mode is UIMode.DONE_FOR_TODAY

    def test_request_stop_in_welcome_is_noop(self, engine):
        assert not engine.request_stop()

    def test_cancel_without_request_is_noop(self, started_engine):
        assert not started_engine.cancel_stop()

    def test_confirming_stop_is_sticky(self, started_engine, clock):
        started_engine.request_stop()
        clock.advance(minutes=5)
        assert started_engine.check_day_transition() is UIMode.CONFIRMING_STOP

    def test_stop_and_reset_wipes_everything(self, started_engine, scheduler, store):
        started_engine.mark_done_for_today()

        started_engine.stop_and_reset()

        assert started_engine.ui_mode is UIMode.WELCOME
        assert started_engine.baseline == 0
        assert started_engine.get_progress_history() == []
        assert not started_engine.is_active
        assert scheduler.pending() == []
        assert store.data == {}

    def test_new_cycle_after_reset(self, started_engine, clock):
        started_engine.stop_and_reset()
        clock.advance(days=2)

        started_engine.start_challenge()
        started_engine.submit_max_test(25)

        assert started_engine.state.start_date == clock.now()
        assert started_engine.get_progress_history() == [(date(2024, 3, 6), 25)]
        assert started_engine.current_target == 25


class TestPersistence:
    """Test state written through the store."""

    def test_snapshot_written_after_commands(self, started_engine, store):
        assert store.get(keys.BASELINE) == 40
        assert store.get(keys.DAILY_TOTALS) == {"2024-03-04": 40}
        assert store.get(keys.CURRENT_TARGET) == 40
        assert store.get(keys.CURRENT_INTERVAL) == 60
        assert store.get(keys.IS_ACTIVE) is True
        assert store.get(keys.DONE_FOR_TODAY) is False

    def test_done_flag_written(self, started_engine, store):
        started_engine.mark_done_for_today()
        assert store.get(keys.DONE_FOR_TODAY) is True
        assert store.get(keys.IS_ACTIVE) is False

    def test_store_failures_do_not_stop_the_engine(self, notifier, scheduler, clock):
        store = Mock(wraps=InMemorySettingsStore())
        store.set.side_effect = PersistenceError("disk full", operation="set")

        engine = ChallengeEngine(store=store, notifier=notifier, scheduler=scheduler, clock=clock)
        engine.start_challenge()

        assert engine.submit_max_test(40)
        assert engine.ui_mode is UIMode.ACTIVE_SESSION
        assert engine.get_progress_history() == [(date(2024, 3, 4), 40)]

    def test_shutdown_cancels_callbacks(self, started_engine, scheduler):
        started_engine.shutdown()
        assert scheduler.pending() == []
        assert started_engine.timer.state is TimerState.RUNNING


class TestEarlyMorningStart:
    """A max test submitted during quiet hours starts the session at 09:00."""

    def test_wake_starts_the_same_day(self, make_engine, answers):
        clock = ManualClock(cet(2024, 3, 4, 7, 0), zone=CET)
        scheduler = ManualScheduler(clock)
        engine = make_engine(clock=clock, scheduler=scheduler)

        engine.start_challenge()
        engine.submit_max_test(40)
        scheduler.advance(1)
        assert engine.ui_mode is UIMode.DONE_FOR_TODAY

        scheduler.advance(2 * 3600)

        assert clock.now() == cet(2024, 3, 4, 9, 0, 1)
        assert engine.ui_mode is UIMode.ACTIVE_SESSION
        assert engine.is_active
        assert engine.current_target == 40
        assert engine.remaining_seconds == 3599

        scheduler.advance(3600)
        assert len(answers) == 1
        assert engine.get_progress_history() == [(date(2024, 3, 4), 80)]

    def test_user_done_for_today_waits_for_tomorrow(self, started_engine, scheduler):
        started_engine.mark_done_for_today()

        scheduler.advance(6 * 3600)

        assert started_engine.ui_mode is UIMode.DONE_FOR_TODAY
        assert started_engine.resume_wake_pending


class TestDayChangeWhileRunning:
    """The tick notices a calendar day change, e.g. after a suspend."""

    def test_tick_after_sleep_recomputes_the_day(self, started_engine, scheduler, clock):
        scheduler.advance(10)
        clock.set(cet(2024, 3, 5, 11, 0))

        scheduler.advance(1)

        assert started_engine.ui_mode is UIMode.AWAITING_NEXT_DAY
        assert started_engine.state.last_updated_day == date(2024, 3, 5)
        assert started_engine.current_target == 20
        assert not started_engine.is_active
        assert scheduler.pending("tick") == []

    def test_direct_tick_on_new_day(self, started_engine, clock):
        clock.set(cet(2024, 3, 6, 12, 0))

        assert started_engine.tick() is TickOutcome.IDLE

        assert started_engine.ui_mode is UIMode.AWAITING_NEXT_DAY
        assert started_engine.current_target == 24
        assert started_engine.current_interval_minutes == 45

    def test_tick_after_sleep_past_the_end(self, started_engine, clock):
        clock.set(cet(2024, 3, 19, 11, 0))

        started_engine.tick()

        assert started_engine.ui_mode is UIMode.COMPLETED


class TestStopConfirmation:
    """The countdown is held while a reset is being confirmed."""

    def test_no_reminders_while_confirming(self, started_engine, scheduler, answers):
        scheduler.advance(100)
        started_engine.request_stop()

        scheduler.advance(2 * 3600)

        assert answers == []
        assert started_engine.remaining_seconds == 3500
        assert scheduler.pending("tick") == []

    def test_cancel_resumes_countdown(self, started_engine, scheduler):
        started_engine.request_stop()
        scheduler.advance(60)

        started_engine.cancel_stop()
        scheduler.advance(10)

        assert started_engine.ui_mode is UIMode.ACTIVE_SESSION
        assert started_engine.remaining_seconds == 3590
        assert len(scheduler.pending("tick")) == 1

    def test_cancel_back_to_done_rearms_wake(self, started_engine):
        started_engine.mark_done_for_today()
        started_engine.request_stop()
        started_engine.check_day_transition()
        assert not started_engine.resume_wake_pending

        started_engine.cancel_stop()

        assert started_engine.ui_mode is UIMode.DONE_FOR_TODAY
        assert started_engine.resume_wake_pending
