"""Tests for challenge state data models."""

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from pushup_challenge.state.models import STICKY_MODES, ChallengeState, DayEvaluation, UIMode


class TestChallengeState:
    """Test ChallengeState snapshot helpers."""

    def test_initial_state(self):
        state = ChallengeState()

        assert state.ui_mode is UIMode.WELCOME
        assert state.start_date is None
        assert state.baseline == 0
        assert not state.has_baseline
        assert state.daily_totals == {}
        assert state.max_test_counted is False
        assert state.is_active is False

    def test_is_immutable(self):
        state = ChallengeState()
        with pytest.raises(FrozenInstanceError):
            state.baseline = 10

    def test_reps_accumulate_per_day(self):
        """Logging twice on one day adds up; the original is untouched."""
        day = date(2024, 3, 4)
        state = ChallengeState()

        updated = state.with_reps_logged(day, 12).with_reps_logged(day, 12)

        assert updated.daily_totals == {day: 24}
        assert state.daily_totals == {}

    def test_negative_reps_do_not_shrink_totals(self):
        day = date(2024, 3, 4)
        state = ChallengeState().with_reps_logged(day, 10).with_reps_logged(day, -5)
        assert state.daily_totals[day] == 10

    def test_progress_is_sorted_by_day(self):
        state = ChallengeState(daily_totals={
            date(2024, 3, 6): 30,
            date(2024, 3, 4): 40,
            date(2024, 3, 5): 20,
        })

        assert state.progress() == [
            (date(2024, 3, 4), 40),
            (date(2024, 3, 5), 20),
            (date(2024, 3, 6), 30),
        ]

    def test_with_target_records_day(self):
        state = ChallengeState().with_target(date(2024, 3, 4), 20, 60)
        assert state.last_updated_day == date(2024, 3, 4)
        assert state.current_target_reps == 20
        assert state.current_interval_minutes == 60

    def test_single_mode_field(self):
        """Switching modes replaces the previous one."""
        state = ChallengeState().with_mode(UIMode.ACTIVE_SESSION).with_mode(UIMode.DONE_FOR_TODAY)
        assert state.ui_mode is UIMode.DONE_FOR_TODAY


class TestDayEvaluation:
    """Test DayEvaluation eligibility."""

    @pytest.mark.parametrize("mode,eligible", [
        (UIMode.ACTIVE_SESSION, True),
        (UIMode.AWAITING_NEXT_DAY, True),
        (UIMode.DONE_FOR_TODAY, False),
        (UIMode.COMPLETED, False),
        (UIMode.WELCOME, False),
        (UIMode.AWAITING_MAX_TEST, False),
        (UIMode.CONFIRMING_STOP, False),
    ])
    def test_session_eligible(self, mode, eligible):
        evaluation = DayEvaluation(ui_mode=mode, rule="test", today=date(2024, 3, 4))
        assert evaluation.session_eligible is eligible

    def test_restricted_window_is_never_eligible(self):
        evaluation = DayEvaluation(
            ui_mode=UIMode.ACTIVE_SESSION,
            rule="test",
            today=date(2024, 3, 4),
            in_restricted_window=True,
        )
        assert not evaluation.session_eligible

    def test_sticky_modes(self):
        assert UIMode.ACTIVE_SESSION not in STICKY_MODES
        assert UIMode.DONE_FOR_TODAY in STICKY_MODES
