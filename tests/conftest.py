"""Pytest configuration and shared fixtures."""

from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

import pytest

from pushup_challenge.config.defaults import get_default_config
from pushup_challenge.engine import ChallengeEngine
from pushup_challenge.notifications.base import CallbackNotificationSink
from pushup_challenge.persistence.settings_store import InMemorySettingsStore
from pushup_challenge.timer.scheduler import ManualScheduler
from pushup_challenge.utils.time import ManualClock

CET = ZoneInfo("CET")


def cet(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    """Aware datetime in the reference zone."""
    return datetime(year, month, day, hour, minute, second, tzinfo=CET)


@pytest.fixture
def clock() -> ManualClock:
    """Monday 2024-03-04 10:00 CET, well outside the restricted window."""
    return ManualClock(cet(2024, 3, 4, 10, 0), zone=CET)


@pytest.fixture
def scheduler(clock: ManualClock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def store() -> InMemorySettingsStore:
    return InMemorySettingsStore()


@pytest.fixture
def answers() -> list:
    """Reminder prompts seen by the notifier; the answer is always Done."""
    return []


@pytest.fixture
def notifier(answers: list) -> CallbackNotificationSink:
    def confirm(title: str, body: str) -> bool:
        answers.append((title, body))
        return True

    return CallbackNotificationSink(confirm)


@pytest.fixture
def make_engine(store, notifier, scheduler, clock) -> Callable[..., ChallengeEngine]:
    """Factory so tests can build a second engine over the same store (a restart)."""

    def factory(**overrides) -> ChallengeEngine:
        kwargs = {
            "store": store,
            "notifier": notifier,
            "scheduler": scheduler,
            "clock": clock,
            "config": get_default_config(),
        }
        kwargs.update(overrides)
        return ChallengeEngine(**kwargs)

    return factory


@pytest.fixture
def engine(make_engine) -> ChallengeEngine:
    return make_engine()


@pytest.fixture
def started_engine(engine: ChallengeEngine) -> ChallengeEngine:
    """Engine with baseline 40 submitted on day 0 at 10:00."""
    engine.start_challenge()
    assert engine.submit_max_test(40)
    return engine
