"""
Snapshot repository.

The single boundary between ChallengeState and the settings store. The
engine hands over immutable snapshots; this module turns them into keys,
writes only what changed, and decodes them back on startup. Unreadable
values are treated as absent so a damaged store degrades to "not started"
instead of failing.
"""

from datetime import date, datetime
from typing import Any, Optional

import structlog

from ..errors import MalformedDataError, PersistenceError
from ..state.models import ChallengeState, UIMode
from ..utils.time import parse_stored_datetime, parse_stored_day
from . import keys
from .settings_store import SettingsStore

logger = structlog.get_logger(__name__)


def encode_state(state: ChallengeState) -> dict[str, Any]:
    """Map a state onto store keys. None marks a key to remove."""
    return {
        keys.START_DATE: state.start_date.isoformat() if state.start_date else None,
        keys.BASELINE: state.baseline,
        keys.DAILY_TOTALS: {day.isoformat(): total for day, total in sorted(state.daily_totals.items())},
        keys.MAX_TEST_COUNTED: state.max_test_counted,
        keys.CHALLENGE_STARTED: state.challenge_started,
        keys.LAST_UPDATED_DAY: state.last_updated_day.isoformat() if state.last_updated_day else None,
        keys.CURRENT_INTERVAL: state.current_interval_minutes,
        keys.CURRENT_TARGET: state.current_target_reps,
        keys.REMAINING_SECONDS: state.remaining_seconds,
        keys.DONE_FOR_TODAY: state.ui_mode is UIMode.DONE_FOR_TODAY,
        keys.IS_ACTIVE: state.is_active,
        keys.IS_TIMER_PAUSED: state.is_timer_paused,
    }


def _decode_int(raw: Any, key: str, minimum: int = 0) -> int:
    if raw is None:
        return minimum
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < minimum:
        raise MalformedDataError(f"{key} is not a valid count", raw_data=repr(raw), expected_format="int")
    return raw


def _decode_bool(raw: Any, key: str) -> bool:
    if raw is None:
        return False
    if not isinstance(raw, bool):
        raise MalformedDataError(f"{key} is not a flag", raw_data=repr(raw), expected_format="bool")
    return raw


def _decode_totals(raw: Any) -> dict[date, int]:
    """Decode the totals map, dropping entries that do not parse."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise MalformedDataError("daily totals is not a mapping", raw_data=repr(raw), expected_format="object")

    totals: dict[date, int] = {}
    for raw_day, raw_total in raw.items():
        day = parse_stored_day(raw_day)
        if day is None or isinstance(raw_total, bool) or not isinstance(raw_total, int) or raw_total < 0:
            logger.warning("daily_total_dropped", day=raw_day, total=raw_total)
            continue
        totals[day] = totals.get(day, 0) + raw_total
    return totals


class SnapshotRepository:
    """Loads and saves ChallengeState through a SettingsStore."""

    def __init__(self, store: SettingsStore):
        self.store = store
        self._written: dict[str, Any] = {}

    def load(self) -> ChallengeState:
        """Decode the persisted state. Never raises."""
        raw = {}
        for key in keys.CYCLE_KEYS:
            try:
                raw[key] = self.store.get(key)
            except PersistenceError as e:
                logger.error("settings_read_failed", key=key, error=str(e))
                raw[key] = None

        start_date = self._decode(keys.START_DATE, raw, self._decode_start_date, None)
        fields = {
            "start_date": start_date,
            "baseline": self._decode(keys.BASELINE, raw, lambda v: _decode_int(v, keys.BASELINE), 0),
            "daily_totals": self._decode(keys.DAILY_TOTALS, raw, _decode_totals, {}),
            "max_test_counted": self._decode(keys.MAX_TEST_COUNTED, raw, lambda v: _decode_bool(v, keys.MAX_TEST_COUNTED), False),
            "challenge_started": self._decode(keys.CHALLENGE_STARTED, raw, lambda v: _decode_bool(v, keys.CHALLENGE_STARTED), False),
            "last_updated_day": self._decode(keys.LAST_UPDATED_DAY, raw, self._decode_day, None),
            "current_interval_minutes": self._decode(keys.CURRENT_INTERVAL, raw, lambda v: _decode_int(v, keys.CURRENT_INTERVAL), 0),
            "current_target_reps": self._decode(keys.CURRENT_TARGET, raw, lambda v: _decode_int(v, keys.CURRENT_TARGET), 0),
            "remaining_seconds": self._decode(keys.REMAINING_SECONDS, raw, lambda v: _decode_int(v, keys.REMAINING_SECONDS), 0),
            "is_active": self._decode(keys.IS_ACTIVE, raw, lambda v: _decode_bool(v, keys.IS_ACTIVE), False),
            "is_timer_paused": self._decode(keys.IS_TIMER_PAUSED, raw, lambda v: _decode_bool(v, keys.IS_TIMER_PAUSED), False),
        }
        done_for_today = self._decode(keys.DONE_FOR_TODAY, raw, lambda v: _decode_bool(v, keys.DONE_FOR_TODAY), False)

        state = ChallengeState(
            ui_mode=UIMode.DONE_FOR_TODAY if done_for_today else UIMode.WELCOME,
            **fields,
        )
        self._written = raw

        logger.info(
            "state_loaded",
            started=state.start_date is not None,
            baseline=state.baseline,
            logged_days=len(state.daily_totals),
        )
        return state

    def save(self, state: ChallengeState) -> bool:
        """
        Persist the keys that changed since the last save.

        Returns:
            False if any write failed. In-memory state stays authoritative.
        """
        encoded = encode_state(state)
        ok = True

        for key, value in encoded.items():
            if key in self._written and self._written[key] == value:
                continue
            try:
                if value is None:
                    self.store.remove(key)
                else:
                    self.store.set(key, value)
                self._written[key] = value
            except PersistenceError as e:
                ok = False
                logger.error("settings_write_failed", key=key, error=str(e))

        return ok

    def clear(self) -> bool:
        """Remove every key tied to the cycle."""
        self._written = {}
        try:
            self.store.remove_many(keys.CYCLE_KEYS)
        except PersistenceError as e:
            logger.error("settings_clear_failed", error=str(e))
            return False
        return True

    @staticmethod
    def _decode(key: str, raw: dict[str, Any], decoder, default):
        try:
            return decoder(raw.get(key))
        except MalformedDataError as e:
            logger.warning(
                "stored_value_ignored",
                key=key,
                error=str(e),
                raw_data=e.raw_data,
                expected_format=e.expected_format,
            )
            return default

    @staticmethod
    def _decode_start_date(raw: Any) -> Optional[datetime]:
        if raw is None:
            return None
        parsed = parse_stored_datetime(raw)
        if parsed is None:
            raise MalformedDataError("start date is not an ISO timestamp", raw_data=repr(raw), expected_format="iso8601")
        return parsed

    @staticmethod
    def _decode_day(raw: Any) -> Optional[date]:
        if raw is None:
            return None
        parsed = parse_stored_day(raw)
        if parsed is None:
            raise MalformedDataError("day is not an ISO date", raw_data=repr(raw), expected_format="YYYY-MM-DD")
        return parsed
