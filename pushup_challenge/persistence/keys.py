"""Settings store keys for one challenge cycle."""

START_DATE = "startDate"
BASELINE = "basePushups"
DAILY_TOTALS = "dailyPushupTotals"
MAX_TEST_COUNTED = "maxTestCounted"
CHALLENGE_STARTED = "challengeStarted"
LAST_UPDATED_DAY = "lastUpdatedDay"
CURRENT_INTERVAL = "currentFrequency"
CURRENT_TARGET = "currentPushups"
REMAINING_SECONDS = "timeRemainingSeconds"
DONE_FOR_TODAY = "showDoneForToday"
IS_ACTIVE = "isActive"
IS_TIMER_PAUSED = "isTimerPaused"

CYCLE_KEYS = (
    START_DATE,
    BASELINE,
    DAILY_TOTALS,
    MAX_TEST_COUNTED,
    CHALLENGE_STARTED,
    LAST_UPDATED_DAY,
    CURRENT_INTERVAL,
    CURRENT_TARGET,
    REMAINING_SECONDS,
    DONE_FOR_TODAY,
    IS_ACTIVE,
    IS_TIMER_PAUSED,
)
