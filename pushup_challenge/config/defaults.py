"""Default configuration parameters for the pushup challenge engine."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TimeParams:
    """Reference time zone and daily restricted window."""
    timezone: str = "CET"                 # Reminders are pinned to Central European Time
    restricted_start_hour: int = 0        # No reminders from midnight...
    restricted_end_hour: int = 9          # ...until 09:00, when the resume wake fires
    tick_seconds: int = 1                 # Countdown resolution


@dataclass(frozen=True)
class StorageParams:
    """Durable settings store parameters."""
    db_path: str = "~/.pushup_challenge/settings.db"


@dataclass(frozen=True)
class NotificationParams:
    """Reminder prompt parameters."""
    title: str = "Pushup Time! 💪"
    body_template: str = "Do {reps} pushups now!"
    sink: str = "console"                 # console, auto_confirm


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class ChallengeConfig:
    """Complete engine configuration."""
    time: TimeParams
    storage: StorageParams
    notification: NotificationParams
    logging: LoggingParams


def get_default_config() -> ChallengeConfig:
    """Get the default configuration instance."""
    return ChallengeConfig(
        time=TimeParams(),
        storage=StorageParams(),
        notification=NotificationParams(),
        logging=LoggingParams(),
    )
