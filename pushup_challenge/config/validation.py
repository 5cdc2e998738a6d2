"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

KNOWN_SINKS = ("console", "auto_confirm")
KNOWN_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_hour(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 23


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_time_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate reference time zone and restricted window."""
        errors = []

        if "timezone" in params:
            value = params["timezone"]
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, TypeError, ValueError):
                errors.append(ValidationError(
                    field="timezone",
                    message="Must be an IANA time zone name",
                    value=value
                ))

        for name in ("restricted_start_hour", "restricted_end_hour"):
            if name in params and not _is_hour(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Must be an integer hour between 0 and 23",
                    value=params[name]
                ))

        start = params.get("restricted_start_hour")
        end = params.get("restricted_end_hour")
        if _is_hour(start) and _is_hour(end) and start >= end:
            errors.append(ValidationError(
                field="restricted_end_hour",
                message="Must be later than restricted_start_hour",
                value=end
            ))

        if "tick_seconds" in params:
            value = params["tick_seconds"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="tick_seconds",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_notification_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate reminder prompt parameters."""
        errors = []

        if "sink" in params and params["sink"] not in KNOWN_SINKS:
            errors.append(ValidationError(
                field="sink",
                message=f"Must be one of {', '.join(KNOWN_SINKS)}",
                value=params["sink"]
            ))

        if "body_template" in params:
            value = params["body_template"]
            if not isinstance(value, str) or "{reps}" not in value:
                errors.append(ValidationError(
                    field="body_template",
                    message="Must be a string containing {reps}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in KNOWN_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(KNOWN_LEVELS)}",
                    value=value
                ))

        if "format_json" in params and not isinstance(params["format_json"], bool):
            errors.append(ValidationError(
                field="format_json",
                message="Must be a boolean",
                value=params["format_json"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "time" in config:
            errors.extend(ConfigValidator.validate_time_params(config["time"]))

        if "notification" in config:
            errors.extend(ConfigValidator.validate_notification_params(config["notification"]))

        if "logging" in config:
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors
