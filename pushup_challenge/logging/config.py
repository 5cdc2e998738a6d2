"""
Centralized logging configuration for the pushup challenge engine.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the engine should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
    """
    log_level = getattr(logging, level.upper())

    # Log to stderr so the CLI can keep stdout for command output
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger specifically configured for UI mode transitions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for state transitions
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="state_machine",
        audit_trail=True
    )


def get_timer_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for countdown and resume wake events.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for timer events
    """
    return get_logger(name).bind(subsystem="timer")


def log_state_transition(
    logger: FilteringBoundLogger,
    from_mode: str,
    to_mode: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a UI mode transition with standardized format.

    Args:
        logger: Structlog logger instance
        from_mode: Current UI mode
        to_mode: Target UI mode
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        from_mode=from_mode,
        to_mode=to_mode,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("state_transition")
