"""
Error classification system for the challenge engine.

This module provides a structured exception hierarchy for the different
kinds of failures the engine meets: bad user input or stored values, and
failures of the collaborators it depends on (store, scheduler, notifier).
"""

from .data_quality import (
    DataQualityError,
    MalformedDataError,
    InvalidBaselineError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    SchedulingError,
    NotificationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MalformedDataError",
    "InvalidBaselineError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "SchedulingError",
    "NotificationError",
]
