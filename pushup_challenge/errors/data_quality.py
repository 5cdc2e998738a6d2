"""
Data quality error classifications for user input and stored values.

These exceptions describe problems that are handled gracefully: the engine
rejects the input or treats the stored value as absent and carries on.
"""

from typing import Any, Dict, Optional


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class InvalidBaselineError(DataQualityError):
    """Max test submission that is not a positive rep count."""

    def __init__(self, message: str, reps: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.reps = reps
