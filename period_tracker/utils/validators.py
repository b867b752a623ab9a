"""
Input validation utilities for user-entered dates and times.
"""
import re
from typing import Any, Optional, Union
from datetime import date, datetime

from period_tracker.models.medication import CLOCK_TIME_PATTERN
from period_tracker.services.exceptions import TrackerValidationError

def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Parse a calendar day.

    Args:
        value: Date string in YYYY-MM-DD format, a date, or None

    Returns:
        Date if valid, None otherwise
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None

def require_date(value: Union[str, date, None], label: str = "a date") -> date:
    """
    Parse a required calendar day.

    Raises:
        TrackerValidationError: If the value is missing or not a valid date
    """
    parsed = parse_date(value)
    if parsed is None:
        raise TrackerValidationError(f"Please select {label}")
    return parsed

def validate_date_range(start_date: date, end_date: date) -> None:
    """
    Check that a period range is well ordered.

    Raises:
        TrackerValidationError: If end_date is before start_date
    """
    if end_date < start_date:
        raise TrackerValidationError("End date must be after start date")

def validate_clock_time(value: Optional[str]) -> Optional[str]:
    """
    Validate an HH:MM clock time.

    Returns:
        The time string, or None for blank input

    Raises:
        TrackerValidationError: If the value is not a 24-hour HH:MM time
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not re.match(CLOCK_TIME_PATTERN, value):
        raise TrackerValidationError("Time must be in HH:MM format")
    return value

def parse_flag(value: Any, name: str, default: bool = False) -> bool:
    """
    Read a yes/no request field.

    Args:
        value: Field value from the request; None means not given
        name: Field name used in the error message
        default: Value when the field is not given

    Raises:
        TrackerValidationError: If the value is not a JSON boolean
    """
    if value is None:
        return default
    if not isinstance(value, bool):
        raise TrackerValidationError(f"{name} must be true or false")
    return value
