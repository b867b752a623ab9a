"""
Shared date utilities for cycle and medication services.

All ranges handled here are inclusive of both ends.
"""
import math
from typing import Iterator
from datetime import date, timedelta


def add_days(day: date, days: int) -> date:
    """Shift a calendar day by a number of days (negative moves backwards)."""
    return day + timedelta(days=days)

def days_between(start: date, end: date) -> int:
    """
    Calendar-day difference between two dates, not counting the start day.

    Example:
        >>> days_between(date(2024, 1, 1), date(2024, 1, 29))
        28
    """
    return (end - start).days

def inclusive_duration(start: date, end: date) -> int:
    """Number of days from start to end, counting both ends."""
    return abs((end - start).days) + 1

def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))

def iterate_days(start: date, end: date) -> Iterator[date]:
    """
    Yield every date between start and end inclusive.

    Args:
        start: First date
        end: Last date

    Returns:
        Iterator of dates, empty when end is before start
    """
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
