"""
Service module for menstrual cycle calculations and predictions.

This module derives average cycle length, ovulation and next-period dates,
future period predictions and safe-day ranges from recorded period history.
Every function takes the current date explicitly so results are
deterministic.

Typical usage:
    avg = average_cycle_length(state.periods)
    next_start = next_period_date(state.periods, avg)
    for start in future_periods(state.periods, avg, 3):
        print(start)
"""
from typing import Iterator, List, Optional, Sequence
from datetime import date

from aws_lambda_powertools import Logger

from period_tracker.models.period import Period
from period_tracker.models.settings import TrackerSettings
from period_tracker.models.overlay import DateRange
from period_tracker.services.constants import (
    LUTEAL_PHASE_DAYS,
    FERTILE_DAYS_BEFORE_OVULATION,
    FERTILE_DAYS_AFTER_OVULATION,
)
from period_tracker.services.utils import add_days, days_between, round_half_up

logger = Logger()


def sorted_periods(periods: Sequence[Period]) -> List[Period]:
    """Closed periods ordered by start date."""
    return sorted(
        (p for p in periods if p.end_date is not None),
        key=lambda p: p.start_date
    )

def average_cycle_length(periods: Sequence[Period]) -> int:
    """
    Calculate the average cycle length from recorded periods.

    A cycle is the number of days between two consecutive period starts.

    Args:
        periods: Closed periods

    Returns:
        Rounded mean cycle length in days, or 0 with fewer than 2 periods

    Example:
        >>> periods = [Period(start_date=date(2024, 1, 1), end_date=date(2024, 1, 5)),
        ...            Period(start_date=date(2024, 1, 29), end_date=date(2024, 2, 2))]
        >>> average_cycle_length(periods)
        28
    """
    ordered = sorted_periods(periods)
    if len(ordered) < 2:
        return 0

    total_days = sum(
        days_between(ordered[i - 1].start_date, ordered[i].start_date)
        for i in range(1, len(ordered))
    )
    return round_half_up(total_days / (len(ordered) - 1))

def effective_cycle_length(periods: Sequence[Period], settings: TrackerSettings) -> int:
    """Average cycle length, falling back to the configured cycle length."""
    return average_cycle_length(periods) or settings.cycle_length

def ovulation_date(period_start: date, avg_cycle_length: int) -> Optional[date]:
    """
    Predict ovulation for the cycle that begins on period_start.

    Ovulation is modelled as 14 days before the next period, i.e.
    ``avg_cycle_length - 14`` days after this one starts.

    Returns:
        Predicted ovulation date, or None when the cycle is too short
    """
    offset = avg_cycle_length - LUTEAL_PHASE_DAYS
    if offset <= 0:
        return None
    return add_days(period_start, offset)

def next_period_date(periods: Sequence[Period], avg_cycle_length: int) -> Optional[date]:
    """
    Predict the start of the next period.

    Args:
        periods: Closed periods
        avg_cycle_length: Cycle length to project with

    Returns:
        Last recorded start plus the cycle length, or None with fewer than 2 periods
    """
    ordered = sorted_periods(periods)
    if len(ordered) < 2:
        return None
    return add_days(ordered[-1].start_date, avg_cycle_length)


class FuturePeriods:
    """
    Predicted future period starts.

    Iterating computes the dates on demand; the object can be iterated any
    number of times and always yields the same ``count`` dates.
    """

    def __init__(self, last_start: Optional[date], avg_cycle_length: int, count: int):
        self.last_start = last_start
        self.avg_cycle_length = avg_cycle_length
        self.count = count if last_start is not None else 0

    def __iter__(self) -> Iterator[date]:
        current = self.last_start
        for _ in range(self.count):
            current = add_days(current, self.avg_cycle_length)
            yield current

    def __len__(self) -> int:
        return self.count

    def __repr__(self) -> str:
        return f"FuturePeriods(last_start={self.last_start}, avg_cycle_length={self.avg_cycle_length}, count={self.count})"


def future_periods(periods: Sequence[Period], avg_cycle_length: int, count: int) -> FuturePeriods:
    """
    Predict the next ``count`` period starts.

    Each prediction is ``avg_cycle_length`` days after the previous one,
    starting from the last recorded period start.

    Example:
        >>> list(future_periods(periods, 28, 3))
        [date(2024, 2, 26), date(2024, 3, 25), date(2024, 4, 22)]
    """
    ordered = sorted_periods(periods)
    if len(ordered) < 2:
        return FuturePeriods(None, avg_cycle_length, 0)
    return FuturePeriods(ordered[-1].start_date, avg_cycle_length, count)

def fertile_window(next_period_start: date) -> DateRange:
    """
    Fertile window implied by a predicted period start.

    Ovulation sits 14 days before the period; the window runs from 5 days
    before ovulation through 1 day after.
    """
    ovulation = add_days(next_period_start, -LUTEAL_PHASE_DAYS)
    return DateRange(
        start=add_days(ovulation, -FERTILE_DAYS_BEFORE_OVULATION),
        end=add_days(ovulation, FERTILE_DAYS_AFTER_OVULATION)
    )

def safe_day_ranges(
    periods: Sequence[Period],
    settings: TrackerSettings,
    today: date
) -> List[DateRange]:
    """
    Calculate "safe day" ranges around the next predicted fertile window.

    Args:
        periods: Closed periods
        settings: User settings (cycle length fallback)
        today: Current date; ranges are anchored on recorded history

    Returns:
        Up to two inclusive ranges: from the day after the last period to the
        day before the fertile window, and from the day after the fertile
        window to the day before the next predicted period. Empty ranges are
        left out, as is everything when fewer than 2 periods are recorded.
    """
    ordered = sorted_periods(periods)
    if len(ordered) < 2:
        return []

    next_start = next_period_date(ordered, effective_cycle_length(ordered, settings))
    window = fertile_window(next_start)
    candidates = [
        (add_days(ordered[-1].end_date, 1), add_days(window.start, -1)),
        (add_days(window.end, 1), add_days(next_start, -1)),
    ]

    ranges = [DateRange(start=start, end=end) for start, end in candidates if end >= start]
    logger.debug("Calculated safe day ranges", extra={
        "today": str(today),
        "next_period": str(next_start),
        "range_count": len(ranges)
    })
    return ranges

def find_overlaps(periods: Sequence[Period], start_date: date, end_date: date) -> List[Period]:
    """
    Find closed periods that intersect the inclusive range given.

    Args:
        periods: Closed periods to check against
        start_date: First day of the candidate period
        end_date: Last day of the candidate period

    Returns:
        Overlapping periods in start date order
    """
    return [p for p in sorted_periods(periods) if p.overlaps(start_date, end_date)]

def current_cycle_day(current_period: Optional[Period], today: date) -> Optional[int]:
    """
    Day number of the ongoing period (day 1 is the start date).

    Returns:
        1-based day, or None when no period is in progress
    """
    if current_period is None:
        return None
    return days_between(current_period.start_date, today) + 1
