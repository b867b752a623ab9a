"""
Statistics calculation service for tracker dashboards.

This module provides the derived figures shown next to the calendar:
average cycle length, day of the ongoing period, period days this month and
pill adherence.
"""
from typing import Optional
from datetime import date

from aws_lambda_powertools import Logger
from pydantic import BaseModel

from period_tracker.models.state import TrackerState
from period_tracker.services.cycle import average_cycle_length, current_cycle_day
from period_tracker.services.medication import streak, compliance_rate
from period_tracker.services.utils import inclusive_duration

logger = Logger()


class TrackerStatistics(BaseModel):
    """
    Derived statistics for one day.
    """
    average_cycle_length: int
    current_cycle_day: Optional[int] = None
    period_days_this_month: int
    medication_streak: Optional[int] = None
    compliance_rate: Optional[int] = None


def _in_month(day: date, today: date) -> bool:
    return day.year == today.year and day.month == today.month

def period_days_in_month(state: TrackerState, today: date) -> int:
    """
    Count period days for periods that started in today's month.

    Closed periods contribute their full length (even when they run into the
    next month); an ongoing period contributes its days up to today.
    """
    total = sum(
        p.duration for p in state.periods
        if p.end_date is not None and _in_month(p.start_date, today)
    )
    current = state.current_period
    if current is not None and _in_month(current.start_date, today):
        total += inclusive_duration(current.start_date, today)
    return total

def calculate_tracker_statistics(state: TrackerState, today: date) -> TrackerStatistics:
    """
    Calculate every dashboard statistic for a tracker state.

    Args:
        state: Tracker state to analyze
        today: Current date

    Returns:
        TrackerStatistics; pill figures are None while medication tracking
        is disabled
    """
    medication_streak = None
    rate = None
    if state.settings.medication_tracking_enabled:
        medication_streak = streak(state.medication_events, state.settings, today)
        rate = compliance_rate(state.medication_events, today)

    stats = TrackerStatistics(
        average_cycle_length=average_cycle_length(state.periods),
        current_cycle_day=current_cycle_day(state.current_period, today),
        period_days_this_month=period_days_in_month(state, today),
        medication_streak=medication_streak,
        compliance_rate=rate
    )
    logger.debug("Calculated tracker statistics", extra=stats.model_dump())
    return stats
