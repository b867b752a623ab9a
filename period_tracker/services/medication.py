"""
Service module for pill-pack schedule and adherence calculations.

The pack cycle is ``pack_days`` active days followed by a 7 day break week.
Day 1 of the first pack is the earliest recorded medication event; without
any record there is no schedule.

Typical usage:
    doses = virtual_schedule_entries(state.medication_events, state.settings, today)
    current = streak(state.medication_events, state.settings, today)
    rate = compliance_rate(state.medication_events, today)
"""
from typing import Iterable, List, Optional, Sequence
from datetime import date

from aws_lambda_powertools import Logger

from period_tracker.models.medication import MedicationEvent
from period_tracker.models.settings import TrackerSettings
from period_tracker.models.overlay import ScheduledDose, ScheduleStatus
from period_tracker.services.constants import (
    BREAK_WEEK_DAYS,
    SCHEDULE_HORIZON_DAYS,
    COMPLIANCE_WINDOW_DAYS,
)
from period_tracker.services.utils import add_days, days_between, iterate_days, round_half_up

logger = Logger()


def full_cycle_days(pack_days: int) -> int:
    """Length of one pack plus its break week."""
    return pack_days + BREAK_WEEK_DAYS

def schedule_anchor(events: Iterable[MedicationEvent]) -> Optional[date]:
    """Earliest recorded medication date, the first day of the first pack."""
    return min((e.date for e in events), default=None)

def day_in_cycle(day: date, anchor: date, pack_days: int) -> int:
    """
    1-based position of a date within its pack cycle.

    Example:
        >>> day_in_cycle(date(2024, 3, 22), date(2024, 3, 1), 21)
        22
    """
    return (days_between(anchor, day) % full_cycle_days(pack_days)) + 1

def is_break_day(day: date, anchor: date, pack_days: int) -> bool:
    """Check if a date falls in the break week of its pack cycle."""
    return day_in_cycle(day, anchor, pack_days) > pack_days

def virtual_schedule_entries(
    events: Sequence[MedicationEvent],
    settings: TrackerSettings,
    today: date,
    horizon_days: int = SCHEDULE_HORIZON_DAYS
) -> List[ScheduledDose]:
    """
    Generate schedule days that have no recorded medication event.

    Covers every date from the day after the anchor up to
    ``today + horizon_days``. Break-week days and dates that already have a
    record are skipped.

    Args:
        events: Recorded medication events
        settings: User settings (pack length)
        today: Current date
        horizon_days: How far into the future to schedule

    Returns:
        Scheduled doses in date order, each with its pack day number
    """
    anchor = schedule_anchor(events)
    if anchor is None:
        return []

    recorded = {e.date for e in events}
    doses = []
    for day in iterate_days(add_days(anchor, 1), add_days(today, horizon_days)):
        if day in recorded:
            continue
        pack_day = day_in_cycle(day, anchor, settings.pack_days)
        if pack_day > settings.pack_days:
            continue
        status = ScheduleStatus.SCHEDULED_PAST if day < today else ScheduleStatus.SCHEDULED_FUTURE
        doses.append(ScheduledDose(date=day, pack_day=pack_day, status=status))

    return doses

def streak(
    events: Sequence[MedicationEvent],
    settings: TrackerSettings,
    today: date
) -> int:
    """
    Count consecutive days with a taken pill, ending today.

    If today's pill is not taken yet the count starts from yesterday. Walking
    backwards, every active pack day needs a taken record; days without one
    end the streak unless they fall in a break week, which is stepped over.

    Args:
        events: Recorded medication events
        settings: User settings (pack length)
        today: Current date

    Returns:
        Number of taken days in the current streak
    """
    taken_days = {e.date for e in events if e.taken}
    if not taken_days:
        return 0

    anchor = schedule_anchor(events)
    cursor = today if today in taken_days else add_days(today, -1)
    count = 0

    while cursor >= anchor:
        if cursor in taken_days:
            count += 1
        elif not is_break_day(cursor, anchor, settings.pack_days):
            break
        cursor = add_days(cursor, -1)

    logger.debug("Calculated pill streak", extra={
        "today": str(today),
        "streak": count
    })
    return count

def compliance_rate(
    events: Sequence[MedicationEvent],
    today: date,
    window_days: int = COMPLIANCE_WINDOW_DAYS
) -> int:
    """
    Percentage of recorded days in the trailing window where the pill was taken.

    Args:
        events: Recorded medication events
        today: Current date (last day of the window)
        window_days: Size of the trailing window

    Returns:
        Rounded percentage, 100 when nothing was recorded in the window
    """
    window_start = add_days(today, -window_days)
    recent = [e for e in events if window_start <= e.date <= today]
    if not recent:
        return 100

    taken = sum(1 for e in recent if e.taken)
    return round_half_up(taken / len(recent) * 100)
