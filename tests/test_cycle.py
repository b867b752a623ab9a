"""
Tests for cycle prediction functionality.
"""
import pytest
from datetime import date

from period_tracker.models.period import Period
from period_tracker.models.settings import TrackerSettings
from period_tracker.models.overlay import DateRange
from period_tracker.services.cycle import (
    average_cycle_length,
    effective_cycle_length,
    ovulation_date,
    next_period_date,
    future_periods,
    fertile_window,
    safe_day_ranges,
    find_overlaps,
    current_cycle_day,
)

def test_average_cycle_length(two_periods):
    """Average is the delta between consecutive starts."""
    assert average_cycle_length(two_periods) == 28

def test_average_cycle_length_rounds_half_up():
    """A mean of 28.5 days rounds to 29."""
    periods = [
        Period(start_date=date(2024, 1, 1), end_date=date(2024, 1, 5)),
        Period(start_date=date(2024, 1, 29), end_date=date(2024, 2, 2)),   # 28 days
        Period(start_date=date(2024, 2, 27), end_date=date(2024, 3, 2)),   # 29 days
    ]
    assert average_cycle_length(periods) == 29

def test_average_cycle_length_ignores_input_order(two_periods):
    """Periods are ordered by start date before measuring."""
    assert average_cycle_length(list(reversed(two_periods))) == 28

def test_average_cycle_length_needs_two_periods():
    """Fewer than two periods has no average."""
    assert average_cycle_length([]) == 0
    assert average_cycle_length([Period(start_date=date(2024, 1, 1), end_date=date(2024, 1, 5))]) == 0

def test_effective_cycle_length_falls_back_to_settings():
    """Without an average the configured cycle length is used."""
    settings = TrackerSettings(cycle_length=30)
    assert effective_cycle_length([], settings) == 30

def test_ovulation_date():
    """Ovulation is cycle length minus 14 days after the start."""
    assert ovulation_date(date(2024, 1, 29), 28) == date(2024, 2, 12)

def test_ovulation_date_short_cycle():
    """No ovulation when the offset is not positive."""
    assert ovulation_date(date(2024, 1, 29), 14) is None
    assert ovulation_date(date(2024, 1, 29), 0) is None

def test_next_period_date(two_periods):
    """Next start is the last start plus the cycle length."""
    assert next_period_date(two_periods, 28) == date(2024, 2, 26)
    assert next_period_date(two_periods[:1], 28) is None

def test_future_periods(two_periods):
    """Predictions step forward from the last recorded start."""
    predictions = future_periods(two_periods, 28, 3)

    assert list(predictions) == [date(2024, 2, 26), date(2024, 3, 25), date(2024, 4, 22)]
    assert len(predictions) == 3

def test_future_periods_is_restartable(two_periods):
    """Iterating twice yields the same dates."""
    predictions = future_periods(two_periods, 28, 2)
    assert list(predictions) == list(predictions)

def test_future_periods_needs_two_periods(two_periods):
    """Nothing is predicted from a single period."""
    assert list(future_periods(two_periods[:1], 28, 3)) == []
    assert len(future_periods([], 28, 3)) == 0

def test_fertile_window():
    """Window runs 5 days before to 1 day after ovulation."""
    window = fertile_window(date(2024, 2, 26))
    assert window == DateRange(start=date(2024, 2, 7), end=date(2024, 2, 13))

def test_safe_day_ranges(two_periods, settings):
    """Safe days sit between the last period, the fertile window and the next period."""
    ranges = safe_day_ranges(two_periods, settings, date(2024, 2, 10))

    assert ranges == [
        DateRange(start=date(2024, 2, 3), end=date(2024, 2, 6)),
        DateRange(start=date(2024, 2, 14), end=date(2024, 2, 25)),
    ]

def test_safe_day_ranges_skips_empty_range(settings):
    """A long last period leaves no room before the fertile window."""
    periods = [
        Period(start_date=date(2024, 1, 1), end_date=date(2024, 1, 5)),
        Period(start_date=date(2024, 1, 22), end_date=date(2024, 1, 31)),
    ]
    # 21 day cycle: next start Feb 12, ovulation Jan 29, fertile Jan 24 - Jan 30
    ranges = safe_day_ranges(periods, settings, date(2024, 1, 25))

    assert ranges == [DateRange(start=date(2024, 1, 31), end=date(2024, 2, 11))]

def test_safe_day_ranges_need_two_periods(two_periods, settings):
    """No safe days without a cycle history."""
    assert safe_day_ranges(two_periods[:1], settings, date(2024, 2, 1)) == []

def test_find_overlaps(two_periods):
    """Intersecting periods are reported, touching ranges included."""
    assert find_overlaps(two_periods, date(2024, 1, 3), date(2024, 1, 10)) == [two_periods[0]]
    assert find_overlaps(two_periods, date(2024, 1, 6), date(2024, 1, 28)) == []
    assert find_overlaps(two_periods, date(2024, 2, 2), date(2024, 2, 4)) == [two_periods[1]]

def test_current_cycle_day():
    """The start date is day 1."""
    period = Period(start_date=date(2024, 3, 1))
    assert current_cycle_day(period, date(2024, 3, 1)) == 1
    assert current_cycle_day(period, date(2024, 3, 4)) == 4
    assert current_cycle_day(None, date(2024, 3, 4)) is None

def test_period_rejects_end_before_start():
    """A closed period must not end before it starts."""
    with pytest.raises(ValueError, match="End date must be on or after start date"):
        Period(start_date=date(2024, 3, 5), end_date=date(2024, 3, 1))
