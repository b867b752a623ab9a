"""
Tests for dashboard statistics.
"""
from datetime import date
from unittest.mock import patch

from period_tracker.models.period import Period
from period_tracker.models.state import TrackerState
from period_tracker.services.statistics import calculate_tracker_statistics, period_days_in_month

def test_statistics_without_history():
    """An empty tracker reports zeros and no pill figures."""
    stats = calculate_tracker_statistics(TrackerState(), date(2024, 3, 10))

    assert stats.average_cycle_length == 0
    assert stats.current_cycle_day is None
    assert stats.period_days_this_month == 0
    assert stats.medication_streak is None
    assert stats.compliance_rate is None

def test_statistics_with_periods(state):
    """Average cycle length comes from recorded periods."""
    stats = calculate_tracker_statistics(state, date(2024, 1, 31))

    assert stats.average_cycle_length == 28
    # Both January periods started this month
    assert stats.period_days_this_month == 10

def test_period_days_counts_by_start_month(state):
    """A period is counted in the month it started, at full length."""
    state.periods.append(Period(start_date=date(2024, 2, 27), end_date=date(2024, 3, 2)))

    assert period_days_in_month(state, date(2024, 2, 15)) == 5
    assert period_days_in_month(state, date(2024, 3, 15)) == 0

def test_current_period_counts_up_to_today(state):
    """The ongoing period contributes the days so far."""
    state.current_period = Period(start_date=date(2024, 3, 8))

    stats = calculate_tracker_statistics(state, date(2024, 3, 10))

    assert stats.current_cycle_day == 3
    assert stats.period_days_this_month == 3

def test_pill_statistics_when_tracking(state, taken_march):
    """Streak and compliance are reported once tracking is enabled."""
    state.settings.medication_tracking_enabled = True
    state.medication_events = taken_march

    stats = calculate_tracker_statistics(state, date(2024, 3, 10))

    assert stats.medication_streak == 10
    assert stats.compliance_rate == 100

def test_statistics_logged_at_debug(state):
    """Statistics run on every request and stay out of info logs."""
    with patch("period_tracker.services.statistics.logger") as logger:
        calculate_tracker_statistics(state, date(2024, 3, 10))

    logger.debug.assert_called_once()
    logger.info.assert_not_called()
