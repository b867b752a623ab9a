"""
Pytest configuration and shared fixtures.
"""
import pytest
from datetime import date, timedelta
from typing import List

from period_tracker.models.period import Period
from period_tracker.models.medication import MedicationEvent
from period_tracker.models.settings import TrackerSettings
from period_tracker.models.state import TrackerState
from period_tracker.services.tracker import PeriodTracker
from period_tracker.utils.storage import DataStore

@pytest.fixture
def two_periods() -> List[Period]:
    """Two periods 28 days apart."""
    return [
        Period(start_date=date(2024, 1, 1), end_date=date(2024, 1, 5)),
        Period(start_date=date(2024, 1, 29), end_date=date(2024, 2, 2)),
    ]

@pytest.fixture
def settings() -> TrackerSettings:
    """Default settings."""
    return TrackerSettings()

@pytest.fixture
def pill_settings() -> TrackerSettings:
    """Settings with pill tracking on a 21 day pack."""
    return TrackerSettings(medication_tracking_enabled=True, pack_days=21)

@pytest.fixture
def taken_march() -> List[MedicationEvent]:
    """Pills taken every day from 2024-03-01 through 2024-03-10."""
    return [
        MedicationEvent(date=date(2024, 3, 1) + timedelta(days=i), taken=True, time="21:00")
        for i in range(10)
    ]

@pytest.fixture
def state(two_periods) -> TrackerState:
    """State with two recorded periods and default settings."""
    return TrackerState(periods=two_periods)

@pytest.fixture
def store(tmp_path) -> DataStore:
    """DataStore writing to a temporary directory."""
    return DataStore(tmp_path / "period-tracker-data.json")

@pytest.fixture
def tracker(store) -> PeriodTracker:
    """Tracker over an empty temporary store."""
    return PeriodTracker(store)
