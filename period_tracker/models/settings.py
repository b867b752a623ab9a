"""
User settings model definition.
"""
from pydantic import Field, model_validator

from period_tracker.models.base import TrackerModel
from period_tracker.models.medication import CLOCK_TIME_PATTERN

DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5
DEFAULT_REMINDER_TIME = "21:00"
DEFAULT_PACK_DAYS = 21


class TrackerSettings(TrackerModel):
    """
    Cycle defaults, calendar display toggles and pill-pack configuration.
    """
    cycle_length: int = Field(DEFAULT_CYCLE_LENGTH, ge=21, le=40)
    period_length: int = Field(DEFAULT_PERIOD_LENGTH, ge=1, le=10)
    show_next_period_prediction: bool = True
    show_ovulation: bool = True
    show_safe_days: bool = False
    medication_tracking_enabled: bool = False
    reminder_enabled: bool = False
    reminder_time: str = Field(DEFAULT_REMINDER_TIME, pattern=CLOCK_TIME_PATTERN)
    show_schedule_on_calendar: bool = True
    pack_days: int = Field(DEFAULT_PACK_DAYS, ge=14, le=28)

    @model_validator(mode="after")
    def check_period_within_cycle(self) -> "TrackerSettings":
        if self.period_length >= self.cycle_length:
            raise ValueError("Period length must be less than cycle length")
        return self
