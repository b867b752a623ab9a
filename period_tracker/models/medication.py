"""
Medication event model definition for pill-pack adherence tracking.
"""
from datetime import date
from typing import Optional
from pydantic import Field, field_validator, model_validator

from period_tracker.models.base import TrackerModel, new_record_id

CLOCK_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class MedicationEvent(TrackerModel):
    """
    Records whether the daily pill was taken on a given date.

    ``time`` is only kept for taken pills and ``missed_reason`` only for
    missed ones.
    """
    id: str = Field(default_factory=new_record_id)
    date: date
    taken: bool
    time: Optional[str] = Field(None, pattern=CLOCK_TIME_PATTERN)
    missed_reason: Optional[str] = None

    @field_validator("time", mode="before")
    @classmethod
    def blank_time_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def drop_inapplicable_fields(self) -> "MedicationEvent":
        if self.taken:
            self.missed_reason = None
        else:
            self.time = None
            if self.missed_reason is None:
                self.missed_reason = ""
        return self
