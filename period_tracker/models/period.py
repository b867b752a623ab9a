"""
Period model definition for recorded menstruation periods.
"""
from datetime import date
from typing import Optional
from pydantic import Field, model_validator

from period_tracker.models.base import TrackerModel, new_record_id


class Period(TrackerModel):
    """
    Represents a menstruation period.

    A period without an end date is the open (ongoing) period.
    """
    id: str = Field(default_factory=new_record_id)
    start_date: date
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self) -> "Period":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self

    @property
    def is_open(self) -> bool:
        """Check if the period is still ongoing."""
        return self.end_date is None

    @property
    def duration(self) -> Optional[int]:
        """Length of a closed period in days, counting both ends."""
        if self.end_date is None:
            return None
        return (self.end_date - self.start_date).days + 1

    def overlaps(self, start_date: date, end_date: date) -> bool:
        """Check if this closed period intersects the inclusive range given."""
        if self.end_date is None:
            return False
        return start_date <= self.end_date and end_date >= self.start_date
