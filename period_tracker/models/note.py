"""
Daily note model definition.
"""
from datetime import date
from typing import List
from pydantic import Field, field_validator

from period_tracker.models.base import TrackerModel, new_record_id


class DailyNote(TrackerModel):
    """
    Symptoms and free text recorded for a single day.
    """
    id: str = Field(default_factory=new_record_id)
    date: date
    symptoms: List[str] = Field(default_factory=list)
    notes: str = ""

    @field_validator("symptoms")
    @classmethod
    def normalize_symptoms(cls, value: List[str]) -> List[str]:
        # Symptoms are a set of tags; keep them deduplicated and ordered
        return sorted({tag.strip() for tag in value if tag and tag.strip()})

    @property
    def is_empty(self) -> bool:
        """A note without symptoms or text is treated as no note at all."""
        return not self.symptoms and not self.notes
