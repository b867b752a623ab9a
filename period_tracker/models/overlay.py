"""
Overlay model definitions consumed by calendar renderers.
"""
from enum import Enum
from datetime import date
from typing import Any, Dict
from pydantic import BaseModel, Field


class OverlayKind(str, Enum):
    """
    Kinds of calendar overlay entries.
    """
    PERIOD_RANGE = "period-range"
    PERIOD_CLICKABLE = "period-clickable"
    CURRENT_PERIOD_RANGE = "current-period-range"
    CURRENT_PERIOD_CLICKABLE = "current-period-clickable"
    OVULATION_POINT = "ovulation-point"
    NOTE_POINT = "note-point"
    MEDICATION_RECORDED = "medication-recorded"
    MEDICATION_SCHEDULED = "medication-scheduled"
    PERIOD_PREDICTION_RANGE = "period-prediction-range"
    PERIOD_PREDICTION_CLICKABLE = "period-prediction-clickable"
    SAFE_DAYS_RANGE = "safe-days-range"


class ScheduleStatus(str, Enum):
    """
    Position of a virtual pill-schedule day relative to today.
    """
    SCHEDULED_PAST = "scheduled-past"
    SCHEDULED_FUTURE = "scheduled-future"


class DateRange(BaseModel):
    """
    Inclusive range of calendar days.
    """
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


class ScheduledDose(BaseModel):
    """
    A pill-pack day with no recorded medication event.
    """
    date: date
    pack_day: int
    status: ScheduleStatus


class OverlayEntry(BaseModel):
    """
    Renderer-agnostic description of one calendar item.

    ``end_date`` is exclusive: one day past the last covered day.
    """
    id: str
    kind: OverlayKind
    start_date: date
    end_date: date
    label: str
    style_hint: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
