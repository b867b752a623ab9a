"""
Aggregate model holding the whole persisted tracker document.
"""
from datetime import date
from typing import List, Optional
from pydantic import Field

from period_tracker.models.base import TrackerModel
from period_tracker.models.period import Period
from period_tracker.models.note import DailyNote
from period_tracker.models.medication import MedicationEvent
from period_tracker.models.settings import TrackerSettings


class TrackerState(TrackerModel):
    """
    The single persisted root: period history, the open period, notes,
    medication records and settings.
    """
    periods: List[Period] = Field(default_factory=list)
    current_period: Optional[Period] = None
    notes: List[DailyNote] = Field(default_factory=list)
    medication_events: List[MedicationEvent] = Field(default_factory=list)
    settings: TrackerSettings = Field(default_factory=TrackerSettings)

    def sort_records(self) -> None:
        """Restore chronological order of every collection."""
        self.periods.sort(key=lambda p: p.start_date)
        self.notes.sort(key=lambda n: n.date)
        self.medication_events.sort(key=lambda m: m.date)

    def find_period(self, period_id: str) -> Optional[Period]:
        """Look up a closed or open period by id."""
        if self.current_period is not None and self.current_period.id == period_id:
            return self.current_period
        return next((p for p in self.periods if p.id == period_id), None)

    def note_for(self, day: date) -> Optional[DailyNote]:
        return next((n for n in self.notes if n.date == day), None)

    def medication_for(self, day: date) -> Optional[MedicationEvent]:
        return next((m for m in self.medication_events if m.date == day), None)

    def records(self) -> List[TrackerModel]:
        """Every record that carries an id, the open period included."""
        periods = self.periods + ([self.current_period] if self.current_period is not None else [])
        return [*periods, *self.notes, *self.medication_events]

    def duplicate_ids(self) -> List[str]:
        """Ids used by more than one record, in first-seen order."""
        seen, duplicates = set(), []
        for record in self.records():
            if record.id in seen and record.id not in duplicates:
                duplicates.append(record.id)
            seen.add(record.id)
        return duplicates

    def fill_missing_times(self) -> None:
        """Taken pills recorded without a time are taken at the reminder time."""
        for event in self.medication_events:
            if event.taken and event.time is None:
                event.time = self.settings.reminder_time

    def summary(self) -> dict:
        """Record counts, for logs and action results."""
        return {
            "periods": len(self.periods),
            "current_period": self.current_period is not None,
            "notes": len(self.notes),
            "medication_events": len(self.medication_events)
        }

    def to_document(self) -> dict:
        """Serialize to the persisted camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)
