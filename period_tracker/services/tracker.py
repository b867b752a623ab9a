"""
Tracker service applying user actions to the persisted state.

Every mutation is one synchronous transaction: the change is made on a copy
of the state, validated, saved through the DataStore, and only then becomes
the tracker's current state. A failed validation or save leaves the previous
state untouched.

Typical usage:
    tracker = PeriodTracker(get_store())
    tracker.start_period(date(2024, 3, 1))
    tracker.end_period(date(2024, 3, 5))
    entries = tracker.overlays(today)
"""
import json
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional, Union
from datetime import date

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from period_tracker.models.period import Period
from period_tracker.models.note import DailyNote
from period_tracker.models.medication import MedicationEvent
from period_tracker.models.settings import TrackerSettings
from period_tracker.models.state import TrackerState
from period_tracker.models.overlay import OverlayEntry
from period_tracker.services.cycle import find_overlaps
from period_tracker.services.overlay import synthesize_overlays
from period_tracker.services.statistics import TrackerStatistics, calculate_tracker_statistics
from period_tracker.services.exceptions import (
    TrackerValidationError,
    RecordNotFoundError,
    ConfirmationRequiredError,
    OverlapConfirmationRequired,
    ImportDataError,
)
from period_tracker.utils.storage import DataStore
from period_tracker.utils.validators import require_date, validate_date_range, validate_clock_time

logger = Logger()

DateInput = Union[str, date, None]


def _settings_error_message(error: ValidationError) -> str:
    messages = {
        "cycle_length": "Cycle length must be between 21 and 40 days",
        "period_length": "Period length must be between 1 and 10 days",
        "pack_days": "Pill pack days must be between 14 and 28 days",
        "reminder_time": "Reminder time must be in HH:MM format",
    }
    messages.update({TrackerSettings.model_fields[name].alias: text for name, text in list(messages.items())})
    for detail in error.errors():
        location = detail.get("loc") or ()
        if location and location[0] in messages:
            return messages[location[0]]
        if "Period length must be less than cycle length" in detail.get("msg", ""):
            return "Period length must be less than cycle length"
    return "Invalid settings"


class PeriodTracker:
    """
    Owns the tracker state and applies mutations to it.

    Args:
        store: Storage the state is loaded from and saved to
        state: Optional already-loaded state; loaded from the store when omitted
    """

    def __init__(self, store: DataStore, state: Optional[TrackerState] = None):
        self.store = store
        self.state = state if state is not None else store.load()

    @contextmanager
    def _transaction(self, action: str) -> Iterator[TrackerState]:
        draft = self.state.model_copy(deep=True)
        yield draft
        draft.sort_records()
        self.store.save(draft)
        self.state = draft
        logger.info("Applied tracker action", extra={"action": action})

    # Periods

    def _check_overlap(
        self,
        periods: Iterable[Period],
        start_date: date,
        end_date: date,
        confirm_overlap: bool
    ) -> None:
        overlapping = find_overlaps(list(periods), start_date, end_date)
        if overlapping and not confirm_overlap:
            logger.info("Period overlap needs confirmation", extra={
                "start_date": str(start_date),
                "end_date": str(end_date),
                "overlapping": [p.id for p in overlapping]
            })
            raise OverlapConfirmationRequired(
                "This period overlaps with an existing period. Do you want to add it anyway?",
                overlapping
            )

    def start_period(self, start_date: DateInput) -> Period:
        """
        Open a new ongoing period.

        Raises:
            TrackerValidationError: If the date is missing or a period is already in progress
        """
        start = require_date(start_date, "a start date")
        if self.state.current_period is not None:
            raise TrackerValidationError(
                "You have an ongoing period. End it first to start a new one."
            )

        with self._transaction("start_period") as draft:
            draft.current_period = Period(start_date=start)
        return self.state.current_period

    def end_period(self, end_date: DateInput) -> Period:
        """
        Close the ongoing period and move it into the history.

        Raises:
            TrackerValidationError: If no period is in progress or the end date is invalid
        """
        end = require_date(end_date, "an end date")
        current = self.state.current_period
        if current is None:
            raise TrackerValidationError("There is no period in progress")
        validate_date_range(current.start_date, end)

        with self._transaction("end_period") as draft:
            closed = draft.current_period.model_copy(update={"end_date": end})
            draft.periods.append(closed)
            draft.current_period = None
        return closed

    def add_period(
        self,
        start_date: DateInput,
        end_date: DateInput,
        confirm_overlap: bool = False
    ) -> Period:
        """
        Record a past period with both dates known.

        Args:
            start_date: First day of the period
            end_date: Last day of the period
            confirm_overlap: Add the period even if it overlaps existing ones

        Raises:
            TrackerValidationError: If a date is missing or end is before start
            OverlapConfirmationRequired: If the period overlaps and was not confirmed
        """
        start = require_date(start_date, "a start date")
        end = require_date(end_date, "an end date")
        validate_date_range(start, end)
        self._check_overlap(self.state.periods, start, end, confirm_overlap)

        period = Period(start_date=start, end_date=end)
        with self._transaction("add_period") as draft:
            draft.periods.append(period)
        return period

    def edit_period(
        self,
        period_id: str,
        start_date: DateInput,
        end_date: DateInput = None,
        confirm_overlap: bool = False
    ) -> Period:
        """
        Change the dates of a recorded or ongoing period.

        Giving the ongoing period an end date closes it. Recorded periods
        must keep an end date.

        Raises:
            RecordNotFoundError: If no period has the given id
            TrackerValidationError: If the dates are missing or out of order
            OverlapConfirmationRequired: If the new range overlaps another period
        """
        existing = self.state.find_period(period_id)
        if existing is None:
            raise RecordNotFoundError("Period not found")

        start = require_date(start_date, "a start date")
        end = require_date(end_date, "an end date") if end_date or not existing.is_open else None
        if end is not None:
            validate_date_range(start, end)
            others = [p for p in self.state.periods if p.id != period_id]
            self._check_overlap(others, start, end, confirm_overlap)

        updated = existing.model_copy(update={"start_date": start, "end_date": end})
        with self._transaction("edit_period") as draft:
            if existing.is_open:
                if end is None:
                    draft.current_period = updated
                else:
                    draft.current_period = None
                    draft.periods.append(updated)
            else:
                draft.periods = [updated if p.id == period_id else p for p in draft.periods]
        return updated

    def delete_period(self, period_id: str, confirm: bool = False) -> None:
        """
        Delete a recorded or ongoing period.

        Raises:
            RecordNotFoundError: If no period has the given id
            ConfirmationRequiredError: If the deletion was not confirmed
        """
        existing = self.state.find_period(period_id)
        if existing is None:
            raise RecordNotFoundError("Period not found")
        if not confirm:
            raise ConfirmationRequiredError(
                "Are you sure you want to delete this period? This action cannot be undone."
            )

        with self._transaction("delete_period") as draft:
            if existing.is_open:
                draft.current_period = None
            else:
                draft.periods = [p for p in draft.periods if p.id != period_id]

    # Notes

    def save_note(self, day: DateInput, symptoms: Optional[List[str]] = None, notes: str = "") -> Optional[DailyNote]:
        """
        Create or replace the note for a day.

        An empty note (no symptoms, no text) removes any stored note for the day.

        Returns:
            The stored note, or None when the note was empty
        """
        note_date = require_date(day)
        note = DailyNote(date=note_date, symptoms=symptoms or [], notes=notes or "")
        existing = self.state.note_for(note_date)
        if existing is not None:
            note = note.model_copy(update={"id": existing.id})

        with self._transaction("save_note") as draft:
            draft.notes = [n for n in draft.notes if n.date != note_date]
            if not note.is_empty:
                draft.notes.append(note)
        return None if note.is_empty else note

    def delete_note(self, day: DateInput) -> None:
        """
        Raises:
            RecordNotFoundError: If there is no note on that day
        """
        note_date = require_date(day)
        if self.state.note_for(note_date) is None:
            raise RecordNotFoundError("No note recorded for this date")

        with self._transaction("delete_note") as draft:
            draft.notes = [n for n in draft.notes if n.date != note_date]

    # Medication

    def record_medication(
        self,
        day: DateInput,
        taken: bool = True,
        time: Optional[str] = None,
        missed_reason: Optional[str] = None
    ) -> MedicationEvent:
        """
        Create or replace the pill record for a day.

        A taken pill without a time is recorded at the reminder time.
        """
        event_date = require_date(day)
        if taken:
            time = validate_clock_time(time) or self.state.settings.reminder_time
            event = MedicationEvent(date=event_date, taken=True, time=time)
        else:
            event = MedicationEvent(date=event_date, taken=False, missed_reason=missed_reason or "")

        existing = self.state.medication_for(event_date)
        if existing is not None:
            event = event.model_copy(update={"id": existing.id})

        with self._transaction("record_medication") as draft:
            draft.medication_events = [m for m in draft.medication_events if m.date != event_date]
            draft.medication_events.append(event)
        return event

    def delete_medication(self, day: DateInput, confirm: bool = False) -> None:
        """
        Raises:
            RecordNotFoundError: If there is no pill record on that day
            ConfirmationRequiredError: If the deletion was not confirmed
        """
        event_date = require_date(day)
        if self.state.medication_for(event_date) is None:
            raise RecordNotFoundError("No pill record for this date")
        if not confirm:
            raise ConfirmationRequiredError("Are you sure you want to delete this pill record?")

        with self._transaction("delete_medication") as draft:
            draft.medication_events = [m for m in draft.medication_events if m.date != event_date]

    # Settings and whole-state operations

    def update_settings(self, **changes) -> TrackerSettings:
        """
        Change one or more settings.

        Accepts snake_case or camelCase names.

        Raises:
            TrackerValidationError: If a value is out of range or a name is unknown
        """
        values = self.state.settings.model_dump()
        by_alias = {field.alias: name for name, field in TrackerSettings.model_fields.items()}
        for key, value in changes.items():
            name = by_alias.get(key, key)
            if name not in values:
                raise TrackerValidationError(f"Unknown setting: {key}")
            values[name] = value

        try:
            settings = TrackerSettings.model_validate(values)
        except ValidationError as e:
            raise TrackerValidationError(_settings_error_message(e)) from e

        with self._transaction("update_settings") as draft:
            draft.settings = settings
        return settings

    def reset(self, confirm: bool = False) -> None:
        """
        Clear all data and settings.

        Raises:
            ConfirmationRequiredError: If the reset was not confirmed
        """
        if not confirm:
            raise ConfirmationRequiredError(
                "Are you sure you want to clear all data? This action cannot be undone."
            )
        with self._transaction("reset") as draft:
            fresh = TrackerState()
            for name in TrackerState.model_fields:
                setattr(draft, name, getattr(fresh, name))

    def export_data(self) -> str:
        """Full state as an indented JSON document."""
        return json.dumps(self.state.to_document(), indent=2, ensure_ascii=False)

    def import_data(self, document: str) -> TrackerState:
        """
        Replace the whole state with an exported document.

        Missing top-level keys take their defaults; anything that does not
        match the tracker document shape is rejected.
        Taken pills without a time get the imported reminder time, as on load.

        Raises:
            ImportDataError: If the document cannot be parsed or has the wrong shape
        """
        try:
            raw = json.loads(document)
        except (TypeError, json.JSONDecodeError) as e:
            logger.warning("Rejected import: not JSON", extra={"error": str(e)})
            raise ImportDataError("Error importing data. Please check the file format.") from e

        if not isinstance(raw, dict):
            raise ImportDataError("Error importing data. Please check the file format.")

        try:
            imported = TrackerState.model_validate(raw)
        except ValidationError as e:
            logger.warning("Rejected import: invalid document", extra={
                "error_count": e.error_count()
            })
            raise ImportDataError(
                "Error importing data. The file does not look like tracker data."
            ) from e

        if any(p.end_date is None for p in imported.periods):
            raise ImportDataError("Error importing data. Recorded periods must have an end date.")
        if imported.current_period is not None and not imported.current_period.is_open:
            raise ImportDataError("Error importing data. The current period must not have an end date.")
        for label, records in (("notes", imported.notes), ("pill records", imported.medication_events)):
            if len({r.date for r in records}) != len(records):
                raise ImportDataError(f"Error importing data. Found more than one entry per date in {label}.")
        duplicates = imported.duplicate_ids()
        if duplicates:
            logger.warning("Rejected import: duplicate record ids", extra={"ids": duplicates})
            raise ImportDataError("Error importing data. Found more than one record with the same id.")

        imported.fill_missing_times()
        with self._transaction("import") as draft:
            for name in TrackerState.model_fields:
                setattr(draft, name, getattr(imported, name))
        return self.state

    # Read side

    def overlays(self, today: date, condensed: bool = False) -> List[OverlayEntry]:
        """Calendar overlay entries for the current state."""
        return synthesize_overlays(self.state, today, condensed)

    def statistics(self, today: date) -> TrackerStatistics:
        """Dashboard statistics for the current state."""
        return calculate_tracker_statistics(self.state, today)
