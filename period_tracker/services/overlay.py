"""
Service module that turns tracker state into calendar overlay entries.

The synthesizer merges recorded periods, notes and medication events with
cycle predictions and the pill schedule into one ordered list. Each kind of
derived overlay is gated by its settings toggle; recorded periods and notes
are always shown.

Overlay end dates are exclusive (one day past the last covered day). That
translation happens here only; every other service works with inclusive
ranges.

Typical usage:
    entries = synthesize_overlays(state, today)
    condensed = synthesize_overlays(state, today, condensed=True)
"""
from typing import Any, Dict, List, Optional
from datetime import date

from aws_lambda_powertools import Logger

from period_tracker.models.state import TrackerState
from period_tracker.models.period import Period
from period_tracker.models.note import DailyNote
from period_tracker.models.medication import MedicationEvent
from period_tracker.models.overlay import OverlayEntry, OverlayKind, ScheduledDose, ScheduleStatus
from period_tracker.services.constants import (
    PREDICTION_COUNT,
    VERBOSE_LABELS,
    CONDENSED_LABELS,
    STYLE_HINTS,
)
from period_tracker.services.cycle import (
    sorted_periods,
    effective_cycle_length,
    ovulation_date,
    future_periods,
    safe_day_ranges,
    current_cycle_day,
)
from period_tracker.services.medication import virtual_schedule_entries
from period_tracker.services.utils import add_days, inclusive_duration

logger = Logger()

BACKGROUND = {"display": "background"}


class OverlaySynthesizer:
    """
    Builds overlay entries for one state snapshot and one day.

    Args:
        state: Tracker state to render
        today: Current date
        condensed: Use short glyph labels instead of detailed text
    """

    def __init__(self, state: TrackerState, today: date, condensed: bool = False):
        self.state = state
        self.settings = state.settings
        self.today = today
        self.labels = CONDENSED_LABELS if condensed else VERBOSE_LABELS
        self.entries: List[OverlayEntry] = []

    def _label(self, key: str, **values: Any) -> str:
        return self.labels[key].format(**values)

    def _add(
        self,
        entry_id: str,
        kind: OverlayKind,
        start: date,
        last_day: date,
        label: str,
        style_key: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        self.entries.append(OverlayEntry(
            id=entry_id,
            kind=kind,
            start_date=start,
            end_date=add_days(last_day, 1),
            label=label,
            style_hint=STYLE_HINTS[style_key],
            metadata=metadata or {}
        ))

    def build(self) -> List[OverlayEntry]:
        """Generate the full ordered overlay list."""
        self.entries = []
        self._add_recorded_periods()
        self._add_current_period()
        self._add_notes()
        if self.settings.medication_tracking_enabled and self.settings.show_schedule_on_calendar:
            self._add_medication_events()
            self._add_medication_schedule()
        if self.settings.show_next_period_prediction:
            self._add_predictions()
        if self.settings.show_safe_days:
            self._add_safe_days()

        logger.debug("Synthesized calendar overlays", extra={
            "today": str(self.today),
            "entry_count": len(self.entries)
        })
        return self.entries

    def _add_recorded_periods(self) -> None:
        cycle_length = effective_cycle_length(self.state.periods, self.settings)
        for period in sorted_periods(self.state.periods):
            duration = period.duration
            self._add(
                f"period-bg-{period.id}", OverlayKind.PERIOD_RANGE,
                period.start_date, period.end_date,
                self._label("period_range"), "period_range",
                {**BACKGROUND, "period_id": period.id}
            )
            self._add(
                f"period-click-{period.id}", OverlayKind.PERIOD_CLICKABLE,
                period.start_date, period.end_date,
                self._label("period_clickable", days=duration), "period_clickable",
                {"period_id": period.id, "duration": duration}
            )

            if self.settings.show_ovulation:
                ovulation = ovulation_date(period.start_date, cycle_length)
                if ovulation:
                    self._add(
                        f"ovulation-{period.id}", OverlayKind.OVULATION_POINT,
                        ovulation, ovulation,
                        self._label("ovulation"), "ovulation",
                        {"period_id": period.id}
                    )

    def _add_current_period(self) -> None:
        period: Optional[Period] = self.state.current_period
        if period is None:
            return

        expected_end = add_days(period.start_date, self.settings.period_length - 1)
        display_end = max(self.today, expected_end)
        cycle_day = current_cycle_day(period, self.today)

        self._add(
            "current-period-bg", OverlayKind.CURRENT_PERIOD_RANGE,
            period.start_date, display_end,
            self._label("current_period_range"), "current_period_range",
            {**BACKGROUND, "period_id": period.id}
        )
        self._add(
            "current-period-click", OverlayKind.CURRENT_PERIOD_CLICKABLE,
            period.start_date, display_end,
            self._label("current_period_clickable", day=cycle_day), "current_period_clickable",
            {"period_id": period.id, "cycle_day": cycle_day}
        )

    def _note_label(self, note: DailyNote) -> str:
        # Free text takes precedence over the symptom list
        if note.notes:
            return self._label("note", text=note.notes)
        return self._label("symptoms", symptoms=", ".join(note.symptoms))

    def _add_notes(self) -> None:
        for note in self.state.notes:
            if note.is_empty:
                continue
            self._add(
                f"note-{note.id}", OverlayKind.NOTE_POINT,
                note.date, note.date,
                self._note_label(note), "note",
                {"note_id": note.id, "symptoms": list(note.symptoms)}
            )

    def _medication_label(self, event: MedicationEvent) -> str:
        if event.taken:
            if event.time:
                return self._label("pill_taken_time", time=event.time)
            return self._label("pill_taken")
        if event.missed_reason:
            return self._label("pill_missed_reason", reason=event.missed_reason)
        return self._label("pill_missed")

    def _add_medication_events(self) -> None:
        for event in self.state.medication_events:
            self._add(
                f"pill-{event.id}", OverlayKind.MEDICATION_RECORDED,
                event.date, event.date,
                self._medication_label(event),
                "pill_taken" if event.taken else "pill_missed",
                {"medication_id": event.id, "taken": event.taken}
            )

    def _add_medication_schedule(self) -> None:
        doses: List[ScheduledDose] = virtual_schedule_entries(
            self.state.medication_events, self.settings, self.today
        )
        for dose in doses:
            key = "pill_past" if dose.status == ScheduleStatus.SCHEDULED_PAST else "pill_future"
            self._add(
                f"pill-schedule-{dose.date.isoformat()}", OverlayKind.MEDICATION_SCHEDULED,
                dose.date, dose.date,
                self._label(key, pack_day=dose.pack_day), key,
                {"pack_day": dose.pack_day, "status": dose.status.value}
            )

    def _add_predictions(self) -> None:
        cycle_length = effective_cycle_length(self.state.periods, self.settings)
        period_length = self.settings.period_length
        predictions = future_periods(self.state.periods, cycle_length, PREDICTION_COUNT)

        for index, start in enumerate(predictions):
            last_day = add_days(start, period_length - 1)
            metadata = {"prediction_number": index + 1}
            self._add(
                f"period-prediction-{index}", OverlayKind.PERIOD_PREDICTION_RANGE,
                start, last_day,
                self._label("prediction_range"), "prediction_range",
                {**BACKGROUND, **metadata}
            )
            self._add(
                f"period-prediction-clickable-{index}", OverlayKind.PERIOD_PREDICTION_CLICKABLE,
                start, last_day,
                self._label("prediction_clickable", days=inclusive_duration(start, last_day)),
                "prediction_clickable",
                metadata
            )

    def _add_safe_days(self) -> None:
        for index, safe_range in enumerate(safe_day_ranges(self.state.periods, self.settings, self.today)):
            self._add(
                f"safe-days-{index}", OverlayKind.SAFE_DAYS_RANGE,
                safe_range.start, safe_range.end,
                self._label("safe_days"), "safe_days",
                dict(BACKGROUND)
            )


def synthesize_overlays(state: TrackerState, today: date, condensed: bool = False) -> List[OverlayEntry]:
    """
    Build the ordered calendar overlay list for a tracker state.

    Args:
        state: Tracker state to render
        today: Current date
        condensed: Collapse labels to short glyphs for small displays

    Returns:
        Overlay entries with exclusive end dates
    """
    return OverlaySynthesizer(state, today, condensed).build()
