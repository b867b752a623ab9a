"""
Local JSON storage for the tracker document.
"""
import os
import json
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from period_tracker.models.base import new_record_id
from period_tracker.models.period import Period
from period_tracker.models.note import DailyNote
from period_tracker.models.medication import MedicationEvent
from period_tracker.models.settings import TrackerSettings
from period_tracker.models.state import TrackerState
from period_tracker.services.exceptions import CorruptStateError
from period_tracker.utils.logging import logger

DATA_FILE_NAME = "period-tracker-data.json"

# Keys written by the original web application, read as fallbacks
LEGACY_STATE_KEYS = {
    "medicationEvents": "pillsTaken",
}
LEGACY_SETTINGS_KEYS = {
    "medicationTrackingEnabled": "pillTrackingEnabled",
    "reminderEnabled": "pillReminderEnabled",
    "reminderTime": "pillReminderTime",
    "showScheduleOnCalendar": "showPillsOnCalendar",
    "packDays": "pillPackDays",
}

# Singleton instance
_store_instance = None

def default_data_path() -> Path:
    """Data file location from PERIOD_TRACKER_DATA_PATH or the home directory."""
    configured = os.environ.get("PERIOD_TRACKER_DATA_PATH")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".period-tracker" / DATA_FILE_NAME

def get_store() -> "DataStore":
    """
    Get or create the singleton DataStore.

    Example:
        store = get_store()
        state = store.load()

    Returns:
        DataStore: Singleton instance bound to default_data_path()
    """
    global _store_instance
    if _store_instance is None:
        _store_instance = DataStore(default_data_path())
    return _store_instance


def _settings_value(raw: Dict[str, Any], key: str) -> Any:
    if key in raw:
        return raw[key]
    legacy = LEGACY_SETTINGS_KEYS.get(key)
    if legacy and legacy in raw:
        return raw[legacy]
    return None

def normalize_settings(raw: Any) -> TrackerSettings:
    """
    Build settings field by field, keeping every valid stored value and
    defaulting the rest.
    """
    settings = TrackerSettings()
    if not isinstance(raw, dict):
        return settings

    values = settings.model_dump(by_alias=True)
    for name, field in TrackerSettings.model_fields.items():
        key = field.alias or name
        candidate = _settings_value(raw, key)
        if candidate is None:
            continue
        try:
            TrackerSettings.model_validate({**values, key: candidate})
        except ValidationError:
            logger.warning("Invalid stored setting, using default", extra={
                "setting": key,
                "value": repr(candidate)
            })
            continue
        values[key] = candidate

    return TrackerSettings.model_validate(values)

def normalize_records(raw: Any, model: Type[BaseModel], label: str) -> List[Any]:
    """Validate each stored record, dropping the ones that are malformed."""
    if not isinstance(raw, list):
        return []

    records = []
    for item in raw:
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping malformed stored record", extra={
                "collection": label,
                "record": repr(item),
                "error": str(e)
            })
    return records

def _latest_per_date(records: List[Any]) -> List[Any]:
    by_date = {}
    for record in records:
        by_date[record.date] = record
    return sorted(by_date.values(), key=lambda r: r.date)

def _reassign_duplicate_ids(state: TrackerState) -> None:
    seen = set()
    for record in state.records():
        if record.id in seen:
            old_id = record.id
            record.id = new_record_id()
            logger.warning("Reassigned duplicate record id", extra={
                "old_id": old_id,
                "new_id": record.id
            })
        seen.add(record.id)

def normalize_state(raw: Dict[str, Any]) -> TrackerState:
    """
    Turn a parsed document into a valid TrackerState.

    Missing or malformed nested values are replaced by defaults; the
    document itself must be a JSON object.
    Records sharing an id with an earlier record get a fresh one.
    """
    settings = normalize_settings(raw.get("settings"))

    periods: List[Period] = [
        p for p in normalize_records(raw.get("periods"), Period, "periods")
        if p.end_date is not None
    ]

    current: Optional[Period] = None
    if raw.get("currentPeriod") is not None:
        loaded = normalize_records([raw["currentPeriod"]], Period, "currentPeriod")
        if loaded:
            current = loaded[0]
            if current.end_date is not None:
                periods.append(current)
                current = None

    notes = _latest_per_date(normalize_records(raw.get("notes"), DailyNote, "notes"))

    medication_key = "medicationEvents" if "medicationEvents" in raw else LEGACY_STATE_KEYS["medicationEvents"]
    medication_events = _latest_per_date(
        normalize_records(raw.get(medication_key), MedicationEvent, "medicationEvents")
    )

    state = TrackerState(
        periods=periods,
        current_period=current,
        notes=notes,
        medication_events=medication_events,
        settings=settings
    )
    state.fill_missing_times()
    _reassign_duplicate_ids(state)
    state.sort_records()
    return state


class DataStore:
    """Persists the whole tracker state as one JSON document."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> TrackerState:
        """
        Load the persisted tracker state.

        Returns:
            Stored state with defaults filled in, or a fresh state when
            nothing has been saved yet

        Raises:
            CorruptStateError: If the file is not a JSON object. The file is
                left untouched so it can be recovered.
        """
        if not self.path.exists():
            logger.info("No stored tracker data, starting empty", extra={
                "path": str(self.path)
            })
            return TrackerState()

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.exception("Stored tracker data is unreadable", extra={
                "path": str(self.path),
                "error_type": e.__class__.__name__
            })
            raise CorruptStateError(f"Stored tracker data is corrupt: {str(e)}") from e

        if not isinstance(raw, dict):
            logger.error("Stored tracker data is not an object", extra={
                "path": str(self.path),
                "document_type": type(raw).__name__
            })
            raise CorruptStateError("Stored tracker data is corrupt: expected a JSON object")

        state = normalize_state(raw)
        logger.info("Loaded tracker data", extra={
            "path": str(self.path),
            "periods": len(state.periods),
            "notes": len(state.notes),
            "medication_events": len(state.medication_events)
        })
        return state

    def save(self, state: TrackerState) -> None:
        """
        Write the full state, replacing the stored file atomically.

        Args:
            state: State to persist
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(state.to_document())

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".tracker-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

        logger.debug("Saved tracker data", extra={"path": str(self.path)})
