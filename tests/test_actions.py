"""
Tests for the front-end action handler.
"""
import json
import pytest
from unittest.mock import patch

from period_tracker.handlers import handler
from period_tracker.handlers import actions
from period_tracker.services.exceptions import CorruptStateError

TODAY = "2024-02-10"

def _call(tracker, action, payload=None, **extra):
    event = {"action": action, "payload": payload or {}, "today": TODAY, **extra}
    response = handler(event, None, tracker=tracker)
    return response["statusCode"], json.loads(response["body"])

def test_calendar_returns_overlays_and_statistics(tracker):
    """Reading the calendar returns overlays and statistics."""
    tracker.add_period("2024-01-01", "2024-01-05")
    tracker.add_period("2024-01-29", "2024-02-02")

    status, body = _call(tracker, "calendar")

    assert status == 200
    assert len(body["overlays"]) == 26
    assert body["overlays"][0]["kind"] == "period-range"
    assert body["overlays"][0]["end_date"] == "2024-01-06"
    assert body["statistics"]["average_cycle_length"] == 28
    assert body["result"] is None

def test_add_period(tracker):
    """Mutations return the stored record with the refreshed calendar."""
    status, body = _call(tracker, "add_period", {"start_date": "2024-01-01", "end_date": "2024-01-05"})

    assert status == 200
    assert body["result"]["startDate"] == "2024-01-01"
    assert body["result"]["endDate"] == "2024-01-05"
    assert len(tracker.state.periods) == 1

def test_overlap_requires_confirmation(tracker):
    """Overlaps answer 409 with the conflicting periods."""
    tracker.add_period("2024-01-01", "2024-01-05")
    payload = {"start_date": "2024-01-03", "end_date": "2024-01-07"}

    status, body = _call(tracker, "add_period", payload)

    assert status == 409
    assert body["confirmation_required"] is True
    assert body["overlapping"][0]["startDate"] == "2024-01-01"

    status, _ = _call(tracker, "add_period", {**payload, "confirm": True})

    assert status == 200
    assert len(tracker.state.periods) == 2

def test_delete_requires_confirmation(tracker):
    """Destructive actions answer 409 until confirmed."""
    period = tracker.add_period("2024-01-01", "2024-01-05")

    status, body = _call(tracker, "delete_period", {"period_id": period.id})

    assert status == 409
    assert "Are you sure" in body["error"]

@pytest.mark.parametrize("action,payload", [
    ("start_period", {}),
    ("end_period", {"end_date": "2024-02-01"}),
    ("update_settings", {"cycle_length": 99}),
    ("import", {"document": "{broken"}),
])
def test_invalid_input_is_bad_request(tracker, action, payload):
    """Validation and import failures answer 400."""
    status, body = _call(tracker, action, payload)

    assert status == 400
    assert body["error"]

def test_unknown_action(tracker):
    """Unknown actions answer 400."""
    status, body = _call(tracker, "launch")

    assert status == 400
    assert body["error"] == "Unknown action: launch"

def test_missing_record_is_not_found(tracker):
    """Unknown ids answer 404."""
    status, body = _call(tracker, "edit_period", {
        "period_id": "missing", "start_date": "2024-01-01", "end_date": "2024-01-02"
    })

    assert status == 404
    assert body["error"] == "Period not found"

def test_corrupt_state_is_server_error(tracker):
    """Unreadable stored data answers 500."""
    with patch.object(tracker, "overlays", side_effect=CorruptStateError("Stored tracker data is corrupt")):
        status, body = _call(tracker, "calendar")

    assert status == 500
    assert "corrupt" in body["error"]

def test_unexpected_error_is_server_error(tracker):
    """Anything unexpected answers 500."""
    with patch.object(tracker, "statistics", side_effect=RuntimeError("boom")):
        status, body = _call(tracker, "calendar")

    assert status == 500
    assert body["error"] == "boom"

def test_export(tracker):
    """Export returns the document and a file name."""
    tracker.add_period("2024-01-01", "2024-01-05")

    status, body = _call(tracker, "export")

    assert status == 200
    assert body["filename"] == "period-tracker-data.json"
    assert json.loads(body["document"])["periods"][0]["startDate"] == "2024-01-01"

def test_record_medication_and_condensed_labels(tracker):
    """Condensed responses use short labels."""
    tracker.update_settings(medication_tracking_enabled=True)

    status, body = _call(
        tracker, "record_medication", {"date": "2024-02-10", "time": "08:00"}, condensed=True
    )

    assert status == 200
    assert body["result"]["time"] == "08:00"
    pill = next(o for o in body["overlays"] if o["kind"] == "medication-recorded")
    assert pill["label"] == "💊(08:00)"

def test_save_note_and_update_settings(tracker):
    """Settings and note actions round-trip through the handler."""
    status, body = _call(tracker, "update_settings", {"showSafeDays": True})
    assert status == 200
    assert body["result"]["showSafeDays"] is True

    status, body = _call(tracker, "save_note", {"date": "2024-02-09", "symptoms": ["cramps"]})
    assert status == 200
    assert body["result"]["symptoms"] == ["cramps"]

def test_shared_tracker_is_created_lazily(monkeypatch, store):
    """Without an explicit tracker the configured store is used."""
    monkeypatch.setattr(actions, "_tracker", None)
    monkeypatch.setattr(actions, "get_store", lambda: store)

    response = handler({"action": "calendar", "today": TODAY})

    assert response["statusCode"] == 200
    assert actions.get_tracker().store is store

@pytest.mark.parametrize("action,payload", [
    ("record_medication", {"date": "2024-02-10", "taken": "false"}),
    ("reset", {"confirm": "false"}),
])
def test_string_flags_are_rejected(tracker, action, payload):
    """A quoted "false" is neither taken nor a confirmation."""
    tracker.add_period("2024-01-01", "2024-01-05")

    status, body = _call(tracker, action, payload)

    assert status == 400
    assert "must be true or false" in body["error"]
    assert tracker.state.medication_events == []
    assert len(tracker.state.periods) == 1

def test_import_returns_summary(tracker):
    """Import answers with counts of what was loaded."""
    document = '{"periods": [{"startDate": "2024-01-01", "endDate": "2024-01-05"}]}'

    status, body = _call(tracker, "import", {"document": document})

    assert status == 200
    assert body["result"]["periods"] == 1
    assert body["result"]["current_period"] is False
