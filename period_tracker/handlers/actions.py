"""
Action handler used by calendar front ends.

The front end sends plain-data requests and renders the response. Every
mutating action returns the refreshed overlays and statistics so the
calendar can be redrawn wholesale.
"""
from typing import Any, Callable, Dict, Optional
from datetime import date
import json

from period_tracker.services.tracker import PeriodTracker
from period_tracker.services.exceptions import (
    TrackerValidationError,
    RecordNotFoundError,
    ConfirmationRequiredError,
    OverlapConfirmationRequired,
    ImportDataError,
    CorruptStateError,
)
from period_tracker.utils.storage import get_store
from period_tracker.utils.validators import parse_date, parse_flag
from period_tracker.utils.logging import logger

# Initialize shared tracker (lazy loading)
_tracker = None

def get_tracker() -> PeriodTracker:
    """Get or create the tracker bound to the configured store."""
    global _tracker
    if _tracker is None:
        _tracker = PeriodTracker(get_store())
    return _tracker

def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, ensure_ascii=False)
    }

def _calendar_body(tracker: PeriodTracker, today: date, condensed: bool) -> Dict[str, Any]:
    return {
        "overlays": [e.model_dump(mode="json") for e in tracker.overlays(today, condensed)],
        "statistics": tracker.statistics(today).model_dump(mode="json")
    }

def _dump(record: Optional[Any]) -> Optional[Dict[str, Any]]:
    return record.model_dump(mode="json", by_alias=True) if record is not None else None


ACTIONS: Dict[str, Callable[[PeriodTracker, Dict[str, Any]], Any]] = {
    "calendar": lambda t, p: None,
    "start_period": lambda t, p: _dump(t.start_period(p.get("start_date"))),
    "end_period": lambda t, p: _dump(t.end_period(p.get("end_date"))),
    "add_period": lambda t, p: _dump(t.add_period(
        p.get("start_date"), p.get("end_date"), confirm_overlap=parse_flag(p.get("confirm"), "confirm")
    )),
    "edit_period": lambda t, p: _dump(t.edit_period(
        p.get("period_id"), p.get("start_date"), p.get("end_date"),
        confirm_overlap=parse_flag(p.get("confirm"), "confirm")
    )),
    "delete_period": lambda t, p: t.delete_period(p.get("period_id"), confirm=parse_flag(p.get("confirm"), "confirm")),
    "save_note": lambda t, p: _dump(t.save_note(p.get("date"), p.get("symptoms"), p.get("notes", ""))),
    "delete_note": lambda t, p: t.delete_note(p.get("date")),
    "record_medication": lambda t, p: _dump(t.record_medication(
        p.get("date"), parse_flag(p.get("taken"), "taken", default=True), p.get("time"), p.get("missed_reason")
    )),
    "delete_medication": lambda t, p: t.delete_medication(p.get("date"), confirm=parse_flag(p.get("confirm"), "confirm")),
    "update_settings": lambda t, p: _dump(t.update_settings(**p)),
    "reset": lambda t, p: t.reset(confirm=parse_flag(p.get("confirm"), "confirm")),
    "import": lambda t, p: t.import_data(p.get("document", "")).summary(),
}


def handler(event: Dict[str, Any], context: Any = None, tracker: Optional[PeriodTracker] = None) -> Dict[str, Any]:
    """
    Handle one front-end action.

    Args:
        event: Request with ``action``, optional ``payload``, ``today``
            (YYYY-MM-DD, defaults to the current date) and ``condensed``
        context: Unused invocation context
        tracker: Tracker to act on; the shared tracker when omitted

    Returns:
        Response dict with ``statusCode`` and a JSON ``body``
    """
    action = event.get("action")
    payload = event.get("payload") or {}

    try:
        if action == "export":
            tracker = tracker or get_tracker()
            return _response(200, {
                "filename": "period-tracker-data.json",
                "document": tracker.export_data()
            })

        if action not in ACTIONS:
            return _response(400, {"error": f"Unknown action: {action}"})

        today = parse_date(event.get("today")) or date.today()
        condensed = parse_flag(event.get("condensed"), "condensed")
        tracker = tracker or get_tracker()

        result = ACTIONS[action](tracker, payload)
        body = _calendar_body(tracker, today, condensed)
        body["result"] = result
        return _response(200, body)

    except OverlapConfirmationRequired as e:
        return _response(409, {
            "error": str(e),
            "confirmation_required": True,
            "overlapping": [_dump(p) for p in e.overlapping]
        })
    except ConfirmationRequiredError as e:
        return _response(409, {"error": str(e), "confirmation_required": True})
    except (TrackerValidationError, ImportDataError) as e:
        logger.info("Rejected tracker action", extra={
            "action": action,
            "error": str(e)
        })
        return _response(400, {"error": str(e)})
    except RecordNotFoundError as e:
        return _response(404, {"error": str(e)})
    except CorruptStateError as e:
        logger.exception("Tracker data is corrupt", extra={"action": action})
        return _response(500, {"error": str(e)})
    except Exception as e:
        logger.exception("Error handling tracker action", extra={
            "action": action,
            "error_type": e.__class__.__name__
        })
        return _response(500, {"error": str(e)})
