"""
Shared logger for the tracker.

Log records are single-line JSON. Tracebacks are flattened onto one line and
dates or enums passed in ``extra`` are written as their ISO or string value.

Configuration:
    POWERTOOLS_SERVICE_NAME: service name on every record (default period_tracker)
    LOG_LEVEL: minimum level (default INFO)
    PERIOD_TRACKER_DATA_PATH: added to every record as ``data_path``
"""
import os
import sys
import json
import traceback
from datetime import date
from enum import Enum
from functools import partial

from aws_lambda_powertools import Logger

def flatten_traceback(exc_info):
    """Render exception info as a single line, frames joined by ' | '."""
    if exc_info is True:
        exc_info = sys.exc_info()

    if not (exc_info and isinstance(exc_info, tuple) and len(exc_info) == 3) or exc_info[0] is None:
        return None
    try:
        return ''.join(traceback.format_exception(*exc_info)).replace('\n', ' | ').strip()
    except Exception as e:
        return f"Error formatting exception: {str(e)}"

def _json_default(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)

class TrackerLogger(Logger):
    """Powertools logger whose exception records carry a one-line traceback."""

    def exception(self, message, *args, **kwargs):
        exc_info = kwargs.pop('exc_info', True)
        extra = dict(kwargs.pop('extra', None) or {})
        extra['exception'] = flatten_traceback(exc_info)
        kwargs['exc_info'] = False
        kwargs['extra'] = extra
        super().exception(message, *args, **kwargs)

def build_logger() -> TrackerLogger:
    """Create the tracker logger from environment settings."""
    tracker_logger = TrackerLogger(
        service=os.environ.get('POWERTOOLS_SERVICE_NAME', 'period_tracker'),
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        json_serializer=partial(json.dumps, default=_json_default, ensure_ascii=False),
        use_rfc3339=True
    )
    data_path = os.environ.get('PERIOD_TRACKER_DATA_PATH')
    if data_path:
        tracker_logger.append_keys(data_path=data_path)
    return tracker_logger

logger = build_logger()
