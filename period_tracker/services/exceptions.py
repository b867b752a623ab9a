"""
Service-level exceptions.

This module contains exceptions that can be raised by the tracker services
and storage layer. Every exception carries a message that can be shown to
the user as-is.
"""
from typing import List


class TrackerError(Exception):
    """Base exception for tracker errors."""
    pass

class TrackerValidationError(TrackerError):
    """Raised when user input is rejected before any state is changed."""
    pass

class RecordNotFoundError(TrackerError):
    """Raised when a referenced period, note or medication record does not exist."""
    pass

class ConfirmationRequiredError(TrackerError):
    """Raised when an action needs explicit confirmation before it proceeds."""
    pass

class OverlapConfirmationRequired(ConfirmationRequiredError):
    """Raised when a period overlaps existing periods and was not confirmed."""

    def __init__(self, message: str, overlapping: List = None):
        super().__init__(message)
        self.overlapping = overlapping or []

class ImportDataError(TrackerError):
    """Raised when an imported document cannot be parsed or has the wrong shape."""
    pass

class CorruptStateError(TrackerError):
    """Raised when the persisted document cannot be read as a tracker state."""
    pass
