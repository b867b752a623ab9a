"""
Shared base model for persisted tracker records.
"""
from uuid import uuid4
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_record_id() -> str:
    """Generate a stable opaque identifier for a stored record."""
    return uuid4().hex


class TrackerModel(BaseModel):
    """
    Base model for everything stored in the tracker document.

    Fields are snake_case in Python and camelCase in the persisted JSON.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
