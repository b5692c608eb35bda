"""
Change notification models.

Events carry no field diff; a consumer re-queries the store when one arrives.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from voicelog.models.note import utc_now


class ChangeType(str, Enum):
    """Kind of write that produced a notification."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeEvent(BaseModel):
    """Invalidation signal emitted after a committed write."""

    type: ChangeType
    note_id: str
    occurred_at: datetime = Field(default_factory=utc_now)
