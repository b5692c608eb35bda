"""
Data models for VoiceLog.

Core models:
- Note: tagged union of StandardNote and ComplaintNote
- Category, IssueStatus: classification and workflow enums
- WorkUpdate: append-only complaint annotation
- NoteDraft, NotePatch: create and partial-edit payloads
- User, Session: directory entry and signed-in identity
- ChangeEvent, ChangeType: store invalidation notifications
- AudioClip: captured audio for transcription
"""

from voicelog.models.audio import SUPPORTED_AUDIO_TYPES, AudioClip, normalize_mime_type
from voicelog.models.events import ChangeEvent, ChangeType
from voicelog.models.note import (
    BaseNote,
    Category,
    ComplaintNote,
    IssueStatus,
    Note,
    NoteDraft,
    NotePatch,
    StandardNote,
    WorkUpdate,
    note_adapter,
    parse_note,
    utc_now,
)
from voicelog.models.user import Session, User

__all__ = [
    # Note models
    "Note",
    "BaseNote",
    "StandardNote",
    "ComplaintNote",
    "Category",
    "IssueStatus",
    "WorkUpdate",
    "NoteDraft",
    "NotePatch",
    "note_adapter",
    "parse_note",
    "utc_now",
    # Users
    "User",
    "Session",
    # Events
    "ChangeEvent",
    "ChangeType",
    # Audio
    "AudioClip",
    "SUPPORTED_AUDIO_TYPES",
    "normalize_mime_type",
]
