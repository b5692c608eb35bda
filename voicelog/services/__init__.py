"""
Service layer for VoiceLog.

- NoteWorkflowEngine: note operations and the complaint workflow
- NoteStore: client-side cache refreshed from change notifications
- SessionManager: signed-in identity with change listeners
- filtering: pure category/search/owner helpers
"""

from voicelog.services.auth import SessionManager
from voicelog.services.filtering import (
    count_by_category,
    filter_notes,
    matches_search,
    notes_owned_by,
)
from voicelog.services.note_engine import NoteWorkflowEngine
from voicelog.services.note_store import NoteStore

__all__ = [
    "NoteWorkflowEngine",
    "NoteStore",
    "SessionManager",
    "filter_notes",
    "matches_search",
    "notes_owned_by",
    "count_by_category",
]
