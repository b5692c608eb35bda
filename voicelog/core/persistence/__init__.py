"""
Persistence gateway implementations for VoiceLog.

Provides the abstract gateway, the change feed and concrete backends.

Available backends:
- SQLiteNoteGateway: Local file (or in-memory) store using aiosqlite
"""

from voicelog.core.persistence.base import NoteGateway
from voicelog.core.persistence.change_feed import ChangeFeed, Subscription
from voicelog.core.persistence.sqlite_store import SQLiteNoteGateway

__all__ = [
    "NoteGateway",
    "ChangeFeed",
    "Subscription",
    "SQLiteNoteGateway",
]
