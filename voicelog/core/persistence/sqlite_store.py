"""
SQLite note gateway using aiosqlite.

Tables:
- notes: one row per note, work updates as a JSON array column
- profiles: user directory used for assignment choices
"""

from pathlib import Path
from typing import Any

import aiosqlite

from voicelog.core.persistence.base import NoteGateway
from voicelog.core.persistence.change_feed import ChangeCallback, ChangeFeed, Subscription
from voicelog.core.persistence.codec import encode_fields, encode_work_updates, record_to_note
from voicelog.models.events import ChangeEvent, ChangeType
from voicelog.models.note import ComplaintNote, NoteDraft, StandardNote, utc_now
from voicelog.models.user import User
from voicelog.utils.exceptions import GatewayError, NotFoundError
from voicelog.utils.id_generator import generate_note_id
from voicelog.utils.logger import get_logger

logger = get_logger(__name__)


class SQLiteNoteGateway(NoteGateway):
    """
    SQLite-backed persistence gateway.

    Features:
    - Store-assigned IDs and creation timestamps
    - Ownership predicate applied in the WHERE clause
    - Change notifications published after each commit
    """

    def __init__(self, db_path: str = "data/voicelog.db", change_feed: ChangeFeed | None = None):
        """
        Initialize SQLite gateway.

        Args:
            db_path: Path to SQLite database file
            change_feed: Optional shared feed (a private one is created otherwise)
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None
        self.change_feed = change_feed or ChangeFeed()

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            self.connection = await aiosqlite.connect(self.db_path)
            self.connection.row_factory = aiosqlite.Row
            await self.connection.execute("PRAGMA journal_mode = WAL")
            await self.connection.commit()

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS notes (
                id TEXT PRIMARY KEY,
                content TEXT NOT NULL,
                category TEXT NOT NULL,
                user_id TEXT NOT NULL,
                user_email TEXT DEFAULT '',
                status TEXT,
                assigned_to TEXT,
                work_updates TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT
            )
        """
        )

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS profiles (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL,
                username TEXT
            )
        """
        )

        await self.connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_notes_created ON notes(created_at)"
        )
        await self.connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_notes_category ON notes(category)"
        )
        await self.connection.execute("CREATE INDEX IF NOT EXISTS idx_notes_user ON notes(user_id)")

        await self.connection.commit()

    # ═══════════════════════════════════════════════════════════
    # NOTE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def insert(self, draft: NoteDraft) -> str:
        """Store a new note and return its ID."""
        await self.connect()

        note_id = generate_note_id()
        now = utc_now().isoformat()

        try:
            await self.connection.execute(
                """
                INSERT INTO notes (
                    id, content, category, user_id, user_email,
                    status, assigned_to, work_updates, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    note_id,
                    draft.text,
                    draft.category.value,
                    draft.owner_id,
                    draft.owner_email,
                    draft.status.value if draft.status else None,
                    draft.assigned_to,
                    encode_work_updates(draft.work_updates),
                    now,
                    now,
                ),
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            logger.error(f"Failed to insert note: {e}", extra={"operation": "insert"})
            raise GatewayError(f"Failed to insert note: {e}") from e

        await self.change_feed.publish(ChangeEvent(type=ChangeType.INSERT, note_id=note_id))
        return note_id

    async def get(self, note_id: str) -> StandardNote | ComplaintNote | None:
        """Retrieve a note by ID."""
        await self.connect()

        try:
            cursor = await self.connection.execute("SELECT * FROM notes WHERE id = ?", (note_id,))
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise GatewayError(f"Failed to fetch note {note_id}: {e}") from e

        if not row:
            return None

        return record_to_note(dict(row))

    async def update(
        self, note_id: str, fields: dict[str, Any], owner_id: str | None = None
    ) -> None:
        """Overwrite the given fields of a note."""
        await self.connect()

        if not fields:
            return

        columns = encode_fields({**fields, "updated_at": utc_now()})
        assignments = ", ".join(f"{column} = ?" for column in columns)
        query = f"UPDATE notes SET {assignments} WHERE id = ?"
        params: list[Any] = [*columns.values(), note_id]

        if owner_id is not None:
            query += " AND user_id = ?"
            params.append(owner_id)

        try:
            cursor = await self.connection.execute(query, params)
            await self.connection.commit()
        except aiosqlite.Error as e:
            logger.error(
                f"Failed to update note {note_id}: {e}",
                extra={"operation": "update", "note_id": note_id},
            )
            raise GatewayError(f"Failed to update note {note_id}: {e}") from e

        if cursor.rowcount == 0:
            raise NotFoundError(f"Note not found: {note_id}", context={"owner_id": owner_id})

        await self.change_feed.publish(ChangeEvent(type=ChangeType.UPDATE, note_id=note_id))

    async def delete(self, note_id: str, owner_id: str) -> None:
        """Delete a note owned by owner_id."""
        await self.connect()

        try:
            cursor = await self.connection.execute(
                "DELETE FROM notes WHERE id = ? AND user_id = ?", (note_id, owner_id)
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            logger.error(
                f"Failed to delete note {note_id}: {e}",
                extra={"operation": "delete", "note_id": note_id},
            )
            raise GatewayError(f"Failed to delete note {note_id}: {e}") from e

        if cursor.rowcount == 0:
            raise NotFoundError(f"Note not found: {note_id}", context={"owner_id": owner_id})

        await self.change_feed.publish(ChangeEvent(type=ChangeType.DELETE, note_id=note_id))

    async def query_all(self) -> list[StandardNote | ComplaintNote]:
        """Return every note, newest first."""
        await self.connect()

        try:
            cursor = await self.connection.execute(
                "SELECT * FROM notes ORDER BY created_at DESC, rowid DESC"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error(f"Failed to query notes: {e}", extra={"operation": "query_all"})
            raise GatewayError(f"Failed to query notes: {e}") from e

        return [record_to_note(dict(row)) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # CHANGE NOTIFICATIONS
    # ═══════════════════════════════════════════════════════════

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Register for change notifications."""
        return self.change_feed.subscribe(callback)

    # ═══════════════════════════════════════════════════════════
    # USER DIRECTORY
    # ═══════════════════════════════════════════════════════════

    async def fetch_user_directory(self) -> list[User]:
        """Return all profiles."""
        await self.connect()

        try:
            cursor = await self.connection.execute(
                "SELECT id, email, username FROM profiles ORDER BY email"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise GatewayError(f"Failed to fetch users: {e}") from e

        return [
            User(id=row["id"], email=row["email"], display_name=row["username"] or None)
            for row in rows
        ]

    async def upsert_user(self, user: User) -> None:
        """Add or refresh a profile. A missing display name keeps the stored one."""
        await self.connect()

        try:
            await self.connection.execute(
                """
                INSERT INTO profiles (id, email, username) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email = excluded.email,
                    username = COALESCE(excluded.username, profiles.username)
                """,
                (user.id, user.email, user.display_name),
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            raise GatewayError(f"Failed to store user {user.id}: {e}") from e

    async def close(self) -> None:
        """Close database connection."""
        if self.connection:
            await self.connection.close()
            self.connection = None
        self.change_feed.clear()
