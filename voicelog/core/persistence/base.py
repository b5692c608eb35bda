"""
Base interface for the persistence gateway.

The gateway is the single source of truth for notes. Every committed write is
announced on its change feed so connected clients can re-fetch.
"""

from abc import ABC, abstractmethod
from typing import Any

from voicelog.core.persistence.change_feed import ChangeCallback, Subscription
from voicelog.models.note import ComplaintNote, NoteDraft, StandardNote
from voicelog.models.user import User


class NoteGateway(ABC):
    """Abstract base class for note storage backends."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables/schema)."""
        pass

    # ═══════════════════════════════════════════════════════════
    # NOTE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def insert(self, draft: NoteDraft) -> str:
        """
        Store a new note.

        Args:
            draft: Note content without id/created_at

        Returns:
            ID assigned by the store

        Raises:
            GatewayError: If the write fails
        """
        pass

    @abstractmethod
    async def get(self, note_id: str) -> StandardNote | ComplaintNote | None:
        """
        Retrieve a note by ID.

        Args:
            note_id: Note identifier

        Returns:
            Note or None if not found
        """
        pass

    @abstractmethod
    async def update(
        self, note_id: str, fields: dict[str, Any], owner_id: str | None = None
    ) -> None:
        """
        Overwrite the given fields of a note.

        Args:
            note_id: Note identifier
            fields: Domain field name -> new value (text, status, assigned_to, work_updates)
            owner_id: When given, only a note owned by this user is updated

        Raises:
            NotFoundError: If no row matched
            GatewayError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, note_id: str, owner_id: str) -> None:
        """
        Delete a note owned by ``owner_id``.

        Raises:
            NotFoundError: If no row matched
            GatewayError: If the write fails
        """
        pass

    @abstractmethod
    async def query_all(self) -> list[StandardNote | ComplaintNote]:
        """
        Return every note, newest first.

        Raises:
            GatewayError: If the query fails
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # CHANGE NOTIFICATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """
        Register for insert/update/delete notifications across all notes.

        Args:
            callback: Invoked with a ChangeEvent; consumers must re-query

        Returns:
            Subscription handle
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # USER DIRECTORY
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def fetch_user_directory(self) -> list[User]:
        """Return all known users for assignment choices."""
        pass

    @abstractmethod
    async def upsert_user(self, user: User) -> None:
        """Add or refresh a directory entry (called on sign-up/sign-in)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connections."""
        pass
