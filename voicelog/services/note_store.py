"""
Note Store - client-side read-through cache of the note collection.

The store is replaced wholesale from the gateway on every change notification
(eager mode) or on the first read after one (lazy mode). It never patches
individual notes, so between a write and its notification the cache may be stale.
"""

from typing import Literal

from voicelog.core.persistence.base import NoteGateway
from voicelog.core.persistence.change_feed import Subscription
from voicelog.models.events import ChangeEvent
from voicelog.models.note import ComplaintNote, StandardNote
from voicelog.models.user import Session, User
from voicelog.services.auth import SessionManager
from voicelog.utils.logger import get_logger

logger = get_logger(__name__)

AnyNote = StandardNote | ComplaintNote


class NoteStore:
    """
    Explicit note cache with a start/close lifecycle.

    Usage:
        store = NoteStore(gateway)
        store.bind(sessions)      # start on sign-in, tear down on sign-out
        notes = await store.get_notes()
    """

    def __init__(self, gateway: NoteGateway, refresh_mode: Literal["eager", "lazy"] = "eager"):
        """
        Initialize note store.

        Args:
            gateway: Persistence gateway to read from
            refresh_mode: "eager" re-fetches on every change, "lazy" on next read
        """
        if refresh_mode not in ("eager", "lazy"):
            raise ValueError(f"Unknown refresh mode: {refresh_mode}")

        self.gateway = gateway
        self.refresh_mode = refresh_mode

        self._notes: list[AnyNote] = []
        self._users: list[User] | None = None
        self._stale = True
        self._subscription: Subscription | None = None

    @property
    def started(self) -> bool:
        return self._subscription is not None

    @property
    def stale(self) -> bool:
        return self._stale

    @property
    def notes(self) -> list[AnyNote]:
        """Snapshot of the cached notes (may be stale in lazy mode)."""
        return list(self._notes)

    async def start(self) -> None:
        """Subscribe to change notifications and load the collection."""
        if self.started:
            return
        self._subscription = self.gateway.subscribe(self._on_change)
        logger.info("Note store started", extra={"refresh_mode": self.refresh_mode})
        await self.refresh()

    async def refresh(self) -> list[AnyNote]:
        """Replace the cache with the gateway's current notes."""
        notes = await self.gateway.query_all()
        self._notes = notes
        self._stale = False
        logger.debug(f"Note store refreshed: {len(notes)} notes")
        return list(notes)

    async def get_notes(self) -> list[AnyNote]:
        """Return cached notes, re-fetching first if a change arrived since the last load."""
        if self._stale:
            await self.refresh()
        return list(self._notes)

    async def get_note(self, note_id: str) -> AnyNote | None:
        """Find a note in the cache."""
        for note in await self.get_notes():
            if note.id == note_id:
                return note
        return None

    async def get_users(self, reload: bool = False) -> list[User]:
        """User directory, loaded once per store lifetime."""
        if self._users is None or reload:
            self._users = await self.gateway.fetch_user_directory()
        return list(self._users)

    async def close(self) -> None:
        """Unsubscribe and drop cached data."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._notes = []
        self._users = None
        self._stale = True
        logger.info("Note store closed")

    def bind(self, sessions: SessionManager) -> None:
        """Tie the store lifecycle to sign-in and sign-out."""
        sessions.add_listener(self._on_session_change)

    async def _on_change(self, event: ChangeEvent) -> None:
        self._stale = True
        logger.debug(
            f"Change received: {event.type.value} {event.note_id}",
            extra={"note_id": event.note_id, "change": event.type.value},
        )
        if self.refresh_mode == "eager":
            await self.refresh()

    async def _on_session_change(self, session: Session | None) -> None:
        if session is not None:
            await self.start()
        else:
            await self.close()
