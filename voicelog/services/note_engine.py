"""
Note Workflow Engine - create, edit, annotate and close notes.

The engine is a thin orchestrator: it validates input, checks ownership and
category rules, then makes exactly one write to the persistence gateway. It keeps
no note state of its own and never retries; every failure propagates to the caller.
"""

from collections.abc import Awaitable
from typing import TypeVar

from voicelog.core.persistence.base import NoteGateway
from voicelog.core.transcription.base import Transcriber
from voicelog.models.audio import AudioClip
from voicelog.models.note import (
    Category,
    ComplaintNote,
    IssueStatus,
    NoteDraft,
    NotePatch,
    StandardNote,
    WorkUpdate,
)
from voicelog.models.user import Session, User
from voicelog.services import filtering
from voicelog.services.auth import SessionManager
from voicelog.utils.exceptions import (
    CategoryMismatchError,
    ConfigurationError,
    GatewayError,
    NotAuthorizedError,
    NotFoundError,
    TranscriptionError,
    TranscriptionServiceError,
    ValidationError,
    VoiceLogError,
)
from voicelog.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
AnyNote = StandardNote | ComplaintNote


class NoteWorkflowEngine:
    """
    Public contract for note surfaces.

    Operations:
    - create_note / capture_note: new notes (optionally from audio)
    - edit_note: owner-only partial update
    - append_work_update / close_issue: complaint workflow, open to any signed-in user
    - delete_note: owner-only
    - get_note / list_notes / list_users / filter_notes: reads
    """

    def __init__(
        self,
        gateway: NoteGateway,
        transcriber: Transcriber | None = None,
        sessions: SessionManager | None = None,
    ):
        """
        Initialize the engine.

        Args:
            gateway: Persistence gateway (source of truth)
            transcriber: Optional speech-to-text provider
            sessions: Optional session manager; when given, mutations need a session
        """
        self.gateway = gateway
        self.transcriber = transcriber
        self.sessions = sessions

        if sessions is not None:
            sessions.add_listener(self._on_session_change)

    async def initialize(self) -> None:
        """Initialize the persistence gateway."""
        logger.info("Initializing note workflow engine")
        await self.gateway.initialize()
        logger.info("Note workflow engine ready")

    async def close(self) -> None:
        """Release gateway and transcriber resources."""
        if self.sessions is not None:
            self.sessions.remove_listener(self._on_session_change)
        await self.gateway.close()
        if self.transcriber is not None:
            await self.transcriber.close()

    # ═══════════════════════════════════════════════════════════
    # WRITES
    # ═══════════════════════════════════════════════════════════

    async def create_note(
        self,
        text: str,
        category: Category | str,
        owner_id: str,
        owner_email: str = "",
        assigned_to: str | None = None,
    ) -> AnyNote:
        """
        Create a note.

        Args:
            text: Note content (must not be blank)
            category: Note category
            owner_id: Creating user's ID
            owner_email: Creating user's email
            assigned_to: Optional assignee (Customer Complaints only)

        Returns:
            The stored note

        Raises:
            ValidationError: If text is blank or the category is unknown
            CategoryMismatchError: If an assignee is given for a non-complaint note
            GatewayError: If the store write fails
        """
        self._require_session()
        self._require_text(text, "Note text")
        category = self._parse_category(category)

        if category.has_workflow:
            draft = NoteDraft(
                text=text,
                category=category,
                owner_id=owner_id,
                owner_email=owner_email,
                status=IssueStatus.NOT_STARTED,
                assigned_to=assigned_to,
                work_updates=[],
            )
        else:
            if assigned_to is not None:
                raise CategoryMismatchError(
                    f"Only {Category.CUSTOMER_COMPLAINT.value} notes can be assigned",
                    context={"category": category.value},
                )
            draft = NoteDraft(
                text=text, category=category, owner_id=owner_id, owner_email=owner_email
            )

        note_id = await self._gateway_call("create_note", self.gateway.insert(draft))
        note = await self.get_note(note_id)

        logger.info(
            f"Note created: {note_id}",
            extra={"operation": "create_note", "note_id": note_id, "category": category.value},
        )
        return note

    async def edit_note(self, note_id: str, patch: NotePatch, requester_id: str) -> AnyNote:
        """
        Apply an owner's edit.

        Only fields set on ``patch`` are written. A supplied work-update list must
        keep every existing entry, in order, as its prefix.

        Raises:
            ValidationError: If text is blank or the work-update trail would shrink
            NotAuthorizedError: If requester is not the owner
            CategoryMismatchError: If workflow fields are set on a non-complaint note
            NotFoundError: If the note doesn't exist
            GatewayError: If the store write fails
        """
        self._require_session()
        self._require_text(patch.text, "Note text")

        note = await self.get_note(note_id)
        self._require_owner(note, requester_id, "edit")

        if patch.touches_workflow and not isinstance(note, ComplaintNote):
            raise CategoryMismatchError(
                "Status, assignment and work updates only apply to customer complaints",
                context={"note_id": note_id, "category": note.category.value},
            )

        fields = patch.supplied_fields()
        if "status" in fields and fields["status"] is None:
            raise ValidationError("Status cannot be cleared", context={"note_id": note_id})
        if "work_updates" in fields:
            fields["work_updates"] = self._checked_trail(note, fields["work_updates"])

        await self._gateway_call(
            "edit_note", self.gateway.update(note_id, fields, owner_id=requester_id)
        )

        logger.info(
            f"Note edited: {note_id}",
            extra={"operation": "edit_note", "note_id": note_id, "fields": sorted(fields)},
        )
        return await self.get_note(note_id)

    async def append_work_update(
        self, note_id: str, update_text: str, author_email: str
    ) -> ComplaintNote:
        """
        Append a work update to a complaint and advance its status.

        Any signed-in user may add updates; no ownership check.

        Raises:
            ValidationError: If update text is blank
            CategoryMismatchError: If the note is not a customer complaint
            NotFoundError: If the note doesn't exist
            GatewayError: If the store write fails
        """
        self._require_session()
        self._require_text(update_text, "Work update text")

        note = await self._get_complaint(note_id, "append_work_update")
        updated = note.with_work_update(
            WorkUpdate(text=update_text.strip(), author_email=author_email)
        )

        await self._gateway_call(
            "append_work_update",
            self.gateway.update(
                note_id,
                {"work_updates": updated.work_updates, "status": updated.status},
            ),
        )

        logger.info(
            f"Work update added to {note_id}",
            extra={
                "operation": "append_work_update",
                "note_id": note_id,
                "status": updated.status.value,
                "work_updates": len(updated.work_updates),
            },
        )
        return await self.get_note(note_id)

    async def close_issue(self, note_id: str) -> ComplaintNote:
        """
        Mark a complaint Completed. Closing a closed issue succeeds without a write.

        Raises:
            CategoryMismatchError: If the note is not a customer complaint
            NotFoundError: If the note doesn't exist
            GatewayError: If the store write fails
        """
        self._require_session()

        note = await self._get_complaint(note_id, "close_issue")
        if note.is_closed:
            logger.debug(f"Issue already closed: {note_id}")
            return note

        await self._gateway_call(
            "close_issue", self.gateway.update(note_id, {"status": note.closed().status})
        )

        logger.info(f"Issue closed: {note_id}", extra={"operation": "close_issue", "note_id": note_id})
        return await self.get_note(note_id)

    async def delete_note(self, note_id: str, requester_id: str) -> None:
        """
        Delete a note owned by the requester.

        Raises:
            NotAuthorizedError: If requester is not the owner
            NotFoundError: If the note doesn't exist
            GatewayError: If the store write fails
        """
        self._require_session()

        note = await self.get_note(note_id)
        self._require_owner(note, requester_id, "delete")

        await self._gateway_call("delete_note", self.gateway.delete(note_id, requester_id))
        logger.info(f"Note deleted: {note_id}", extra={"operation": "delete_note", "note_id": note_id})

    async def register_user(self, user: User) -> None:
        """Add or refresh a user directory entry."""
        await self._gateway_call("register_user", self.gateway.upsert_user(user))

    # ═══════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════

    async def get_note(self, note_id: str) -> AnyNote:
        """
        Fetch a single note.

        Raises:
            NotFoundError: If the note doesn't exist
            GatewayError: If the query fails
        """
        note = await self._gateway_call("get_note", self.gateway.get(note_id))
        if note is None:
            raise NotFoundError(f"Note not found: {note_id}", context={"note_id": note_id})
        return note

    async def list_notes(self) -> list[AnyNote]:
        """All notes, newest first. Listing is not owner-scoped."""
        return await self._gateway_call("list_notes", self.gateway.query_all())

    async def list_users(self) -> list[User]:
        """User directory for assignment choices."""
        return await self._gateway_call("list_users", self.gateway.fetch_user_directory())

    @staticmethod
    def filter_notes(
        notes: list[AnyNote],
        category: Category | str | None = None,
        search_term: str | None = None,
    ) -> list[AnyNote]:
        """Filter by category and case-insensitive search over text and assignee."""
        return filtering.filter_notes(notes, category=category, search_term=search_term)

    # ═══════════════════════════════════════════════════════════
    # CAPTURE
    # ═══════════════════════════════════════════════════════════

    async def transcribe(self, clip: AudioClip) -> str:
        """
        Turn a recording into text.

        Raises:
            ConfigurationError: If no transcriber is configured
            TranscriptionError: NoSpeechDetected, UnsupportedFormat or service failure
        """
        if self.transcriber is None:
            raise ConfigurationError("No transcription provider configured")

        try:
            text = await self.transcriber.transcribe(clip.data, clip.mime_type)
        except TranscriptionError as e:
            logger.warning(
                f"Transcription failed: {e}",
                extra={"operation": "transcribe", "error_type": type(e).__name__},
            )
            raise
        except Exception as e:
            logger.error(f"Unexpected transcription error: {e}", extra={"operation": "transcribe"})
            raise TranscriptionServiceError(f"Unexpected transcription error: {e}") from e

        logger.info("Recording transcribed", extra={"operation": "transcribe", "chars": len(text)})
        return text

    async def capture_note(
        self,
        clip: AudioClip,
        category: Category | str,
        owner_id: str,
        owner_email: str = "",
        assigned_to: str | None = None,
    ) -> AnyNote:
        """Transcribe a recording and store the text as a new note."""
        self._require_session()
        text = await self.transcribe(clip)
        return await self.create_note(
            text, category, owner_id, owner_email=owner_email, assigned_to=assigned_to
        )

    # ═══════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════

    def _require_session(self) -> Session | None:
        if self.sessions is None:
            return None
        return self.sessions.require_session()

    @staticmethod
    def _require_text(text: str | None, label: str) -> None:
        if text is None or not text.strip():
            logger.warning(f"{label} rejected: empty")
            raise ValidationError(f"{label} cannot be empty")

    @staticmethod
    def _parse_category(category: Category | str) -> Category:
        try:
            return Category(category)
        except ValueError as e:
            raise ValidationError(f"Unknown category: {category}") from e

    @staticmethod
    def _require_owner(note: AnyNote, requester_id: str, action: str) -> None:
        if not note.is_owned_by(requester_id):
            logger.warning(
                f"Rejected {action} of {note.id} by non-owner",
                extra={"note_id": note.id, "requester_id": requester_id},
            )
            raise NotAuthorizedError(
                f"Only the owner can {action} this note",
                context={"note_id": note.id, "requester_id": requester_id},
            )

    async def _get_complaint(self, note_id: str, operation: str) -> ComplaintNote:
        note = await self.get_note(note_id)
        if not isinstance(note, ComplaintNote):
            raise CategoryMismatchError(
                f"{operation} only applies to customer complaints",
                context={"note_id": note_id, "category": note.category.value},
            )
        return note

    @staticmethod
    def _checked_trail(note: ComplaintNote, updates: list[WorkUpdate] | None) -> list[WorkUpdate]:
        """Validate a replacement work-update list against the stored one."""
        updates = list(updates or [])
        existing = note.work_updates
        if updates[: len(existing)] != existing:
            raise ValidationError(
                "Work updates are append-only; existing entries cannot be changed or removed",
                context={"note_id": note.id},
            )
        return updates

    async def _gateway_call(self, operation: str, call: Awaitable[T]) -> T:
        """Await a gateway call, wrapping unexpected failures in GatewayError."""
        try:
            return await call
        except VoiceLogError:
            raise
        except Exception as e:
            logger.error(
                f"Gateway failure during {operation}: {e}",
                extra={"operation": operation, "error": str(e), "error_type": type(e).__name__},
            )
            raise GatewayError(f"{operation} failed: {e}", context={"operation": operation}) from e

    async def _on_session_change(self, session: Session | None) -> None:
        if session is not None:
            await self.register_user(User(id=session.user_id, email=session.email))
