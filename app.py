"""
VoiceLog FastAPI Application

A REST API server for the VoiceLog note workflow engine.
Provides endpoints for capturing, editing, annotating, closing and deleting notes.

Caller identity is read from the X-User-Id / X-User-Email headers set by the
authentication layer in front of this service. Requests without them may read
but not write.
"""

from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from voicelog.config import Config
from voicelog.core.factory import GatewayFactory, TranscriberFactory
from voicelog.models import (
    AudioClip,
    Category,
    ComplaintNote,
    IssueStatus,
    NotePatch,
    Session,
    User,
    WorkUpdate,
)
from voicelog.services import NoteWorkflowEngine, count_by_category, notes_owned_by
from voicelog.utils.exceptions import (
    ConfigurationError,
    GatewayError,
    NotAuthenticatedError,
    NotAuthorizedError,
    NotFoundError,
    TranscriptionError,
    UnsupportedFormatError,
    ValidationError,
    VoiceLogError,
)
from voicelog.utils.logger import get_logger, setup_logging

# Global engine instance
engine: NoteWorkflowEngine | None = None
logger = get_logger(__name__)

# Users already written to the directory by this process
_known_users: set[str] = set()


# Pydantic models for API
class WorkUpdateModel(BaseModel):
    """Work update as exchanged with clients."""

    text: str
    timestamp: datetime
    author_email: str


class NoteResponse(BaseModel):
    """Note returned to clients."""

    id: str
    text: str
    category: Category
    owner_id: str
    owner_email: str
    created_at: datetime
    updated_at: datetime | None = None
    status: IssueStatus | None = None
    assigned_to: str | None = None
    work_updates: list[WorkUpdateModel] | None = None


class CreateNoteRequest(BaseModel):
    """Request model for creating a note."""

    text: str = Field(..., description="Note text")
    category: Category
    assigned_to: str | None = Field(default=None, description="Assignee (complaints only)")


class EditNoteRequest(BaseModel):
    """Request model for editing a note. Omitted fields are left unchanged."""

    text: str
    work_updates: list[WorkUpdate] | None = None
    status: IssueStatus | None = None
    assigned_to: str | None = None


class AddWorkUpdateRequest(BaseModel):
    """Request model for appending a work update."""

    text: str


class TranscriptionResponse(BaseModel):
    """Response model for a transcription."""

    text: str


class UserResponse(BaseModel):
    """User directory entry."""

    id: str
    email: str
    display_name: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    engine_initialized: bool
    transcription_enabled: bool
    note_counts: dict[str, int] | None = None


def to_response(note) -> NoteResponse:
    """Convert a note variant to the flat API shape."""
    data = {
        "id": note.id,
        "text": note.text,
        "category": note.category,
        "owner_id": note.owner_id,
        "owner_email": note.owner_email,
        "created_at": note.created_at,
        "updated_at": note.updated_at,
    }
    if isinstance(note, ComplaintNote):
        data["status"] = note.status
        data["assigned_to"] = note.assigned_to
        data["work_updates"] = [
            WorkUpdateModel(text=u.text, timestamp=u.timestamp, author_email=u.author_email)
            for u in note.work_updates
        ]
    return NoteResponse(**data)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global engine

    config = Config.from_env()

    setup_logging(
        level=config.logging.level,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir,
        file_rotation=config.logging.file_rotation,
        file_retention=config.logging.file_retention,
        compression=config.logging.compression,
        serialize=config.logging.serialize,
    )

    logger.info("Starting VoiceLog server")
    logger.info(
        f"Configuration: Persistence={config.persistence.backend}:{config.persistence.db_path}, "
        f"Transcription={config.transcription.provider}/{config.transcription.model}"
    )

    gateway = GatewayFactory.create(config.persistence)

    try:
        transcriber = TranscriberFactory.create(config.transcription)
    except ConfigurationError as e:
        logger.warning(f"Transcription disabled: {e}")
        transcriber = None

    engine = NoteWorkflowEngine(gateway=gateway, transcriber=transcriber)
    await engine.initialize()
    logger.info("VoiceLog engine initialized")

    yield

    logger.info("Shutting down VoiceLog server")
    await engine.close()
    engine = None
    _known_users.clear()
    logger.info("Cleanup complete")


app = FastAPI(
    title="VoiceLog API",
    description="Voice notes with a customer complaint follow-up workflow",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error mapping
_STATUS_BY_ERROR: list[tuple[type[VoiceLogError], int]] = [
    (UnsupportedFormatError, 415),
    (TranscriptionError, 422),
    (ValidationError, 422),
    (NotAuthenticatedError, 401),
    (NotAuthorizedError, 403),
    (NotFoundError, 404),
    (GatewayError, 502),
    (ConfigurationError, 503),
]


@app.exception_handler(VoiceLogError)
async def voicelog_error_handler(request: Request, exc: VoiceLogError):
    """Translate engine errors into HTTP responses."""
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR if isinstance(exc, error_type)), 500
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


def get_engine() -> NoteWorkflowEngine:
    if not engine:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


def optional_session(
    x_user_id: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None),
) -> Session | None:
    if not x_user_id:
        return None
    return Session(user_id=x_user_id, email=x_user_email or "")


async def require_session(
    session: Session | None = Depends(optional_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
) -> Session:
    if session is None:
        raise NotAuthenticatedError("You must be signed in to do that")
    if session.user_id not in _known_users:
        await engine.register_user(User(id=session.user_id, email=session.email))
        _known_users.add(session.user_id)
    return session


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    if not engine:
        return HealthResponse(
            status="initializing", engine_initialized=False, transcription_enabled=False
        )

    try:
        notes = await engine.list_notes()
    except GatewayError as e:
        logger.warning(f"Health check could not read notes: {e.message}")
        return HealthResponse(
            status="degraded",
            engine_initialized=True,
            transcription_enabled=engine.transcriber is not None,
        )

    counts = {category.value: n for category, n in count_by_category(notes).items()}
    return HealthResponse(
        status="healthy",
        engine_initialized=True,
        transcription_enabled=engine.transcriber is not None,
        note_counts=counts,
    )


# Note endpoints
@app.get("/notes", response_model=list[NoteResponse])
async def list_notes(
    category: Category | None = Query(default=None),
    search: str | None = Query(default=None),
    mine: bool = Query(default=False),
    session: Session | None = Depends(optional_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
):
    """
    List notes newest first.

    Filters by exact category, case-insensitive search over text and assignee,
    and optionally only the caller's own notes.
    """
    notes = await engine.list_notes()
    if mine:
        if session is None:
            raise NotAuthenticatedError("You must be signed in to list your notes")
        notes = notes_owned_by(notes, session.user_id)
    notes = engine.filter_notes(notes, category=category, search_term=search)
    return [to_response(note) for note in notes]


@app.post("/notes", response_model=NoteResponse, status_code=201)
async def create_note(
    request: CreateNoteRequest,
    session: Session = Depends(require_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
):
    """Create a note from (already transcribed) text."""
    note = await engine.create_note(
        request.text,
        request.category,
        owner_id=session.user_id,
        owner_email=session.email,
        assigned_to=request.assigned_to,
    )
    return to_response(note)


@app.post("/notes/capture", response_model=NoteResponse, status_code=201)
async def capture_note(
    request: Request,
    category: Category = Query(...),
    session: Session = Depends(require_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
):
    """Transcribe the raw audio body and store it as a new note."""
    clip = AudioClip(
        data=await request.body(),
        mime_type=request.headers.get("content-type", "audio/webm"),
    )
    note = await engine.capture_note(
        clip, category, owner_id=session.user_id, owner_email=session.email
    )
    return to_response(note)


@app.get("/notes/{note_id}", response_model=NoteResponse)
async def get_note(note_id: str, engine: NoteWorkflowEngine = Depends(get_engine)):
    """Retrieve a single note."""
    return to_response(await engine.get_note(note_id))


@app.patch("/notes/{note_id}", response_model=NoteResponse)
async def edit_note(
    note_id: str,
    request: EditNoteRequest,
    session: Session = Depends(require_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
):
    """
    Edit a note (owner only).

    Only fields present in the body are changed; send ``"assigned_to": null`` to
    clear the assignee.
    """
    values = {name: getattr(request, name) for name in request.model_fields_set}
    note = await engine.edit_note(note_id, NotePatch(**values), requester_id=session.user_id)
    return to_response(note)


@app.post("/notes/{note_id}/work-updates", response_model=NoteResponse)
async def add_work_update(
    note_id: str,
    request: AddWorkUpdateRequest,
    session: Session = Depends(require_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
):
    """Append a work update to a customer complaint (any signed-in user)."""
    note = await engine.append_work_update(note_id, request.text, author_email=session.email)
    return to_response(note)


@app.post("/notes/{note_id}/close", response_model=NoteResponse)
async def close_issue(
    note_id: str,
    session: Session = Depends(require_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
):
    """Mark a customer complaint Completed."""
    return to_response(await engine.close_issue(note_id))


@app.delete("/notes/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    session: Session = Depends(require_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
):
    """Delete a note (owner only)."""
    await engine.delete_note(note_id, requester_id=session.user_id)
    return Response(status_code=204)


# Directory and transcription endpoints
@app.get("/users", response_model=list[UserResponse])
async def list_users(engine: NoteWorkflowEngine = Depends(get_engine)):
    """User directory for assignment choices."""
    users = await engine.list_users()
    return [UserResponse(**user.model_dump()) for user in users]


@app.post("/transcriptions", response_model=TranscriptionResponse)
async def transcribe(
    request: Request,
    session: Session = Depends(require_session),
    engine: NoteWorkflowEngine = Depends(get_engine),
):
    """Transcribe the raw audio body; Content-Type gives the audio format."""
    clip = AudioClip(
        data=await request.body(),
        mime_type=request.headers.get("content-type", "audio/webm"),
    )
    return TranscriptionResponse(text=await engine.transcribe(clip))
