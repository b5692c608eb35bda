"""Shared fixtures for VoiceLog tests.

Fixtures use function scope to avoid event loop issues.
Store-backed fixtures use a fresh SQLite file per test under tmp_path, so no
external services are needed.
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from voicelog.core.persistence.base import NoteGateway
from voicelog.core.persistence.sqlite_store import SQLiteNoteGateway
from voicelog.models import Category, ComplaintNote, IssueStatus, StandardNote, WorkUpdate
from voicelog.services import NoteWorkflowEngine, SessionManager

BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
async def sqlite_gateway(tmp_path) -> AsyncGenerator:
    """Initialized SQLite gateway backed by a temporary file."""
    gateway = SQLiteNoteGateway(db_path=str(tmp_path / "voicelog_test.db"))
    await gateway.initialize()
    try:
        yield gateway
    finally:
        await gateway.close()


@pytest.fixture
async def engine(sqlite_gateway) -> NoteWorkflowEngine:
    """Engine over a real SQLite gateway, without session enforcement."""
    return NoteWorkflowEngine(gateway=sqlite_gateway)


@pytest.fixture
def mock_gateway() -> MagicMock:
    """Gateway double; its async methods are AsyncMocks."""
    return MagicMock(spec=NoteGateway)


@pytest.fixture
def mock_engine(mock_gateway) -> NoteWorkflowEngine:
    """Engine over the gateway double."""
    return NoteWorkflowEngine(gateway=mock_gateway)


@pytest.fixture
def sessions() -> SessionManager:
    return SessionManager()


@pytest.fixture
def complaint_note() -> ComplaintNote:
    """An open complaint owned by u1."""
    return ComplaintNote(
        id="note_complaint1",
        text="Printer is broken",
        owner_id="u1",
        owner_email="u1@x.com",
        created_at=BASE_TIME,
    )


@pytest.fixture
def standard_note() -> StandardNote:
    """An improvement idea owned by u1."""
    return StandardNote(
        id="note_idea1",
        text="Cache the dashboard query",
        category=Category.IMPROVEMENT_IDEA,
        owner_id="u1",
        owner_email="u1@x.com",
        created_at=BASE_TIME,
    )


@pytest.fixture
def sample_notes() -> list[StandardNote | ComplaintNote]:
    """Ten notes across all four categories, newest first."""
    specs = [
        (Category.IMPROVEMENT_IDEA, "Improve PERFORMANCE of the search page", None),
        (Category.WORK_UPDATE, "Finished the performance review deck", None),
        (Category.IMPROVEMENT_IDEA, "Add dark mode to the app", None),
        (Category.CUSTOMER_COMPLAINT, "Checkout is slow", "performance-team@x.com"),
        (Category.NEW_LEARNING, "Learned about performance budgets", None),
        (Category.IMPROVEMENT_IDEA, "Batch database writes for performance", None),
        (Category.CUSTOMER_COMPLAINT, "Invoice had the wrong address", "billing@x.com"),
        (Category.WORK_UPDATE, "Deployed release 2.3", None),
        (Category.IMPROVEMENT_IDEA, "Rename the settings menu", None),
        (Category.NEW_LEARNING, "Read the asyncio docs", None),
    ]
    notes = []
    for i, (category, text, assignee) in enumerate(specs):
        common = {
            "id": f"note_{i:03d}",
            "text": text,
            "owner_id": "u1" if i % 2 == 0 else "u2",
            "owner_email": "u1@x.com" if i % 2 == 0 else "u2@x.com",
            "created_at": BASE_TIME - timedelta(hours=i),
        }
        if category == Category.CUSTOMER_COMPLAINT:
            notes.append(
                ComplaintNote(
                    **common,
                    status=IssueStatus.IN_PROGRESS,
                    assigned_to=assignee,
                    work_updates=[WorkUpdate(text="Looking into it", author_email="u3@x.com")],
                )
            )
        else:
            notes.append(StandardNote(**common, category=category))
    return notes
