"""
Note models and the complaint workflow state machine.

A note is a tagged union over its category: only Customer Complaint notes carry
workflow fields (status, assignment, work-update trail), so a status on a plain
note cannot be represented.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class Category(str, Enum):
    """Fixed note classification. Values are the persisted labels."""

    WORK_UPDATE = "Work Update"
    IMPROVEMENT_IDEA = "Improvement Idea"
    NEW_LEARNING = "New Learning"
    CUSTOMER_COMPLAINT = "Customer Complaints"

    @property
    def has_workflow(self) -> bool:
        """True for categories that carry status/assignment/work updates."""
        return self is Category.CUSTOMER_COMPLAINT


class IssueStatus(str, Enum):
    """Workflow stage of a Customer Complaint note."""

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class WorkUpdate(BaseModel):
    """A single append-only annotation on a complaint note."""

    text: str = Field(..., description="Update content")
    timestamp: datetime = Field(default_factory=utc_now, description="Submission time")
    author_email: str = Field(..., description="Who added the update")

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Work update text cannot be empty")
        return v


class BaseNote(BaseModel):
    """Fields shared by every note variant."""

    id: str = Field(..., description="Unique note ID (note_xxx), assigned by the store")
    text: str = Field(..., description="Transcription or its later edits")
    owner_id: str = Field(..., description="Creating user's ID")
    owner_email: str = Field(default="", description="Display label for the creator")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last write timestamp")

    def is_owned_by(self, user_id: str | None) -> bool:
        """Check whether the given user created this note."""
        return user_id is not None and self.owner_id == user_id


class StandardNote(BaseNote):
    """Work Update, Improvement Idea and New Learning notes. No workflow fields."""

    category: Literal[
        Category.WORK_UPDATE,
        Category.IMPROVEMENT_IDEA,
        Category.NEW_LEARNING,
    ]


class ComplaintNote(BaseNote):
    """
    Customer Complaint note with its follow-up workflow.

    Status transitions:
    - appending a work update moves Not Started -> In Progress
    - closing moves any status -> Completed
    - nothing moves a note out of Completed
    """

    category: Literal[Category.CUSTOMER_COMPLAINT] = Category.CUSTOMER_COMPLAINT
    status: IssueStatus = Field(default=IssueStatus.NOT_STARTED)
    assigned_to: str | None = Field(default=None, description="Collaborator handling follow-up")
    work_updates: list[WorkUpdate] = Field(default_factory=list, description="Chronological trail")

    def with_work_update(self, update: WorkUpdate) -> "ComplaintNote":
        """Return a copy with the update appended and the status advanced."""
        status = self.status
        if status != IssueStatus.COMPLETED:
            status = IssueStatus.IN_PROGRESS
        return self.model_copy(
            update={"work_updates": [*self.work_updates, update], "status": status}
        )

    def closed(self) -> "ComplaintNote":
        """Return a copy marked Completed. Closing twice is harmless."""
        return self.model_copy(update={"status": IssueStatus.COMPLETED})

    @property
    def is_closed(self) -> bool:
        return self.status == IssueStatus.COMPLETED


Note = Annotated[Union[StandardNote, ComplaintNote], Field(discriminator="category")]

note_adapter: TypeAdapter = TypeAdapter(Note)


def parse_note(data: dict) -> StandardNote | ComplaintNote:
    """Build the right note variant from a plain dict."""
    return note_adapter.validate_python(data)


class NoteDraft(BaseModel):
    """A note that has not been stored yet (no id, no created_at)."""

    text: str
    category: Category
    owner_id: str
    owner_email: str = ""
    status: IssueStatus | None = None
    assigned_to: str | None = None
    work_updates: list[WorkUpdate] | None = None


class NotePatch(BaseModel):
    """
    Partial update for an edit.

    Only fields passed explicitly are applied, so ``NotePatch(text="x")`` leaves the
    assignment alone while ``NotePatch(text="x", assigned_to=None)`` clears it.
    """

    text: str
    work_updates: list[WorkUpdate] | None = None
    status: IssueStatus | None = None
    assigned_to: str | None = None

    def supplied_fields(self) -> dict:
        """Return only the fields the caller set, keyed by field name."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    @property
    def touches_workflow(self) -> bool:
        return bool(self.model_fields_set & {"work_updates", "status", "assigned_to"})
