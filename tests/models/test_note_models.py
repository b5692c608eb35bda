"""
Tests for VoiceLog note models.

Test Organization:
1. Enums: Category, IssueStatus
2. Note variants and the discriminated union
3. Complaint workflow transitions
4. NotePatch partial-update semantics
5. Users, events and audio clips
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from voicelog.models import (
    AudioClip,
    Category,
    ChangeEvent,
    ChangeType,
    ComplaintNote,
    IssueStatus,
    NotePatch,
    StandardNote,
    User,
    WorkUpdate,
    normalize_mime_type,
    parse_note,
)


class TestEnums:
    """Tests for category and status enums."""

    def test_category_values_match_persisted_labels(self):
        assert Category.WORK_UPDATE.value == "Work Update"
        assert Category.IMPROVEMENT_IDEA.value == "Improvement Idea"
        assert Category.NEW_LEARNING.value == "New Learning"
        assert Category.CUSTOMER_COMPLAINT.value == "Customer Complaints"

    def test_only_complaints_have_workflow(self):
        assert Category.CUSTOMER_COMPLAINT.has_workflow
        assert not Category.WORK_UPDATE.has_workflow
        assert not Category.IMPROVEMENT_IDEA.has_workflow
        assert not Category.NEW_LEARNING.has_workflow

    def test_status_values(self):
        assert IssueStatus("Not Started") == IssueStatus.NOT_STARTED
        assert IssueStatus("In Progress") == IssueStatus.IN_PROGRESS
        assert IssueStatus("Completed") == IssueStatus.COMPLETED


class TestNoteVariants:
    """Tests for the tagged union over category."""

    def test_parse_standard_note(self):
        note = parse_note(
            {"id": "note_1", "text": "Learned pytest", "category": "New Learning", "owner_id": "u1"}
        )

        assert isinstance(note, StandardNote)
        assert note.category == Category.NEW_LEARNING
        assert not hasattr(note, "status")

    def test_parse_complaint_note_defaults(self):
        note = parse_note(
            {"id": "note_2", "text": "Late delivery", "category": "Customer Complaints", "owner_id": "u1"}
        )

        assert isinstance(note, ComplaintNote)
        assert note.status == IssueStatus.NOT_STARTED
        assert note.work_updates == []
        assert note.assigned_to is None

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            parse_note({"id": "n", "text": "x", "category": "Gossip", "owner_id": "u1"})

    def test_standard_note_cannot_be_complaint(self):
        with pytest.raises(ValidationError):
            StandardNote(id="n", text="x", owner_id="u1", category=Category.CUSTOMER_COMPLAINT)

    def test_is_owned_by(self, standard_note):
        assert standard_note.is_owned_by("u1")
        assert not standard_note.is_owned_by("u2")
        assert not standard_note.is_owned_by(None)


class TestComplaintWorkflow:
    """Tests for the complaint status state machine."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_work_update_rejected(self, text):
        with pytest.raises(ValidationError):
            WorkUpdate(text=text, author_email="u2@x.com")

    def test_first_update_starts_progress(self, complaint_note):
        update = WorkUpdate(text="Ordered part", author_email="u2@x.com")

        updated = complaint_note.with_work_update(update)

        assert updated.status == IssueStatus.IN_PROGRESS
        assert updated.work_updates == [update]
        # Original is untouched
        assert complaint_note.status == IssueStatus.NOT_STARTED
        assert complaint_note.work_updates == []

    def test_update_while_in_progress_keeps_status(self, complaint_note):
        first = complaint_note.with_work_update(WorkUpdate(text="a", author_email="x"))
        second = first.with_work_update(WorkUpdate(text="b", author_email="y"))

        assert second.status == IssueStatus.IN_PROGRESS
        assert [u.text for u in second.work_updates] == ["a", "b"]

    def test_update_after_close_does_not_reopen(self, complaint_note):
        closed = complaint_note.closed()
        updated = closed.with_work_update(WorkUpdate(text="Follow-up", author_email="u3@x.com"))

        assert updated.status == IssueStatus.COMPLETED
        assert len(updated.work_updates) == 1

    def test_close_is_idempotent(self, complaint_note):
        once = complaint_note.closed()
        twice = once.closed()

        assert once.status == IssueStatus.COMPLETED
        assert twice.status == IssueStatus.COMPLETED
        assert twice.is_closed

    def test_identical_timestamps_keep_insertion_order(self, complaint_note):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        note = complaint_note
        for text in ["first", "second", "third"]:
            note = note.with_work_update(WorkUpdate(text=text, timestamp=ts, author_email="a"))

        assert [u.text for u in note.work_updates] == ["first", "second", "third"]


class TestNotePatch:
    """Tests for partial-update semantics."""

    def test_only_text_supplied(self):
        patch = NotePatch(text="new text")

        assert patch.supplied_fields() == {"text": "new text"}
        assert not patch.touches_workflow

    def test_explicit_none_is_supplied(self):
        patch = NotePatch(text="new text", assigned_to=None)

        assert patch.supplied_fields() == {"text": "new text", "assigned_to": None}
        assert patch.touches_workflow

    def test_text_is_required(self):
        with pytest.raises(ValidationError):
            NotePatch(status=IssueStatus.COMPLETED)


class TestSupportingModels:
    """Tests for users, change events and audio clips."""

    def test_user_label_falls_back_to_email(self):
        assert User(id="u1", email="a@x.com").label == "a@x.com"
        assert User(id="u1", email="a@x.com", display_name="Ann").label == "Ann"

    def test_change_event_timestamp(self):
        event = ChangeEvent(type=ChangeType.DELETE, note_id="note_1")

        assert event.occurred_at.tzinfo is not None
        assert event.type.value == "DELETE"

    def test_audio_clip_format_detection(self):
        clip = AudioClip(data=b"abc", mime_type="audio/webm;codecs=opus")

        assert clip.is_supported
        assert clip.filename == "recording.webm"
        assert not clip.is_empty

    def test_audio_clip_unsupported(self):
        clip = AudioClip(data=b"", mime_type="video/avi")

        assert not clip.is_supported
        assert clip.filename == "recording.bin"
        assert clip.is_empty

    def test_normalize_mime_type(self):
        assert normalize_mime_type(" Audio/WAV ; rate=16000") == "audio/wav"
