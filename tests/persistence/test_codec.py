"""
Tests for the persisted note representation.

Covers work-update JSON encoding, field-to-column mapping and row decoding.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from voicelog.core.persistence.codec import (
    decode_work_updates,
    encode_fields,
    encode_work_updates,
    record_to_note,
)
from voicelog.models import Category, ComplaintNote, IssueStatus, StandardNote, WorkUpdate


class TestWorkUpdateEncoding:
    """Tests for the JSON work-update column."""

    def test_round_trip_preserves_order_and_fields(self):
        start = datetime(2024, 3, 1, 8, 30, 15, 123456, tzinfo=timezone.utc)
        updates = [
            WorkUpdate(text=f"step {i}", timestamp=start + timedelta(minutes=i), author_email=f"u{i}@x.com")
            for i in range(5)
        ]
        # Two entries share a timestamp; order must still be kept
        updates.append(WorkUpdate(text="same time", timestamp=start, author_email="z@x.com"))

        decoded = decode_work_updates(encode_work_updates(updates))

        assert decoded == updates

    def test_encoded_shape(self):
        ts = datetime(2024, 3, 1, tzinfo=timezone.utc)
        raw = encode_work_updates([WorkUpdate(text="hi", timestamp=ts, author_email="a@x.com")])

        assert json.loads(raw) == [
            {"text": "hi", "timestamp": ts.isoformat(), "userEmail": "a@x.com"}
        ]

    def test_none_and_empty(self):
        assert encode_work_updates(None) is None
        assert encode_work_updates([]) == "[]"
        assert decode_work_updates(None) == []
        assert decode_work_updates("") == []
        assert decode_work_updates("[]") == []


class TestEncodeFields:
    """Tests for domain field -> column mapping."""

    def test_maps_names_and_values(self):
        columns = encode_fields(
            {"text": "edited", "status": IssueStatus.COMPLETED, "assigned_to": None}
        )

        assert columns == {"content": "edited", "status": "Completed", "assigned_to": None}

    def test_unknown_field_rejected(self):
        with pytest.raises(KeyError):
            encode_fields({"category": "Work Update"})


class TestRecordToNote:
    """Tests for row decoding into note variants."""

    def test_standard_record(self):
        note = record_to_note(
            {
                "id": "note_1",
                "content": "Shipped it",
                "category": "Work Update",
                "user_id": "u1",
                "user_email": "u1@x.com",
                "status": None,
                "assigned_to": None,
                "work_updates": None,
                "created_at": "2024-03-01T10:00:00+00:00",
                "updated_at": None,
            }
        )

        assert isinstance(note, StandardNote)
        assert note.category == Category.WORK_UPDATE
        assert note.owner_email == "u1@x.com"
        assert note.updated_at is None

    def test_complaint_record(self):
        trail = encode_work_updates([WorkUpdate(text="Called back", author_email="u2@x.com")])
        note = record_to_note(
            {
                "id": "note_2",
                "content": "Wrong invoice",
                "category": "Customer Complaints",
                "user_id": "u1",
                "user_email": None,
                "status": "In Progress",
                "assigned_to": "u2@x.com",
                "work_updates": trail,
                "created_at": "2024-03-01T10:00:00+00:00",
                "updated_at": "2024-03-02T10:00:00+00:00",
            }
        )

        assert isinstance(note, ComplaintNote)
        assert note.status == IssueStatus.IN_PROGRESS
        assert note.assigned_to == "u2@x.com"
        assert note.owner_email == ""
        assert [u.text for u in note.work_updates] == ["Called back"]

    def test_complaint_without_status_defaults_to_not_started(self):
        note = record_to_note(
            {
                "id": "note_3",
                "content": "Rude driver",
                "category": "Customer Complaints",
                "user_id": "u1",
                "created_at": "2024-03-01T10:00:00+00:00",
            }
        )

        assert note.status == IssueStatus.NOT_STARTED
        assert note.work_updates == []
