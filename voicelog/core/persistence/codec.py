"""
Persisted representation of notes.

The store keeps the work-update trail in a single JSON text column. Encoding and
decoding must preserve order and all three fields of every entry.
"""

import json
from datetime import datetime
from typing import Any

from voicelog.models.note import Category, ComplaintNote, StandardNote, WorkUpdate, parse_note

# Domain field name -> column name
FIELD_COLUMNS: dict[str, str] = {
    "text": "content",
    "status": "status",
    "assigned_to": "assigned_to",
    "work_updates": "work_updates",
    "updated_at": "updated_at",
}


def encode_work_updates(updates: list[WorkUpdate] | None) -> str | None:
    """Encode a work-update trail as a JSON array (None stays None)."""
    if updates is None:
        return None
    return json.dumps(
        [
            {
                "text": update.text,
                "timestamp": update.timestamp.isoformat(),
                "userEmail": update.author_email,
            }
            for update in updates
        ]
    )


def decode_work_updates(raw: str | None) -> list[WorkUpdate]:
    """Decode a JSON array produced by encode_work_updates."""
    if not raw:
        return []
    return [
        WorkUpdate(
            text=item["text"],
            timestamp=datetime.fromisoformat(item["timestamp"]),
            author_email=item.get("userEmail", ""),
        )
        for item in json.loads(raw)
    ]


def encode_value(field: str, value: Any) -> Any:
    """Convert one domain value to its column representation."""
    if field == "work_updates":
        return encode_work_updates(value)
    if field == "updated_at":
        return value.isoformat() if value else None
    if hasattr(value, "value"):  # enums
        return value.value
    return value


def encode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Map a partial domain update to column values.

    Raises:
        KeyError: If a field has no column
    """
    return {FIELD_COLUMNS[name]: encode_value(name, value) for name, value in fields.items()}


def record_to_note(record: dict[str, Any]) -> StandardNote | ComplaintNote:
    """Convert a raw row (as a column dict) into the right note variant."""
    data: dict[str, Any] = {
        "id": record["id"],
        "text": record["content"],
        "category": record["category"],
        "owner_id": record["user_id"],
        "owner_email": record.get("user_email") or "",
        "created_at": datetime.fromisoformat(record["created_at"]),
        "updated_at": (
            datetime.fromisoformat(record["updated_at"]) if record.get("updated_at") else None
        ),
    }
    if record["category"] == Category.CUSTOMER_COMPLAINT.value:
        data["status"] = record.get("status") or "Not Started"
        data["assigned_to"] = record.get("assigned_to")
        data["work_updates"] = decode_work_updates(record.get("work_updates"))
    return parse_note(data)
