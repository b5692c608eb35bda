"""
ID generation utilities for VoiceLog.

Provides consistent ID generation for all entity types:
- Notes: note_xxx
- Subscriptions: sub_xxx
"""

from uuid import uuid4


def generate_note_id() -> str:
    """
    Generate unique Note ID.

    Returns:
        ID in format "note_xxx" where xxx is 12 hex characters
    """
    return f"note_{uuid4().hex[:12]}"


def generate_subscription_id() -> str:
    """
    Generate unique change-feed subscription ID.

    Returns:
        ID in format "sub_xxx" where xxx is 12 hex characters
    """
    return f"sub_{uuid4().hex[:12]}"
