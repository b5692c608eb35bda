"""
In-memory note filtering.

Pure functions over an already-fetched note list; ordering of the input
(newest first, as returned by the store) is preserved.
"""

from collections.abc import Iterable

from voicelog.models.note import Category, ComplaintNote, StandardNote

AnyNote = StandardNote | ComplaintNote


def matches_search(note: AnyNote, search_term: str) -> bool:
    """Case-insensitive substring match against the note text and assignee."""
    term = search_term.lower()
    if term in note.text.lower():
        return True
    assigned_to = getattr(note, "assigned_to", None)
    return bool(assigned_to) and term in assigned_to.lower()


def filter_notes(
    notes: Iterable[AnyNote],
    category: Category | str | None = None,
    search_term: str | None = None,
) -> list[AnyNote]:
    """
    Filter notes by exact category and free-text search.

    Args:
        notes: Notes to filter
        category: Keep only this category (None keeps all)
        search_term: Keep notes whose text or assignee contains it (None/"" keeps all)

    Returns:
        Matching notes in input order
    """
    wanted = Category(category) if category is not None else None

    result = []
    for note in notes:
        if wanted is not None and note.category != wanted:
            continue
        if search_term and not matches_search(note, search_term):
            continue
        result.append(note)
    return result


def notes_owned_by(notes: Iterable[AnyNote], user_id: str) -> list[AnyNote]:
    """Notes created by the given user ("My Notes")."""
    return [note for note in notes if note.owner_id == user_id]


def count_by_category(notes: Iterable[AnyNote]) -> dict[Category, int]:
    """Count notes per category; every category is present, zero if empty."""
    counts = {category: 0 for category in Category}
    for note in notes:
        counts[note.category] += 1
    return counts
