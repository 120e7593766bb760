"""
Operations transforming the flat note collection.

Each operation takes the current collection and returns a new one, leaving
the input untouched. Operations validate before building the result, so a
failure never leaves a partial change behind. No I/O is performed here.
"""
from __future__ import annotations

from typing import Any, Sequence

from .exceptions import ReadOnlyError, ValidationError
from .note import READONLY_FIELDS, UPDATABLE_FIELDS, NoteRecord
from .tree import descendant_closure
from .utils import generate_id, timestamp

__all__ = [
    "create_note",
    "update_note",
    "delete_note",
    "toggle_expand",
    "find_note",
]

_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "title": (str,),
    "content": (str,),
    "parent_id": (str, type(None)),
    "is_expanded": (bool,),
}


def find_note(records: Sequence[NoteRecord], note_id: str) -> NoteRecord | None:
    return next((r for r in records if r.id == note_id), None)


def create_note(
    records: Sequence[NoteRecord],
    parent_id: str | None = None,
    *,
    note_id: str | None = None,
    now: int | None = None,
) -> tuple[tuple[NoteRecord, ...], str]:
    """
    Create an empty note at the head of the collection and return the new
    collection along with the new note's id.

    If a parent is given it's expanded in the same step so the new note is
    visible.

    :param parent_id: Parent note, or `None` to create a root note
    :param note_id: Explicit id, generated if not provided
    :param now: Creation timestamp, current time if not provided
    """
    if parent_id is not None and find_note(records, parent_id) is None:
        raise ValidationError([f"Parent note does not exist: '{parent_id}'"])

    note_id = note_id or generate_id()
    if find_note(records, note_id) is not None:
        raise ValidationError([f"Note id already exists: '{note_id}'"])

    now = now if now is not None else timestamp()

    note = NoteRecord(
        id=note_id,
        parent_id=parent_id,
        title="",
        content="",
        created_at=now,
        updated_at=now,
        is_expanded=True,
    )

    rest = tuple(records)
    if parent_id is not None:
        rest = tuple(
            r.model_copy(update={"is_expanded": True})
            if r.id == parent_id and not r.is_expanded
            else r
            for r in rest
        )

    return (note,) + rest, note_id


def update_note(
    records: Sequence[NoteRecord],
    note_id: str,
    *,
    now: int | None = None,
    **fields: Any,
) -> tuple[NoteRecord, ...]:
    """
    Merge field values into the note with the given id, bumping its update
    time. No-op if there is no such note.

    :param fields: Any of `title`, `content`, `parent_id`, `is_expanded`
    :raises ReadOnlyError: If `id`, `created_at` or `updated_at` is passed
    :raises ValidationError: If a field is unknown, has the wrong type, or
        the new parent would dangle or form a cycle
    """
    for field in fields:
        if field in READONLY_FIELDS:
            raise ReadOnlyError(field, note_id)

    note = find_note(records, note_id)
    if note is None:
        return tuple(records)

    errors: list[str] = []

    for field, value in fields.items():
        if field not in UPDATABLE_FIELDS:
            errors.append(f"Unknown field '{field}'")
        elif not isinstance(value, _FIELD_TYPES[field]):
            errors.append(
                f"Field '{field}' expects {' or '.join(t.__name__ for t in _FIELD_TYPES[field])}, got {type(value).__name__}"
            )

    parent_id = fields.get("parent_id", note.parent_id)
    if "parent_id" in fields and parent_id is not None and not errors:
        if find_note(records, parent_id) is None:
            errors.append(f"Parent note does not exist: '{parent_id}'")
        elif parent_id in descendant_closure(records, note_id):
            errors.append(
                f"Cannot move {note.str_short} under '{parent_id}', would create a cycle"
            )

    if errors:
        raise ValidationError(errors)

    now = now if now is not None else timestamp()
    updated = note.model_copy(
        update={**fields, "updated_at": max(now, note.updated_at + 1)}
    )

    return tuple(updated if r.id == note_id else r for r in records)


def delete_note(
    records: Sequence[NoteRecord], note_id: str
) -> tuple[tuple[NoteRecord, ...], set[str]]:
    """
    Delete a note along with all of its descendants, returning the new
    collection and the ids which were removed from it.
    """
    closure = descendant_closure(records, note_id)

    kept = tuple(r for r in records if r.id not in closure)
    removed = {r.id for r in records if r.id in closure}

    return kept, removed


def toggle_expand(
    records: Sequence[NoteRecord], note_id: str
) -> tuple[NoteRecord, ...]:
    """
    Flip expanded state of a note. Doesn't count as a content change, so its
    update time is kept.
    """
    return tuple(
        r.model_copy(update={"is_expanded": not r.is_expanded})
        if r.id == note_id
        else r
        for r in records
    )
