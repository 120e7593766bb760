"""
Export and import of the whole note collection as a portable JSON document.
"""
from __future__ import annotations

import datetime
import json
from dataclasses import dataclass
from typing import Iterable

from pydantic import ValidationError as PydanticValidationError

from .exceptions import ImportShapeInvalid
from .note import NoteRecord, records_from_json, records_to_json

__all__ = [
    "ImportResult",
    "export_snapshot",
    "parse_snapshot",
    "snapshot_filename",
]

SNAPSHOT_PREFIX = "texnote-backup"


@dataclass(frozen=True, kw_only=True)
class ImportResult:
    """
    Outcome of importing a snapshot.
    """

    imported: bool
    """Whether the collection was replaced"""

    count: int = 0
    """Number of notes in the snapshot"""

    error: str | None = None
    """Reason the snapshot was rejected, if any"""


def export_snapshot(records: Iterable[NoteRecord]) -> str:
    """
    Serialize every record verbatim as a pretty-printed JSON array.
    """
    return json.dumps(records_to_json(records), indent=2, ensure_ascii=False)


def snapshot_filename(date: datetime.date | None = None) -> str:
    """
    Get filename for an export, stamped with the given date or today.
    """
    date = date or datetime.date.today()
    return f"{SNAPSHOT_PREFIX}-{date.isoformat()}.json"


def parse_snapshot(text: str | bytes) -> tuple[NoteRecord, ...]:
    """
    Decode a snapshot. Only the overall shape is checked up front: a
    non-empty array whose first element has an id.

    :raises ImportShapeInvalid: If the snapshot can't be used
    """
    try:
        data = json.loads(text)
    except (ValueError, UnicodeDecodeError) as e:
        raise ImportShapeInvalid(f"Failed to parse file: {e}") from e

    if not isinstance(data, list) or not len(data):
        raise ImportShapeInvalid(
            f"Invalid backup file: expected non-empty array, got {type(data).__name__}"
        )

    first = data[0]
    if not isinstance(first, dict) or not first.get("id"):
        raise ImportShapeInvalid("Invalid backup file: first note has no id")

    try:
        records = records_from_json(data)
    except PydanticValidationError as e:
        raise ImportShapeInvalid(f"Invalid backup file: {e}") from e

    return tuple(records)
