"""
Note records as stored in the flat collection, and their materialized tree
form.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

__all__ = [
    "NoteRecord",
    "NoteTreeItem",
    "UPDATABLE_FIELDS",
    "READONLY_FIELDS",
    "records_from_json",
    "records_to_json",
]

UPDATABLE_FIELDS = frozenset(["title", "content", "parent_id", "is_expanded"])
"""
Fields which may be changed by an update.
"""

READONLY_FIELDS = frozenset(["id", "created_at", "updated_at"])
"""
Fields which are fixed at creation or maintained automatically.
"""


class NoteRecord(BaseModel):
    """
    Flat, persisted unit of the note collection. Serialized with camelCase
    keys, e.g. `parentId`, `createdAt`.

    Records are immutable: changes are made by creating a new record with
    {obj}`BaseModel.model_copy`. Unknown keys are kept so that a round trip
    through export/import is lossless.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    id: str
    """Unique identifier, immutable after creation"""

    parent_id: str | None = None
    """Identifier of parent note, or `None` for a root note"""

    title: str = ""
    content: str = ""

    created_at: int
    """Creation time in epoch milliseconds"""

    updated_at: int
    """Last modification time in epoch milliseconds"""

    is_expanded: bool = False
    """UI state: whether children are shown in the sidebar"""

    @property
    def str_short(self) -> str:
        title = self.title.replace("'", "\\'") if self.title else "untitled"
        return f"Note('{title}', id='{self.id}')"

    def to_json_dict(self) -> dict[str, Any]:
        """
        Get dict using wire field names.
        """
        return self.model_dump(by_alias=True, mode="json")


class NoteTreeItem(NoteRecord):
    """
    Note record annotated with its position in the materialized tree. Never
    persisted; rebuilt whenever the collection changes.
    """

    depth: int = 0
    """Distance from root, where roots have depth 0"""

    children: list[NoteTreeItem] = Field(default_factory=list)
    """Children sorted by creation time, newest first"""

    @classmethod
    def from_record(cls, record: NoteRecord, depth: int) -> NoteTreeItem:
        return cls(**{**record.model_dump(), "depth": depth, "children": []})

    def to_record(self) -> NoteRecord:
        """
        Strip tree annotations.
        """
        return NoteRecord(**self.model_dump(exclude={"depth", "children"}))


_records_adapter = TypeAdapter(list[NoteRecord])


def records_from_json(data: Any) -> list[NoteRecord]:
    """
    Validate decoded JSON as a list of note records.

    :raises pydantic.ValidationError: If not a list of note-shaped objects
    """
    return _records_adapter.validate_python(data)


def records_to_json(records: Any) -> list[dict[str, Any]]:
    """
    Convert records to a JSON-compatible list using wire field names.
    """
    return [record.to_json_dict() for record in records]
