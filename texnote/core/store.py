"""
In-memory note collection, the single source of truth for a session.
"""
from __future__ import annotations

from typing import Callable, Iterable

from .note import NoteRecord, NoteTreeItem
from .tree import materialize

__all__ = [
    "NoteStore",
]

Subscriber = Callable[[tuple[NoteRecord, ...]], None]


class NoteStore:
    """
    Ordered collection of note records. The collection is only ever replaced
    as a whole via {obj}`NoteStore.commit`, so readers always see the result
    of a complete operation.
    """

    _records: tuple[NoteRecord, ...]
    _version: int
    _subscribers: list[Subscriber]
    _tree: list[NoteTreeItem] | None
    _tree_version: int

    def __init__(self, records: Iterable[NoteRecord] = ()):
        self._records = tuple(records)
        self._version = 0
        self._subscribers = []
        self._tree = None
        self._tree_version = -1

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __contains__(self, note_id: object) -> bool:
        return any(r.id == note_id for r in self._records)

    @property
    def records(self) -> tuple[NoteRecord, ...]:
        return self._records

    @property
    def version(self) -> int:
        """
        Incremented on every commit.
        """
        return self._version

    @property
    def tree(self) -> list[NoteTreeItem]:
        """
        Materialized tree of the current collection, rebuilt only when the
        collection changed.
        """
        if self._tree is None or self._tree_version != self._version:
            self._tree = materialize(self._records)
            self._tree_version = self._version
        return self._tree

    def get(self, note_id: str | None) -> NoteRecord | None:
        if note_id is None:
            return None
        return next((r for r in self._records if r.id == note_id), None)

    def commit(self, records: Iterable[NoteRecord], *, notify: bool = True):
        """
        Replace the collection and notify subscribers.

        :param notify: Whether subscribers should be notified; not needed when
            the collection was just read from storage
        """
        self._records = tuple(records)
        self._version += 1

        if notify:
            for subscriber in self._subscribers:
                subscriber(self._records)

    def subscribe(self, subscriber: Subscriber):
        self._subscribers.append(subscriber)
