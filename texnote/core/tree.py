"""
Derivation of the note hierarchy from the flat collection.

Parent references are untrusted: a collection loaded from a backup or the
remote store may contain dangling parents, duplicated ids or cycles. Every
traversal here uses an explicit work list with a visited set so malformed
input stops expanding instead of recursing forever.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from logging import Logger
from typing import Iterable, Iterator, Sequence

from .exceptions import CyclicOrOrphanedHierarchy
from .note import NoteRecord, NoteTreeItem

__all__ = [
    "ChildIndex",
    "materialize",
    "descendant_closure",
    "walk",
    "find_hierarchy_problems",
    "check_hierarchy",
]


class ChildIndex:
    """
    Mapping of parent id to its child records, built once per collection.
    Children are ordered by creation time, newest first; ties keep their
    order in the collection.
    """

    _children: dict[str | None, list[NoteRecord]]

    def __init__(self, children: dict[str | None, list[NoteRecord]]):
        self._children = children

    @classmethod
    def build(cls, records: Iterable[NoteRecord]) -> ChildIndex:
        children: dict[str | None, list[NoteRecord]] = defaultdict(list)

        for record in records:
            children[record.parent_id].append(record)

        for siblings in children.values():
            siblings.sort(key=lambda r: r.created_at, reverse=True)

        return cls(dict(children))

    def children_of(self, parent_id: str | None) -> list[NoteRecord]:
        return self._children.get(parent_id, [])

    @property
    def roots(self) -> list[NoteRecord]:
        return self.children_of(None)


def materialize(
    records: Sequence[NoteRecord], *, logger: Logger | None = None
) -> list[NoteTreeItem]:
    """
    Build the navigable hierarchy from a flat collection, returning root items
    with children populated.

    Records not reachable from a root (dangling parent, or part of a cycle)
    are left out.
    """
    logger = logger or logging.getLogger()
    index = ChildIndex.build(records)

    roots: list[NoteTreeItem] = []
    visited: set[str] = set()

    # entries are (record, depth, list to append the new item to); pushed in
    # reverse so items pop in sorted order
    stack: list[tuple[NoteRecord, int, list[NoteTreeItem]]] = [
        (record, 0, roots) for record in reversed(index.roots)
    ]

    while stack:
        record, depth, siblings = stack.pop()

        if record.id in visited:
            logger.debug(f"Skipping already visited note: {record.str_short}")
            continue
        visited.add(record.id)

        item = NoteTreeItem.from_record(record, depth)
        siblings.append(item)

        for child in reversed(index.children_of(record.id)):
            stack.append((child, depth + 1, item.children))

    unreachable = len(records) - len(visited)
    if unreachable > 0:
        logger.debug(f"Excluded {unreachable} unreachable notes from tree")

    return roots


def descendant_closure(
    records: Sequence[NoteRecord] | ChildIndex, note_id: str
) -> set[str]:
    """
    Get ids of the given note and all its transitive children.
    """
    index = (
        records
        if isinstance(records, ChildIndex)
        else ChildIndex.build(records)
    )

    closure: set[str] = set()
    work: list[str] = [note_id]

    while work:
        current = work.pop()
        if current in closure:
            continue

        closure.add(current)
        work.extend(child.id for child in index.children_of(current))

    return closure


def walk(items: Iterable[NoteTreeItem]) -> Iterator[NoteTreeItem]:
    """
    Depth-first, pre-order traversal of materialized items.
    """
    stack = list(reversed(list(items)))

    while stack:
        item = stack.pop()
        yield item
        stack.extend(reversed(item.children))


def find_hierarchy_problems(records: Sequence[NoteRecord]) -> list[str]:
    """
    Describe duplicated ids, dangling parents and cycles in the collection.
    """
    problems: list[str] = []
    by_id: dict[str, NoteRecord] = {}

    for record in records:
        if record.id in by_id:
            problems.append(f"Duplicate id: {record.str_short}")
        else:
            by_id[record.id] = record

    for record in records:
        if record.parent_id is not None and record.parent_id not in by_id:
            problems.append(
                f"Dangling parent '{record.parent_id}': {record.str_short}"
            )

    # follow parent chains; a chain which revisits one of its own ids is a cycle
    done: set[str] = set()

    for start in by_id:
        path: list[str] = []
        position: dict[str, int] = {}
        current: str | None = start

        while current is not None and current in by_id and current not in done:
            if current in position:
                cycle = path[position[current] :]
                problems.append(f"Cycle: {' -> '.join(cycle + [current])}")
                break

            position[current] = len(path)
            path.append(current)
            current = by_id[current].parent_id

        done.update(path)

    return problems


def check_hierarchy(records: Sequence[NoteRecord]):
    """
    Raise if the collection has malformed parent references.

    :raises CyclicOrOrphanedHierarchy: With a list of problems found
    """
    problems = find_hierarchy_problems(records)
    if problems:
        raise CyclicOrOrphanedHierarchy(problems)
