import datetime
import json
from typing import Callable

from pytest import mark, raises

from texnote import (
    ImportShapeInvalid,
    NoteRecord,
    export_snapshot,
    parse_snapshot,
    seed_notes,
    snapshot_filename,
)


def test_export(notes: tuple[NoteRecord, ...]):
    snapshot = export_snapshot(notes)

    # pretty-printed with wire field names
    assert snapshot.startswith("[\n  {")
    data = json.loads(snapshot)
    assert data[1] == {
        "id": "b",
        "parentId": "a",
        "title": "Note b",
        "content": "",
        "createdAt": 2000,
        "updatedAt": 2000,
        "isExpanded": False,
    }

    assert parse_snapshot(snapshot) == notes


def test_export_unicode():
    notes = seed_notes(now=1000)
    snapshot = export_snapshot(notes)

    # formulas and non-ascii text kept verbatim
    assert "Schrödinger" in snapshot
    assert parse_snapshot(snapshot) == notes
    assert parse_snapshot(snapshot.encode()) == notes


def test_unknown_fields(make_note: Callable[..., NoteRecord]):
    """
    Fields not known to this version survive a round trip.
    """
    text = json.dumps(
        [
            {
                "id": "x",
                "parentId": None,
                "title": "Tagged",
                "content": "",
                "createdAt": 1,
                "updatedAt": 2,
                "isExpanded": True,
                "tags": ["physics"],
            }
        ]
    )

    records = parse_snapshot(text)
    assert records[0].title == "Tagged"
    assert json.loads(export_snapshot(records))[0]["tags"] == ["physics"]


@mark.parametrize(
    "text",
    [
        '{"foo": 1}',
        "[]",
        "not json",
        '[{"title": "no id"}]',
        '[{"id": ""}]',
        '[{"id": "a"}]',
        '["a"]',
    ],
)
def test_parse_invalid(text: str):
    with raises(ImportShapeInvalid):
        parse_snapshot(text)


def test_snapshot_filename():
    assert (
        snapshot_filename(datetime.date(2024, 3, 9))
        == "texnote-backup-2024-03-09.json"
    )
    assert snapshot_filename().startswith("texnote-backup-")


def test_parse_not_utf8():
    with raises(ImportShapeInvalid):
        parse_snapshot(b"\xff\xfe not json")
