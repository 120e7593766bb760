from typing import Callable

from pytest import mark, raises

from texnote import (
    NoteRecord,
    ReadOnlyError,
    ValidationError,
    create_note,
    delete_note,
    find_note,
    toggle_expand,
    update_note,
)


def test_create_root(notes: tuple[NoteRecord, ...]):
    records, note_id = create_note(notes, now=9000)

    assert len(records) == len(notes) + 1
    assert records[1:] == notes

    note = records[0]
    assert note.id == note_id
    assert note.parent_id is None
    assert note.title == ""
    assert note.content == ""
    assert note.created_at == note.updated_at == 9000
    assert note.is_expanded is True


def test_create_child(make_note: Callable[..., NoteRecord]):
    parent = make_note("p", is_expanded=False)
    records, note_id = create_note([parent], "p", note_id="c", now=2000)

    assert note_id == "c"
    assert [r.id for r in records] == ["c", "p"]

    child, parent_after = records
    assert child.parent_id == "p"

    # parent is expanded so the new note is visible, without counting as an
    # edit
    assert parent_after.is_expanded is True
    assert parent_after.updated_at == parent.updated_at


def test_create_generates_unique_ids():
    records: tuple[NoteRecord, ...] = ()
    for _ in range(50):
        records, _ = create_note(records)

    assert len({r.id for r in records}) == 50


def test_create_missing_parent(notes: tuple[NoteRecord, ...]):
    with raises(ValidationError) as e:
        create_note(notes, "missing")

    assert "missing" in e.value.errors[0]


def test_create_duplicate_id(notes: tuple[NoteRecord, ...]):
    with raises(ValidationError):
        create_note(notes, note_id="a")


def test_update(notes: tuple[NoteRecord, ...]):
    records = update_note(notes, "b", title="Optics", now=9000)

    b = find_note(records, "b")
    assert b is not None
    assert b.title == "Optics"
    assert b.updated_at == 9000

    # nothing else changed
    assert b.model_copy(update={"title": "Note b", "updated_at": 2000}) == notes[1]
    assert [r for r in records if r.id != "b"] == [
        r for r in notes if r.id != "b"
    ]


def test_update_time_increases(notes: tuple[NoteRecord, ...]):
    """
    Update time strictly increases even if the clock didn't advance.
    """
    records = update_note(notes, "b", content="x", now=2000)
    b = find_note(records, "b")
    assert b is not None
    assert b.updated_at == 2001

    records = update_note(records, "b", content="y", now=0)
    b = find_note(records, "b")
    assert b is not None
    assert b.updated_at == 2002

    # without explicit time
    records = update_note(records, "b", content="z")
    b2 = find_note(records, "b")
    assert b2 is not None
    assert b2.updated_at > b.updated_at


def test_update_absent(notes: tuple[NoteRecord, ...]):
    assert update_note(notes, "missing", title="x") == notes


@mark.parametrize("field", ["id", "created_at", "updated_at"])
def test_update_readonly(notes: tuple[NoteRecord, ...], field: str):
    with raises(ReadOnlyError) as e:
        update_note(notes, "a", **{field: "x"})

    assert e.value.field == field
    assert e.value.note_id == "a"


def test_update_invalid(notes: tuple[NoteRecord, ...]):
    with raises(ValidationError) as e:
        update_note(notes, "a", color="red")
    assert "Unknown field 'color'" in e.value.errors

    with raises(ValidationError) as e:
        update_note(notes, "a", title=1, is_expanded="yes")
    assert len(e.value.errors) == 2


def test_update_move(notes: tuple[NoteRecord, ...]):
    records = update_note(notes, "d", parent_id="e")
    d = find_note(records, "d")
    assert d is not None
    assert d.parent_id == "e"

    records = update_note(records, "d", parent_id=None)
    d = find_note(records, "d")
    assert d is not None
    assert d.parent_id is None


@mark.parametrize(
    "note_id,parent_id", [("a", "a"), ("a", "b"), ("a", "d"), ("b", "missing")]
)
def test_update_move_invalid(
    notes: tuple[NoteRecord, ...], note_id: str, parent_id: str
):
    """
    Moving a note under itself, a descendant or a nonexistent note fails.
    """
    with raises(ValidationError):
        update_note(notes, note_id, parent_id=parent_id)


def test_delete(notes: tuple[NoteRecord, ...]):
    records, removed = delete_note(notes, "b")

    assert removed == {"b", "d"}
    assert [r.id for r in records] == ["a", "c", "e"]

    records, removed = delete_note(notes, "a")
    assert removed == {"a", "b", "c", "d"}
    assert [r.id for r in records] == ["e"]


def test_delete_absent(notes: tuple[NoteRecord, ...]):
    records, removed = delete_note(notes, "missing")

    assert removed == set()
    assert records == notes


def test_delete_cycle(make_note: Callable[..., NoteRecord]):
    records = [make_note("a", "b"), make_note("b", "a"), make_note("c")]

    kept, removed = delete_note(records, "a")

    assert removed == {"a", "b"}
    assert [r.id for r in kept] == ["c"]


def test_toggle_expand(notes: tuple[NoteRecord, ...]):
    records = toggle_expand(notes, "a")

    a = find_note(records, "a")
    assert a is not None
    assert a.is_expanded is True
    assert a.updated_at == notes[0].updated_at

    records = toggle_expand(records, "a")
    assert records == notes

    assert toggle_expand(notes, "missing") == notes
