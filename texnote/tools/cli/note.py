"""
Operations on a single note.
"""
from __future__ import annotations

import typer
from rich.markdown import Markdown
from typer import Argument, Context, Exit, Option

from ...core import ReadOnlyError, Session, ValidationError, descendant_closure
from ._utils import (
    MainTyper,
    console,
    format_timestamp,
    get_note,
    logger,
    require_any,
    run_session,
)

app = MainTyper(
    "note",
    help="Operations on a single note",
)


@app.command()
def create(
    ctx: Context,
    parent: str
    | None = Option(
        None,
        help="Parent note id; creates a root note if not provided",
    ),
    title: str = Option(
        "",
        help="Note title",
    ),
    content: str = Option(
        "",
        help="Note content, may contain markdown and formulas",
    ),
):
    """
    Create a note and print its id
    """

    async def do_create(session: Session) -> str:
        if parent is not None:
            get_note(session, parent)

        note_id = session.create_note(parent)

        if title or content:
            session.update_note(note_id, title=title, content=content)

        return note_id

    note_id = run_session(ctx, do_create)

    logger.info(f"Created note '{note_id}'")
    console.print(note_id, highlight=False)


@app.command()
def update(
    ctx: Context,
    note_id: str = Argument(help="Note id"),
    title: str
    | None = Option(
        None,
        help="New title",
    ),
    content: str
    | None = Option(
        None,
        help="New content",
    ),
    parent: str
    | None = Option(
        None,
        help="Move note under this parent",
    ),
    root: bool = Option(
        False,
        "--root",
        help="Move note to top level",
    ),
):
    """
    Update fields of a note
    """
    require_any(ctx, title=title, content=content, parent=parent, root=root)

    fields: dict[str, str | None] = {}
    if title is not None:
        fields["title"] = title
    if content is not None:
        fields["content"] = content
    if root:
        fields["parent_id"] = None
    elif parent is not None:
        fields["parent_id"] = parent

    async def do_update(session: Session):
        note = get_note(session, note_id)

        try:
            session.update_note(note_id, **fields)
        except (ValidationError, ReadOnlyError) as e:
            logger.error(f"Failed to update {note.str_short}: {e}")
            raise Exit(code=1)

    run_session(ctx, do_update)

    logger.info(f"Updated note '{note_id}'")


@app.command()
def delete(
    ctx: Context,
    note_id: str = Argument(help="Note id"),
    yes: bool = Option(
        False,
        "-y",
        "--yes",
        help="Don't ask for confirmation before deleting",
    ),
):
    """
    Delete a note along with all of its descendants
    """

    async def do_delete(session: Session) -> set[str]:
        note = get_note(session, note_id)
        count = len(descendant_closure(session.records, note_id))

        if not yes:
            if not typer.confirm(
                f"Delete {note.str_short} and {count - 1} descendants?"
            ):
                return set()

        return session.delete_note(note_id)

    removed = run_session(ctx, do_delete)

    if removed:
        logger.info(f"Deleted {len(removed)} notes")


@app.command()
def toggle(
    ctx: Context,
    note_id: str = Argument(help="Note id"),
):
    """
    Expand or collapse a note in the tree
    """

    async def do_toggle(session: Session) -> bool:
        get_note(session, note_id)
        session.toggle_expand(note_id)

        note = session.store.get(note_id)
        assert note
        return note.is_expanded

    expanded = run_session(ctx, do_toggle)

    logger.info(f"Note '{note_id}' {'expanded' if expanded else 'collapsed'}")


@app.command()
def show(
    ctx: Context,
    note_id: str = Argument(help="Note id"),
    raw: bool = Option(
        False,
        "--raw",
        help="Print content as-is rather than rendering markdown",
    ),
):
    """
    Print a note
    """

    async def do_show(session: Session):
        note = get_note(session, note_id)

        console.print(f"[bold]{note.title or 'Untitled'}[/bold]")
        console.print(
            f"[dim]id={note.id} parent={note.parent_id} created={format_timestamp(note.created_at)} updated={format_timestamp(note.updated_at)}[/dim]"
        )
        console.print()

        if raw:
            console.print(note.content, markup=False, highlight=False)
        else:
            console.print(Markdown(note.content))

    run_session(ctx, do_show)
