"""
Operations on the whole note tree.
"""
from __future__ import annotations

from pathlib import Path

import typer
from click import BadParameter, MissingParameter
from rich.markup import escape
from rich.tree import Tree
from typer import Argument, Context, Exit, Option

from ...core import NoteTreeItem, Session, find_hierarchy_problems, snapshot_filename
from ._utils import MainTyper, console, logger, lookup_param, run_session

app = MainTyper(
    "tree",
    help="Operations on the whole note tree",
)


@app.command()
def show(
    ctx: Context,
    show_all: bool = Option(
        False,
        "--all",
        help="Show children of collapsed notes",
    ),
    ids: bool = Option(
        False,
        "--ids",
        help="Show note ids",
    ),
):
    """
    Print the note tree, newest notes first
    """

    async def do_show(session: Session) -> Tree:
        return render_tree(session.tree, show_all=show_all, ids=ids)

    console.print(run_session(ctx, do_show))


@app.command()
def check(ctx: Context):
    """
    Check for dangling parents, cycles and duplicate ids
    """

    async def do_check(session: Session) -> list[str]:
        return find_hierarchy_problems(session.records)

    problems = run_session(ctx, do_check)

    if problems:
        for problem in problems:
            logger.error(problem)
        raise Exit(code=1)

    logger.info("No problems found")


@app.command()
def export(
    ctx: Context,
    dest: Path
    | None = Argument(
        None,
        help="Destination .json file or folder; defaults to a dated file in the current folder",
    ),
    overwrite: bool = Option(
        False,
        "--overwrite",
        help="Whether to overwrite destination file if it already exists",
    ),
):
    """
    Export all notes to a .json backup file
    """
    if dest is None:
        dest = Path(snapshot_filename())
    elif dest.is_dir():
        dest = dest / snapshot_filename()

    if not dest.parent.exists():
        raise BadParameter(
            f"Parent folder of '{dest}' does not exist",
            ctx=ctx,
            param=lookup_param(ctx, "dest"),
        )

    if dest.exists() and not overwrite:
        raise MissingParameter(
            f"Destination '{dest}' exists and --overwrite was not passed",
            ctx=ctx,
            param=lookup_param(ctx, "overwrite"),
        )

    async def do_export(session: Session) -> tuple[str, int]:
        return session.export_snapshot(), len(session.records)

    snapshot, count = run_session(ctx, do_export)
    dest.write_text(snapshot, encoding="utf-8")

    logger.info(f"Exported {count} notes -> '{dest}'")


@app.command("import")
def import_(
    ctx: Context,
    src: Path = Argument(
        help="Source .json backup file",
        dir_okay=False,
        exists=True,
    ),
    yes: bool = Option(
        False,
        "-y",
        "--yes",
        help="Don't ask for confirmation before overwriting notes",
    ),
):
    """
    Replace all notes with the contents of a .json backup file
    """
    data = src.read_bytes()

    def confirm(count: int) -> bool:
        if yes:
            return True
        return typer.confirm(f"Overwrite {count} notes with backup?")

    async def do_import(session: Session):
        return session.import_snapshot(data, confirm=confirm)

    result = run_session(ctx, do_import)

    if result.error:
        raise Exit(code=1)


def render_tree(
    items: list[NoteTreeItem], *, show_all: bool = False, ids: bool = False
) -> Tree:
    """
    Build a renderable tree from materialized notes.
    """
    tree = Tree("[bold]Notes[/bold]", guide_style="dim")

    stack: list[tuple[NoteTreeItem, Tree]] = [
        (item, tree) for item in reversed(items)
    ]

    while stack:
        item, parent = stack.pop()

        label = escape(item.title) if item.title else "[italic]Untitled[/italic]"
        if ids:
            label += f" [dim]({escape(item.id)})[/dim]"

        if item.children and not (item.is_expanded or show_all):
            label += f" [dim]+{len(item.children)}[/dim]"
            parent.add(label)
            continue

        node = parent.add(label)
        stack.extend((child, node) for child in reversed(item.children))

    return tree
