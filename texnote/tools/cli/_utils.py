"""
Utilities specific to CLI functionality.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, TypeVar

from click import BadParameter, Parameter
from rich.console import Console
from rich.logging import RichHandler
from typer import Context, Exit, Typer

from ...core import NoteRecord, Session
from ...sync import SyncStatus

if TYPE_CHECKING:
    from .main import RootContext

T = TypeVar("T")

console = Console()

rich_handler = RichHandler(
    console=console,
    rich_tracebacks=True,
    show_level=True,
    show_time=True,
    show_path=False,
)
rich_handler.setFormatter(logging.Formatter("%(message)s"))

logger = logging.getLogger("texnote")
logger.setLevel(logging.INFO)
logger.addHandler(rich_handler)
logger.propagate = False


class MainTyper(Typer):
    """
    Typer app with preconfigured settings.
    """

    def __init__(self, name: str, *, help: str):
        return super().__init__(
            name=name,
            help=help,
            rich_markup_mode="markdown",
            no_args_is_help=True,
            add_completion=False,
        )


def get_root_context(ctx: Context) -> RootContext:
    from .main import RootContext

    root_context = ctx.obj
    assert isinstance(root_context, RootContext)
    return root_context


def run_session(
    ctx: Context, func: Callable[[Session], Awaitable[T]]
) -> T:
    """
    Load a session, run the operation in it and save changes. Exits with an
    error if the changes couldn't be saved to the remote store.
    """
    root_context = get_root_context(ctx)

    async def run() -> tuple[T, Session]:
        session = root_context.create_session()

        async with session:
            result = await session.load()
            if result.error:
                logger.warning(result.error)

            return await func(session), session

    value, session = asyncio.run(run())

    if session.status is SyncStatus.ERROR:
        logger.error(
            f"Sync failed, data saved locally in '{session.cache.path}': {session.scheduler.error}"
        )
        raise Exit(code=1)

    return value


def get_note(session: Session, note_id: str) -> NoteRecord:
    """
    Get note by id, exiting with an error if it doesn't exist.
    """
    note = session.store.get(note_id)
    if note is None:
        logger.error(f"Note with id '{note_id}' does not exist")
        raise Exit(code=1)
    return note


def lookup_param(ctx: Context, name: str) -> Parameter:
    """
    Lookup param by name.
    """
    param = next((p for p in ctx.command.params if p.name == name), None)
    assert param, f"Could not find param with name: {name}"
    return param


def require_any(ctx: Context, **values: object):
    """
    Ensure at least one of the given options was passed.
    """
    if all(v is None or v is False for v in values.values()):
        names = ", ".join(f"--{n.replace('_', '-')}" for n in values)
        raise BadParameter(
            f"at least one of {names} must be provided",
            ctx=ctx,
            param=lookup_param(ctx, next(iter(values))),
        )


def format_timestamp(value: int) -> str:
    """
    Format epoch milliseconds as local time.
    """
    dt = datetime.datetime.fromtimestamp(value / 1000)
    return dt.strftime(r"%Y-%m-%d %H:%M:%S")
