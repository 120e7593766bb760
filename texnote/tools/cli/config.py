"""
Storage configuration saved in the local cache.
"""
from __future__ import annotations

from click import BadParameter
from pydantic import ValidationError
from typer import Context, Option

from ...core import Session
from ...storage import BackendKind, StorageConfig
from ._utils import MainTyper, console, lookup_param, run_session

app = MainTyper(
    "config",
    help="Storage configuration saved in the local cache",
)


@app.command()
def show(ctx: Context):
    """
    Print storage configuration
    """

    async def do_show(session: Session) -> StorageConfig:
        return session.config

    config = run_session(ctx, do_show)

    console.print(f"Remote store: {config.str_summary}")
    console.print_json(
        config.model_dump_json(exclude={"credential"}), highlight=False
    )


@app.command("set")
def set_(
    ctx: Context,
    endpoint: str = Option(
        help="Remote store URL, e.g. https://api.jsonbin.io/v3/b/<bin id>",
    ),
    credential: str
    | None = Option(
        None,
        help="Bearer token or JSONBin master key",
    ),
    backend: BackendKind = Option(
        BackendKind.GENERIC,
        help="Remote store dialect",
    ),
    timeout: float
    | None = Option(
        None,
        help="Request timeout in seconds",
    ),
):
    """
    Configure remote store and reload notes from it
    """
    try:
        config = StorageConfig(
            endpoint=endpoint,
            credential=credential,
            backend=backend,
            timeout=timeout,
        )
    except ValidationError as e:
        raise BadParameter(str(e), ctx=ctx, param=lookup_param(ctx, "endpoint"))

    async def do_set(session: Session):
        result = await session.configure(config)
        if result and result.error:
            console.print(f"[yellow]{result.error}[/yellow]")

    run_session(ctx, do_set)


@app.command()
def clear(ctx: Context):
    """
    Remove remote store, keeping notes in local cache only
    """

    async def do_clear(session: Session):
        await session.configure(StorageConfig())

    run_session(ctx, do_clear)
