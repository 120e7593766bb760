"""
Explicit synchronization with the remote store.
"""
from __future__ import annotations

from typer import Context, Exit

from ...core import Session
from ...sync import LoadResult, LoadSource
from ._utils import MainTyper, console, logger, run_session

app = MainTyper(
    "sync",
    help="Explicit synchronization with the remote store",
)


@app.command()
def push(ctx: Context):
    """
    Save notes to local cache and remote store now
    """

    async def do_push(session: Session) -> int:
        if not session.config.is_remote:
            logger.warning("No remote store configured, saving to local cache only")

        await session.save()
        return len(session.records)

    count = run_session(ctx, do_push)

    logger.info(f"Saved {count} notes")


@app.command()
def pull(ctx: Context):
    """
    Load notes from remote store into local cache
    """

    async def do_pull(session: Session) -> LoadResult:
        result = session.load_result
        assert result is not None
        return result

    result = run_session(ctx, do_pull)

    console.print(
        f"Loaded {len(result.records)} notes from {result.source.name.lower()}"
    )

    if result.source is not LoadSource.REMOTE and result.error:
        raise Exit(code=1)
