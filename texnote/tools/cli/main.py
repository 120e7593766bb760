"""
Entry point of `texnote` CLI.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import dotenv
import typer
from click.exceptions import BadParameter
from pydantic import ValidationError
from typer import Context, Option

from ...core import Session
from ...storage import BackendKind, StorageConfig
from ...sync import DEFAULT_DELAY
from ..config import Config
from . import config, note, sync, tree
from ._utils import (
    MainTyper,
    console,
    format_timestamp,
    logger,
    lookup_param,
    run_session,
)

dotenv.load_dotenv()

APP_NAME = "texnote"

app = MainTyper(
    APP_NAME,
    help="TexNote: hierarchical notes with local cache and remote sync",
)


@app.callback()
def main(
    ctx: Context,
    data_dir: Path
    | None = Option(
        None,
        help="Folder holding the local cache, defaults to the per-user app folder",
        envvar="TEXNOTE_DATA_DIR",
        file_okay=False,
    ),
    endpoint: str
    | None = Option(
        None,
        help="Remote store URL; overrides the stored storage config",
        envvar="TEXNOTE_ENDPOINT",
    ),
    credential: str
    | None = Option(
        None,
        help="Remote store credential",
        envvar="TEXNOTE_CREDENTIAL",
    ),
    backend: BackendKind = Option(
        BackendKind.GENERIC,
        help="Remote store dialect",
        envvar="TEXNOTE_BACKEND",
    ),
    profile_name: str
    | None = Option(
        None,
        "--profile",
        help="Profile name as configured in .yaml",
        envvar="TEXNOTE_PROFILE",
    ),
    config_file: Path = Option(
        "texnote.yaml",
        help=".yaml file containing profiles, only applicable with --profile",
        envvar="TEXNOTE_CONFIG_FILE",
        dir_okay=False,
    ),
    delay: float = Option(
        DEFAULT_DELAY,
        help="Seconds without changes before saving to the remote store",
        min=0.0,
    ),
    verbose: bool = Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if profile_name:
        root_context = RootContext.from_config(
            ctx=ctx,
            profile_name=profile_name,
            config_file=config_file,
            delay=delay,
        )
    else:
        storage_config: StorageConfig | None = None

        if endpoint:
            try:
                storage_config = StorageConfig(
                    endpoint=endpoint, credential=credential, backend=backend
                )
            except ValidationError as e:
                raise BadParameter(
                    str(e), ctx=ctx, param=lookup_param(ctx, "endpoint")
                )

        root_context = RootContext(
            ctx=ctx,
            data_dir=data_dir or Path(typer.get_app_dir(APP_NAME)),
            storage_config=storage_config,
            delay=delay,
        )

    ctx.obj = root_context


app.add_typer(note.app)
app.add_typer(tree.app)
app.add_typer(sync.app)
app.add_typer(config.app)


@app.command()
def status(ctx: Context):
    """
    Show storage and collection summary
    """

    async def show(session: Session):
        result = session.load_result
        assert result is not None

        console.print(f"Local cache: {session.cache.path}")
        console.print(f"Remote store: {session.config.str_summary}")
        console.print(
            f"Notes: {len(session.records)} ({len(session.tree)} root), loaded from {result.source.name.lower()}"
        )

        if session.records:
            latest = max(session.records, key=lambda r: r.updated_at)
            console.print(
                f"Last change: {format_timestamp(latest.updated_at)} in {latest.str_short}"
            )

    run_session(ctx, show)


def run():
    app()


@dataclass(kw_only=True)
class RootContext:
    ctx: Context
    data_dir: Path
    storage_config: StorageConfig | None
    """
    Storage config overriding the one saved in the local cache, if any.
    """
    delay: float

    @classmethod
    def from_config(
        cls,
        *,
        ctx: Context,
        profile_name: str,
        config_file: Path,
        delay: float,
    ) -> RootContext:
        # ensure config file exists
        if not config_file.is_file():
            raise BadParameter(
                message=f"file does not exist: {config_file}",
                ctx=ctx,
                param=lookup_param(ctx, "config_file"),
            )

        # get config from file
        try:
            config = Config.load_yaml(config_file)
        except (ValueError, ValidationError) as e:
            raise BadParameter(
                f"failed to load config file '{config_file}': {e}",
                ctx=ctx,
                param=lookup_param(ctx, "config_file"),
            )

        # get profile from config
        profile = config.profiles.get(profile_name)
        if not profile:
            raise BadParameter(
                f"profile '{profile_name}' not found in '{config_file}'",
                ctx=ctx,
                param=lookup_param(ctx, "profile_name"),
            )

        data_dir = profile.data_dir or Path(typer.get_app_dir(APP_NAME)) / profile_name

        return RootContext(
            ctx=ctx,
            data_dir=data_dir,
            storage_config=profile.to_storage_config(),
            delay=delay,
        )

    def create_session(self) -> Session:
        return Session(
            self.data_dir,
            config=self.storage_config,
            delay=self.delay,
            logger=logger,
        )


if __name__ == "__main__":
    app()
