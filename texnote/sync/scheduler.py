"""
Debounced persistence of the note collection.
"""
from __future__ import annotations

import asyncio
import datetime
import logging
from dataclasses import dataclass
from enum import Enum, auto
from logging import Logger
from typing import Callable, Sequence

from rich.markup import escape

from ..core.exceptions import LocalCorrupt, RemoteError
from ..core.note import NoteRecord
from ..core.seed import seed_notes
from ..storage.adapter import StorageAdapter
from ..storage.config import StorageConfig

__all__ = [
    "DEFAULT_DELAY",
    "LoadResult",
    "LoadSource",
    "SyncScheduler",
    "SyncStatus",
]

DEFAULT_DELAY = 1.0
"""
Quiet period in seconds after the last change before the collection is
saved.
"""


class SyncStatus(Enum):
    """
    Health of persistence to the remote store.
    """

    IDLE = auto()
    """No remote store configured, or nothing saved yet"""

    SYNCING = auto()
    """Save in progress"""

    SAVED = auto()
    """Last save succeeded"""

    ERROR = auto()
    """Last save failed; notes are still in the local cache"""

    def __str__(self) -> str:
        color_map = {
            SyncStatus.IDLE: "bright_black",
            SyncStatus.SYNCING: "bright_yellow",
            SyncStatus.SAVED: "bright_green",
            SyncStatus.ERROR: "red",
        }

        start = escape("[")
        end = escape("]")
        return f"{start}[{color_map[self]}]{self.name}[/{color_map[self]}]{end}"


class LoadSource(Enum):
    """
    Where the initial collection came from.
    """

    REMOTE = auto()
    LOCAL = auto()
    SEED = auto()


@dataclass(frozen=True, kw_only=True)
class LoadResult:
    records: tuple[NoteRecord, ...]
    source: LoadSource
    error: str | None = None
    """
    Set if the preferred source failed and a fallback was used.
    """


StatusCallback = Callable[["SyncScheduler"], None]


class SyncScheduler:
    """
    Collapses bursts of changes into one save per quiet period.

    Every change is written to the local cache right away. The remote store
    is only written once no further change arrived for `delay` seconds, and
    always with the most recent collection. Failures are reported through
    {obj}`SyncScheduler.status` and not retried until the next change.

    Must be used from a running asyncio event loop.
    """

    _adapter: StorageAdapter
    _delay: float
    _logger: Logger

    _status: SyncStatus
    _error: str | None
    _last_synced: datetime.datetime | None

    _timer: asyncio.TimerHandle | None
    """Pending debounce timer; at most one is armed at a time"""

    _pending: tuple[tuple[NoteRecord, ...], StorageConfig] | None
    """Most recent collection and config awaiting a save"""

    _writes: set[asyncio.Task]
    """In-flight save tasks"""

    _write_seq: int
    _callbacks: list[StatusCallback]

    def __init__(
        self,
        adapter: StorageAdapter,
        *,
        delay: float = DEFAULT_DELAY,
        logger: Logger | None = None,
    ):
        self._adapter = adapter
        self._delay = delay
        self._logger = logger or logging.getLogger()

        self._status = SyncStatus.IDLE
        self._error = None
        self._last_synced = None

        self._timer = None
        self._pending = None
        self._writes = set()
        self._write_seq = 0
        self._callbacks = []

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def error(self) -> str | None:
        """
        Message of last failure, if status is {obj}`SyncStatus.ERROR`.
        """
        return self._error

    @property
    def last_synced(self) -> datetime.datetime | None:
        return self._last_synced

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def is_pending(self) -> bool:
        """
        Whether a debounce timer is armed.
        """
        return self._timer is not None

    @property
    def in_flight(self) -> int:
        return len(self._writes)

    def on_status(self, callback: StatusCallback):
        """
        Register callback invoked upon every status change.
        """
        self._callbacks.append(callback)

    async def load(self, config: StorageConfig) -> LoadResult:
        """
        Load the initial collection: remote store first if configured, then
        the local cache, then demo notes.
        """
        error: str | None = None

        if config.is_remote:
            try:
                records = await asyncio.to_thread(self._adapter.load, config)
            except RemoteError as e:
                error = f"Failed to load notes from backend, using offline mode: {e}"
                self._logger.warning(error)
            else:
                self._logger.info(
                    f"Loaded {len(records)} notes from {config.endpoint}"
                )
                return LoadResult(records=tuple(records), source=LoadSource.REMOTE)

        try:
            local = await asyncio.to_thread(self._adapter.load_local)
        except LocalCorrupt as e:
            self._logger.warning(f"{e}; using demo notes")
            error = error or str(e)
            local = None

        if local is not None:
            self._logger.debug(f"Loaded {len(local)} notes from local cache")
            return LoadResult(
                records=tuple(local), source=LoadSource.LOCAL, error=error
            )

        self._logger.info("No saved notes found, using demo notes")
        return LoadResult(records=seed_notes(), source=LoadSource.SEED, error=error)

    def notify(self, records: Sequence[NoteRecord], config: StorageConfig):
        """
        Record that the collection changed: write it to the local cache and
        (re)start the debounce timer.
        """
        records = tuple(records)

        try:
            self._adapter.save_local(records)
        except OSError as e:
            self._logger.error(f"Failed to write local cache: {e}")

        self._pending = (records, config)

        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._fire)

    async def flush(self):
        """
        Save any pending change now and wait for all saves in flight.
        """
        if self._timer is not None:
            self._cancel_timer()
            self._fire()

        if self._writes:
            await asyncio.gather(*self._writes, return_exceptions=True)

    def cancel(self):
        """
        Drop pending change without saving it remotely. The local cache already
        holds it.
        """
        self._cancel_timer()
        self._pending = None

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self):
        self._timer = None

        if self._pending is None:
            return

        records, config = self._pending
        self._pending = None

        self._write_seq += 1
        task = asyncio.get_running_loop().create_task(
            self._write(records, config, self._write_seq)
        )
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)

    async def _write(
        self,
        records: tuple[NoteRecord, ...],
        config: StorageConfig,
        seq: int,
    ):
        self._set_status(SyncStatus.SYNCING)

        try:
            await asyncio.to_thread(self._adapter.save, records, config)
        except (RemoteError, OSError) as e:
            if seq != self._write_seq:
                self._logger.debug(f"Superseded save failed: {e}")
                return

            self._logger.error(f"Sync failed, data saved locally: {e}")
            self._set_status(SyncStatus.ERROR, error=str(e))
        else:
            self._logger.debug(
                f"Saved {len(records)} notes ({config.str_summary})"
            )
            self._last_synced = datetime.datetime.now()

            if seq != self._write_seq:
                return

            self._set_status(
                SyncStatus.SAVED if config.is_remote else SyncStatus.IDLE
            )

    def _set_status(self, status: SyncStatus, *, error: str | None = None):
        self._status = status
        self._error = error

        for callback in self._callbacks:
            callback(self)
