"""
Application state: the note collection, the current selection and its
synchronization with storage.
"""
from __future__ import annotations

import logging
from logging import Logger
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import requests

from . import mutations
from .exceptions import ImportShapeInvalid, ValidationError
from .note import NoteRecord, NoteTreeItem
from .snapshot import ImportResult, export_snapshot, parse_snapshot
from .store import NoteStore

if TYPE_CHECKING:
    from ..storage.adapter import StorageAdapter
    from ..storage.config import StorageConfig
    from ..storage.local import LocalCache
    from ..sync.scheduler import LoadResult, SyncScheduler, SyncStatus

__all__ = ["Session"]


class Session:
    """
    Context in which notes are edited.

    Each mutation replaces the collection, is written to the local cache
    right away and schedules a debounced save to the remote store, if one is
    configured. Must be used from a running asyncio event loop.

    Example usage:
    ```
    async with Session(Path("~/.texnote").expanduser()) as session:
        await session.load()
        note_id = session.create_note()
        session.update_note(note_id, title="Physics")
    ```

    Exiting the context saves pending changes.
    """

    _store: NoteStore
    """
    Current collection.
    """

    _config: StorageConfig
    """
    Remote store configuration.
    """

    _adapter: StorageAdapter
    _scheduler: SyncScheduler

    _selected_id: str | None
    """
    Id of the currently selected note.
    """

    _loaded: bool
    """
    Whether the initial load completed; changes are only saved after it did.
    """

    _load_result: LoadResult | None

    _logger: Logger

    def __init__(
        self,
        cache: LocalCache | Path,
        *,
        config: StorageConfig | None = None,
        delay: float | None = None,
        http: requests.Session | None = None,
        logger: Logger | None = None,
    ):
        """
        :param cache: Local cache, or folder in which to create one
        :param config: Remote store config, or `None` to use config saved in local cache
        :param delay: Debounce delay in seconds, or `None` for the default
        :param http: HTTP session used for the remote store
        :param logger: Logger to use, or `None` to use default logger
        """
        from ..storage.adapter import StorageAdapter
        from ..storage.local import LocalCache
        from ..sync.scheduler import DEFAULT_DELAY, SyncScheduler

        self._logger = logger or logging.getLogger()

        if not isinstance(cache, LocalCache):
            cache = LocalCache(cache, logger=self._logger)

        self._config = config if config is not None else cache.read_config()
        self._adapter = StorageAdapter(cache, http=http, logger=self._logger)
        self._scheduler = SyncScheduler(
            self._adapter,
            delay=delay if delay is not None else DEFAULT_DELAY,
            logger=self._logger,
        )

        self._store = NoteStore()
        self._store.subscribe(self._on_change)

        self._selected_id = None
        self._loaded = False
        self._load_result = None

    def __repr__(self) -> str:
        return f"Session(cache={self.cache}, remote='{self._config.str_summary}')"

    async def __aenter__(self) -> Session:
        self._logger.debug(f"Entering context: {self}")
        return self

    async def __aexit__(self, exc_type, exc_val, traceback):
        if exc_type:
            self._logger.error(f"Exiting context with error: {self}")
            return

        self._logger.debug(f"Exiting context: {self}")

        # save pending changes
        await self.flush()

    async def load(self) -> LoadResult:
        """
        Load the collection from storage, replacing the current one. Selects
        the first note.
        """
        self._loaded = False
        self._scheduler.cancel()

        result = await self._scheduler.load(self._config)

        self._store.commit(result.records, notify=False)
        self._selected_id = result.records[0].id if result.records else None
        self._load_result = result
        self._loaded = True

        return result

    async def configure(self, config: StorageConfig) -> LoadResult | None:
        """
        Set and persist the remote store config. If the remote store changed,
        notes are reloaded from it.
        """
        previous = self._config
        self._config = config
        self.cache.write_config(config)

        self._logger.info(f"Storage configured: {config.str_summary}")

        if (previous.endpoint, previous.backend) != (
            config.endpoint,
            config.backend,
        ):
            return await self.load()
        return None

    async def flush(self):
        """
        Save pending changes now rather than waiting for the debounce delay.
        """
        await self._scheduler.flush()

    async def save(self):
        """
        Save the current collection now, even if it didn't change.
        """
        self._scheduler.notify(self._store.records, self._config)
        await self._scheduler.flush()

    def create_note(self, parent_id: str | None = None) -> str:
        """
        Create an empty note and select it.

        :param parent_id: Parent note, or `None` to create a root note
        :returns: Id of new note
        """
        records, note_id = mutations.create_note(self._store.records, parent_id)
        self._store.commit(records)
        self._selected_id = note_id

        self._logger.debug(f"Created note '{note_id}' under '{parent_id}'")
        return note_id

    def update_note(self, note_id: str, **fields: Any) -> NoteRecord | None:
        """
        Update fields of a note. No-op if note doesn't exist.

        :returns: Updated note, or `None` if it doesn't exist
        """
        if note_id not in self._store:
            self._logger.debug(f"Ignoring update of nonexistent note '{note_id}'")
            return None

        records = mutations.update_note(self._store.records, note_id, **fields)
        self._store.commit(records)

        return self._store.get(note_id)

    def delete_note(self, note_id: str) -> set[str]:
        """
        Delete a note along with its descendants. Clears selection if the
        selected note was deleted.

        :returns: Ids of deleted notes
        """
        records, removed = mutations.delete_note(self._store.records, note_id)
        if not removed:
            return removed

        self._store.commit(records)

        if self._selected_id in removed:
            self._selected_id = None

        self._logger.debug(f"Deleted {len(removed)} notes under '{note_id}'")
        return removed

    def toggle_expand(self, note_id: str):
        if note_id not in self._store:
            return

        self._store.commit(mutations.toggle_expand(self._store.records, note_id))

    def select(self, note_id: str | None):
        """
        Select a note, or clear selection with `None`.
        """
        if note_id is not None and note_id not in self._store:
            raise ValidationError([f"Note does not exist: '{note_id}'"])
        self._selected_id = note_id

    def export_snapshot(self) -> str:
        """
        Serialize the whole collection as a portable JSON document.
        """
        return export_snapshot(self._store.records)

    def import_snapshot(
        self,
        text: str | bytes,
        confirm: Callable[[int], bool],
    ) -> ImportResult:
        """
        Replace the whole collection with the contents of a snapshot and
        select its first note. The current collection is left untouched if
        the snapshot is invalid or the replacement isn't confirmed.

        :param text: Snapshot contents
        :param confirm: Called with the number of notes about to be
            overwritten; replacement proceeds only if it returns `True`
        """
        try:
            records = parse_snapshot(text)
        except ImportShapeInvalid as e:
            self._logger.error(str(e))
            return ImportResult(imported=False, error=str(e))

        if not confirm(len(self._store)):
            self._logger.info("Import cancelled")
            return ImportResult(imported=False, count=len(records))

        self._store.commit(records)
        self._selected_id = records[0].id

        self._logger.info(f"Imported {len(records)} notes")
        return ImportResult(imported=True, count=len(records))

    @property
    def records(self) -> tuple[NoteRecord, ...]:
        return self._store.records

    @property
    def tree(self) -> list[NoteTreeItem]:
        """
        Root notes with children populated, newest first.
        """
        return self._store.tree

    @property
    def store(self) -> NoteStore:
        return self._store

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_note(self) -> NoteRecord | None:
        return self._store.get(self._selected_id)

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def cache(self) -> LocalCache:
        return self._adapter.cache

    @property
    def scheduler(self) -> SyncScheduler:
        return self._scheduler

    @property
    def status(self) -> SyncStatus:
        return self._scheduler.status

    @property
    def load_result(self) -> LoadResult | None:
        return self._load_result

    @property
    def load_error(self) -> str | None:
        """
        Set if the initial load fell back from the remote store or a corrupt
        cache.
        """
        return self._load_result.error if self._load_result else None

    def _on_change(self, records: tuple[NoteRecord, ...]):
        if not self._loaded:
            return
        self._scheduler.notify(records, self._config)

