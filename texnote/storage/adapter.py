"""
Persistence over both backends: the local cache, which is always written,
and the remote store, if configured.
"""
from __future__ import annotations

import logging
from logging import Logger
from typing import Sequence

import requests

from ..core.note import NoteRecord
from .config import StorageConfig
from .local import LocalCache
from .remote import create_driver

__all__ = [
    "StorageAdapter",
]


class StorageAdapter:
    """
    Loads and saves the note collection according to a
    {obj}`StorageConfig`. Blocking; the sync scheduler runs it in a worker
    thread.
    """

    _cache: LocalCache
    _http: requests.Session
    _logger: Logger

    def __init__(
        self,
        cache: LocalCache,
        *,
        http: requests.Session | None = None,
        logger: Logger | None = None,
    ):
        self._cache = cache
        self._http = http or requests.Session()
        self._logger = logger or logging.getLogger()

    @property
    def cache(self) -> LocalCache:
        return self._cache

    def load(self, config: StorageConfig) -> list[NoteRecord] | None:
        """
        Load from the remote store if configured, otherwise from the local
        cache. Notes fetched from the remote store also refresh the local
        cache; a failed fetch leaves the cache as it was.

        :returns: Notes, or `None` if nothing was saved locally yet
        :raises RemoteError: If remote store is configured and loading failed
        :raises LocalCorrupt: If local cache can't be deserialized
        """
        if config.is_remote:
            records = create_driver(config, self._http, logger=self._logger).fetch()

            try:
                self._cache.write_notes(records)
            except OSError as e:
                self._logger.warning(
                    f"Failed to refresh local cache with fetched notes: {e}"
                )
            else:
                self._logger.debug(
                    f"Refreshed local cache with {len(records)} notes"
                )

            return records

        return self.load_local()

    def load_local(self) -> list[NoteRecord] | None:
        """
        Load from the local cache only.
        """
        return self._cache.read_notes()

    def save(self, records: Sequence[NoteRecord], config: StorageConfig):
        """
        Save to the local cache, then to the remote store if configured. The
        local write happens first so a remote failure never loses data.

        :raises RemoteError: If remote store is configured and saving failed
        """
        self.save_local(records)

        if config.is_remote:
            create_driver(config, self._http, logger=self._logger).push(records)

    def save_local(self, records: Sequence[NoteRecord]):
        self._cache.write_notes(records)
