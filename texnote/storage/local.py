"""
Local cache: an always-available key/value store in a folder, one JSON file
per key.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from logging import Logger
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import LocalCorrupt
from ..core.note import NoteRecord, records_from_json, records_to_json
from .config import StorageConfig

__all__ = [
    "LocalCache",
    "NOTES_KEY",
    "CONFIG_KEY",
]

NOTES_KEY = "texnote-notes"
"""
Key holding the JSON array of notes.
"""

CONFIG_KEY = "texnote-config"
"""
Key holding the JSON storage config.
"""


class LocalCache:
    """
    Folder-backed key/value store. Writes are atomic: a value is written to a
    temporary file which then replaces the previous one.
    """

    _path: Path
    _logger: Logger

    def __init__(self, path: Path, *, logger: Logger | None = None):
        self._path = path
        self._logger = logger or logging.getLogger()

    def __repr__(self) -> str:
        return f"LocalCache(path='{self._path}')"

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        """
        Get raw value, or `None` if not set.
        """
        file = self._key_path(key)
        if not file.is_file():
            return None
        return file.read_text(encoding="utf-8")

    def set(self, key: str, value: str):
        """
        Set raw value.
        """
        self._path.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self._path, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, self._key_path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove(self, key: str):
        self._key_path(key).unlink(missing_ok=True)

    def read_notes(self) -> list[NoteRecord] | None:
        """
        Get cached notes, or `None` if nothing was cached yet.

        :raises LocalCorrupt: If cached value can't be deserialized
        """
        try:
            value = self.get(NOTES_KEY)
            if value is None:
                return None

            return records_from_json(json.loads(value))
        except (ValueError, PydanticValidationError) as e:
            raise LocalCorrupt(
                f"Local cache key '{NOTES_KEY}' is corrupt: {e}"
            ) from e

    def write_notes(self, records: Iterable[NoteRecord]):
        self.set(NOTES_KEY, json.dumps(records_to_json(records)))

    def read_config(self) -> StorageConfig:
        """
        Get storage config, falling back to local-only config if not set or
        corrupt.
        """
        try:
            value = self.get(CONFIG_KEY)
            if value is None:
                return StorageConfig()

            return StorageConfig.model_validate_json(value)
        except (UnicodeDecodeError, PydanticValidationError) as e:
            self._logger.warning(
                f"Ignoring corrupt storage config in '{self._key_path(CONFIG_KEY)}': {e}"
            )
            return StorageConfig()

    def write_config(self, config: StorageConfig):
        self.set(CONFIG_KEY, config.model_dump_json())

    def _key_path(self, key: str) -> Path:
        return self._path / f"{key}.json"
