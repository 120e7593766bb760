"""
Drivers for the remote document store, one per backend dialect.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from logging import Logger
from typing import Any, Iterable

import requests
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import RemoteRejected, RemoteShapeInvalid, RemoteUnreachable
from ..core.note import NoteRecord, records_from_json, records_to_json
from .config import BackendKind, StorageConfig

__all__ = [
    "BaseDriver",
    "GenericDriver",
    "JsonBinDriver",
    "create_driver",
]


class BaseDriver(ABC):
    """
    Reads and writes the whole note collection as one remote document.
    """

    save_method: str
    """
    HTTP method used to write the document.
    """

    _config: StorageConfig
    _http: requests.Session
    _logger: Logger

    def __init__(
        self,
        config: StorageConfig,
        http: requests.Session,
        *,
        logger: Logger | None = None,
    ):
        assert config.endpoint is not None
        self._config = config
        self._http = http
        self._logger = logger or logging.getLogger()

    @property
    def endpoint(self) -> str:
        assert self._config.endpoint is not None
        return self._config.endpoint

    def fetch(self) -> list[NoteRecord]:
        """
        Read notes from the remote store.

        :raises RemoteError: Upon transport failure, error status or
            unexpected payload
        """
        response = self._request("GET")

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteShapeInvalid(f"Backend response is not JSON: {e}") from e

        payload = self._unwrap(data)

        if not isinstance(payload, list):
            raise RemoteShapeInvalid("Backend response is not an array of notes")

        try:
            records = records_from_json(payload)
        except PydanticValidationError as e:
            raise RemoteShapeInvalid(
                f"Backend response contains invalid notes: {e}"
            ) from e

        self._logger.debug(f"Fetched {len(records)} notes from {self.endpoint}")
        return records

    def push(self, records: Iterable[NoteRecord]):
        """
        Write notes to the remote store, replacing its contents.

        :raises RemoteError: Upon transport failure or error status
        """
        payload = records_to_json(records)
        self._request(self.save_method, body=payload)

        self._logger.debug(f"Pushed {len(payload)} notes to {self.endpoint}")

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.credential:
            headers.update(self._auth_headers(self._config.credential))
        return headers

    @abstractmethod
    def _auth_headers(self, credential: str) -> dict[str, str]:
        ...

    def _unwrap(self, data: Any) -> Any:
        """
        Extract note array from decoded response.
        """
        return data

    def _request(self, method: str, body: Any = None) -> requests.Response:
        try:
            response = self._http.request(
                method,
                self.endpoint,
                headers=self.headers,
                data=json.dumps(body) if body is not None else None,
                timeout=self._config.timeout,
            )
        except requests.RequestException as e:
            raise RemoteUnreachable(
                f"Failed to reach backend at {self.endpoint}: {e}"
            ) from e

        if not 200 <= response.status_code < 300:
            raise RemoteRejected(response.status_code, response.reason or "")

        return response


class GenericDriver(BaseDriver):
    """
    Any store accepting the note array as-is.
    """

    save_method = "POST"

    def _auth_headers(self, credential: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}"}


class JsonBinDriver(BaseDriver):
    """
    JSONBin.io bin, e.g. `https://api.jsonbin.io/v3/b/<bin id>`.
    """

    save_method = "PUT"

    def _auth_headers(self, credential: str) -> dict[str, str]:
        return {"X-Master-Key": credential}

    def _unwrap(self, data: Any) -> Any:
        if not isinstance(data, dict) or "record" not in data:
            raise RemoteShapeInvalid(
                "Backend response is missing 'record' envelope"
            )
        return data["record"]


DRIVERS: dict[BackendKind, type[BaseDriver]] = {
    BackendKind.GENERIC: GenericDriver,
    BackendKind.JSONBIN: JsonBinDriver,
}


def create_driver(
    config: StorageConfig,
    http: requests.Session,
    *,
    logger: Logger | None = None,
) -> BaseDriver:
    """
    Get driver for the configured backend.
    """
    return DRIVERS[config.backend](config, http, logger=logger)
