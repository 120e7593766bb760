"""
Binding to the remote store.
"""
from __future__ import annotations

from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "BackendKind",
    "StorageConfig",
]


class BackendKind(Enum):
    """
    Request/response conventions of the remote store.
    """

    GENERIC = "generic"
    """
    Plain JSON array payload; GET to load, POST to save;
    `Authorization: Bearer <credential>`
    """

    JSONBIN = "jsonbin"
    """
    JSONBin.io: payload wrapped in a `record` field on load; GET to load,
    PUT to save; credential passed in `X-Master-Key`
    """


class StorageConfig(BaseModel):
    """
    Remote store configuration. With no endpoint, notes are only kept in the
    local cache.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str | None = Field(
        default=None, validation_alias=AliasChoices("endpoint", "apiUrl")
    )
    """
    HTTP(S) URL of the remote document
    """

    credential: str | None = Field(
        default=None, validation_alias=AliasChoices("credential", "apiKey")
    )
    """
    Static secret passed with each request
    """

    backend: BackendKind = BackendKind.GENERIC
    """
    Dialect of the remote store
    """

    timeout: float | None = None
    """
    Request timeout in seconds, or `None` to use the transport default
    """

    @field_validator("endpoint", "credential", mode="before")
    @classmethod
    def normalize_empty(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, value: str | None) -> str | None:
        if value is None:
            return value

        url = urlparse(value)
        if url.scheme not in ("http", "https") or not url.netloc:
            raise ValueError(f"endpoint must be an http(s) URL: '{value}'")

        return value

    @property
    def is_remote(self) -> bool:
        return self.endpoint is not None

    @property
    def str_summary(self) -> str:
        if not self.is_remote:
            return "local only"

        credential = "with credential" if self.credential else "no credential"
        return f"{self.backend.value} backend at {self.endpoint} ({credential})"
