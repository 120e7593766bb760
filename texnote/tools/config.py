"""
Interface to tool configuration as persisted in .yaml file.

Example `texnote.yaml`:

```yaml
data_dir: ~/notes
profiles:
  personal:
    endpoint: https://api.jsonbin.io/v3/b/0123456789abcdef
    credential: $2a$10$...
    backend: jsonbin
  offline: {}
```
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Self

from pydantic import (
    BaseModel,
    field_serializer,
    field_validator,
    model_validator,
)

from ..storage.config import BackendKind, StorageConfig
from .yaml_model import BaseYamlModel

__all__ = [
    "Config",
    "ProfileConfig",
]


class Config(BaseYamlModel):
    """
    Encapsulates configuration for use in tools.
    """

    data_dir: Path | None = None
    """
    Root folder for per-profile local caches.
    """

    profiles: dict[str, ProfileConfig] = {}
    """
    Mapping of profile names to configs.
    """

    @field_validator("data_dir", mode="before")
    @classmethod
    def validate_data_dir(cls, value: Any) -> Any:
        return _validate_dir(value)

    @field_serializer("data_dir")
    def serialize_data_dir(self, value: Path | None) -> str | None:
        return str(value) if isinstance(value, Path) else value

    @model_validator(mode="after")
    def validate_profiles(self) -> Self:
        # propagate data dir to profiles if applicable
        if self.data_dir:
            for profile_name, profile in self.profiles.items():
                if not profile.data_dir:
                    data_dir = self.data_dir / profile_name
                    _validate_dir(data_dir)

                    profile.data_dir = data_dir
        return self


class ProfileConfig(BaseModel):
    """
    Encapsulates local cache location and remote store for one collection of
    notes.
    """

    endpoint: str | None = None
    credential: str | None = None
    backend: BackendKind = BackendKind.GENERIC
    timeout: float | None = None
    data_dir: Path | None = None

    @field_validator("data_dir", mode="before")
    @classmethod
    def validate_data_dir(cls, value: Any) -> Any:
        return _validate_dir(value)

    @field_serializer("data_dir")
    def serialize_data_dir(self, value: Path | None) -> str | None:
        return str(value) if isinstance(value, Path) else value

    @model_validator(mode="after")
    def validate_storage(self) -> Self:
        # surface invalid endpoint when loading config rather than on use
        self.to_storage_config()
        return self

    def to_storage_config(self) -> StorageConfig:
        """
        Get storage config from this profile's fields.
        """
        return StorageConfig(
            endpoint=self.endpoint,
            credential=self.credential,
            backend=self.backend,
            timeout=self.timeout,
        )


def _validate_dir(value: Any) -> Any:
    """
    Coerce to path and ensure it exists.
    """
    if not isinstance(value, (str, Path)):
        # let pydantic handle type error
        return value

    path = Path(value).expanduser()

    if not path.is_dir():
        raise ValueError(f"folder does not exist: '{path}'")

    return path
