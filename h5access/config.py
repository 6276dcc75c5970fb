"""Process-wide settings of the h5access layer."""
from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, field_validator

from .policy import AnyStoragePolicy, Compact, Contiguous, StoragePolicy

PACKAGE_LOGGER = "h5access"


class AccessSettings(BaseModel):
    """Defaults used when the caller does not pass an explicit choice."""

    model_config = ConfigDict(extra="forbid")

    scalar_storage: AnyStoragePolicy = Compact()
    """Storage policy for newly created rank-0 datasets."""

    array_storage: AnyStoragePolicy = Contiguous()
    """Storage policy for newly created datasets of rank >= 1."""

    log_level: str = "WARNING"
    """Level of the `h5access` package logger."""

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level: {v}")
        return v

    def storage_for(self, rank: int) -> StoragePolicy:
        return self.scalar_storage if rank == 0 else self.array_storage


_settings = AccessSettings()


def get_settings() -> AccessSettings:
    return _settings


def configure(**kwargs) -> AccessSettings:
    """Override some settings (validated) and return the resulting settings."""
    global _settings
    merged = {**dict(_settings), **kwargs}
    _settings = AccessSettings(**merged)
    logging.getLogger(PACKAGE_LOGGER).setLevel(_settings.log_level)
    return _settings


def reset() -> AccessSettings:
    """Restore the default settings."""
    global _settings
    _settings = AccessSettings()
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.NOTSET)
    return _settings
