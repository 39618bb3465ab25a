"""Pydantic models describing engine configuration and access modes."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_URL = "https://docs.google.com/spreadsheets/d/{key}/pubhtml"
URL_PLACEHOLDER = "{key}"


class Mode(str, Enum):
    """Access modes exposed by the engine."""

    LOAD = "load"
    FETCH = "fetch"
    CACHE = "cache"
    UPDATE = "update"


class GhostsheetConfig(BaseModel):
    """Immutable option set shared by the fetcher, cache store and engine.

    ``cache_lifetime`` and ``timeout`` are expressed in seconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = DEFAULT_URL
    cache_dir: Path = Field(default=Path("cache"))
    cache_suffix: str = ".cache"
    cache_lifetime: float = Field(default=3600.0, ge=0)
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        if value.count(URL_PLACEHOLDER) != 1:
            raise ValueError(f"url must contain the {URL_PLACEHOLDER} placeholder exactly once")
        return value

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _coerce_dir(cls, value: Any) -> Path:
        return Path(value).expanduser()

    @field_validator("cache_suffix")
    @classmethod
    def _validate_suffix(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            raise ValueError("cache_suffix cannot contain path separators")
        return value

    def request_url(self, encoded_key: str) -> str:
        return self.url.replace(URL_PLACEHOLDER, encoded_key)


__all__ = ["DEFAULT_URL", "GhostsheetConfig", "Mode", "URL_PLACEHOLDER"]
