"""Error taxonomy surfaced through settlement rejections."""

from __future__ import annotations


class GhostsheetError(Exception):
    """Base class for every failure the engine reports."""


class ConfigurationError(GhostsheetError):
    """Unknown mode or option, or an invalid option value."""


class FetchError(GhostsheetError):
    """Transport failure, non-success status or timeout during retrieval."""

    def __init__(self, message: str, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class CacheMissError(GhostsheetError):
    """No cache entry exists for the requested key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Cache file not found: {key}")
        self.key = key


class CacheWriteError(GhostsheetError):
    """A cache entry could not be persisted."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Failed to save cache: {key}")
        self.key = key


class ParseError(GhostsheetError):
    """The retrieved document could not be interpreted."""


__all__ = [
    "CacheMissError",
    "CacheWriteError",
    "ConfigurationError",
    "FetchError",
    "GhostsheetError",
    "ParseError",
]
