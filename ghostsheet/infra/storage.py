"""File-backed cache of parsed spreadsheets with mtime-based freshness."""

from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path
from typing import Callable
from urllib.parse import quote

import structlog
from pydantic import ValidationError

from ..config import GhostsheetConfig
from ..engine.models import SpreadsheetDocument


def _file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class CacheStore:
    """Persist one JSON document per key under ``cache_dir``.

    The file's modification time is the only freshness signal. Writes go to a
    temporary file in the same directory and are renamed into place, so a
    reader sees either the previous entry or the complete new one.
    """

    def __init__(
        self,
        config: GhostsheetConfig,
        clock: Callable[[], float] = time.time,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.cache_dir = config.cache_dir
        self.suffix = config.cache_suffix
        self.lifetime = config.cache_lifetime
        self._clock = clock
        self._mode = _file_mode()
        self.logger = logger or structlog.get_logger("ghostsheet.cache")

    def path_for(self, key: str) -> Path:
        return self.cache_dir / f"{quote(key, safe='')}{self.suffix}"

    def read(self, key: str, bypass_freshness: bool = False) -> SpreadsheetDocument | None:
        path = self.path_for(key)
        try:
            modified = path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as exc:
            self.logger.warning("cache_stat_failed", key=key, path=str(path), error=str(exc))
            return None
        age = self._clock() - modified
        if not bypass_freshness and age > self.lifetime:
            self.logger.debug("cache_stale", key=key, age=round(age, 3), lifetime=self.lifetime)
            return None
        try:
            document = SpreadsheetDocument.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as exc:
            self.logger.warning("cache_unreadable", key=key, path=str(path), error=str(exc))
            return None
        self.logger.debug("cache_hit", key=key, age=round(age, 3))
        return document

    def write(self, key: str, document: SpreadsheetDocument) -> bool:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=self.cache_dir)
            with os.fdopen(fd, "wb") as stream:
                stream.write(document.model_dump_json().encode("utf-8"))
                stream.flush()
                os.fsync(stream.fileno())
            # mkstemp creates 0600 files
            os.chmod(tmp_name, self._mode)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            self.logger.warning("cache_write_failed", key=key, path=str(path), error=str(exc))
            return False
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        self.logger.debug("cache_written", key=key, path=str(path))
        return True


__all__ = ["CacheStore"]
