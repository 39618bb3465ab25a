"""Engine composing fetcher, parser and cache store into the four access modes."""

from __future__ import annotations

from typing import Any, Callable

import structlog

from .config import GhostsheetConfig, Mode
from .engine import Fetcher, SheetParser, SpreadsheetDocument
from .errors import CacheMissError, CacheWriteError, ConfigurationError, GhostsheetError, ParseError
from .infra import CacheStore
from .settlement import Settlement


class Ghostsheet:
    """Fetch and cache published spreadsheet data.

    Every mode takes a key and returns a :class:`Settlement` that resolves
    with a :class:`SpreadsheetDocument` or rejects with a
    :class:`GhostsheetError`.

    - ``load``: fresh cache entry if any, else fetch and cache (best effort).
    - ``fetch``: always fetch; the cache is not touched.
    - ``cache``: stored entry regardless of age; ``CacheMissError`` if absent.
    - ``update``: fetch and cache; a failed write rejects with ``CacheWriteError``.
    """

    def __init__(
        self,
        config: GhostsheetConfig | None = None,
        fetcher: Fetcher | None = None,
        store: CacheStore | None = None,
        parser: SheetParser | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config or GhostsheetConfig()
        self.logger = logger or structlog.get_logger("ghostsheet.engine")
        self.fetcher = fetcher or Fetcher(self.config)
        self.store = store or CacheStore(self.config)
        self.parser = parser or SheetParser()
        self._modes: dict[Mode, Callable[[str], Settlement]] = {
            Mode.LOAD: self.load,
            Mode.FETCH: self.fetch,
            Mode.CACHE: self.cache,
            Mode.UPDATE: self.update,
        }

    def __enter__(self) -> "Ghostsheet":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.fetcher.close()

    # ------------------------------------------------------------------
    def get(self, key: str, mode: Mode | str = Mode.LOAD) -> Settlement:
        return self._modes[self.resolve_mode(mode)](key)

    @staticmethod
    def resolve_mode(mode: Mode | str) -> Mode:
        try:
            return Mode(mode)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown mode: {mode}") from exc

    def load(self, key: str) -> Settlement:
        settlement = Settlement()
        cached = self.store.read(key)
        if cached is not None:
            self.logger.info("cache_hit", key=key)
            return settlement.resolve(cached)

        def _store(document: SpreadsheetDocument) -> None:
            if not self.store.write(key, document):
                self.logger.warning("cache_write_skipped", key=key)
            settlement.resolve(document)

        self.fetch(key).then(_store, settlement.reject)
        return settlement

    def fetch(self, key: str) -> Settlement:
        settlement = Settlement()

        def _parse(tree: Any) -> None:
            try:
                document = self.parser.parse(key, tree)
            except ParseError as exc:
                self.logger.warning("parse_failed", key=key, error=str(exc))
                settlement.reject(exc)
                return
            settlement.resolve(document)

        self.fetcher.fetch(key).then(_parse, settlement.reject)
        return settlement

    def cache(self, key: str) -> Settlement:
        settlement = Settlement()
        cached = self.store.read(key, bypass_freshness=True)
        if cached is None:
            return settlement.reject(CacheMissError(key))
        return settlement.resolve(cached)

    def update(self, key: str) -> Settlement:
        settlement = Settlement()

        def _store(document: SpreadsheetDocument) -> None:
            if self.store.write(key, document):
                settlement.resolve(document)
            else:
                settlement.reject(CacheWriteError(key))

        self.fetch(key).then(_store, settlement.reject)
        return settlement


def envelope(settlement: Settlement) -> dict[str, Any]:
    """Render a settled settlement as the JSON body served to web clients."""

    if settlement.resolved:
        document = settlement.args[0]
        return {"status": "success", "data": document.model_dump(mode="json")}
    if settlement.rejected:
        error = settlement.args[0] if settlement.args else None
        message = str(error) if isinstance(error, GhostsheetError) else "Unknown error"
        return {"status": "error", "message": message}
    return {"status": "pending"}


__all__ = ["Ghostsheet", "envelope"]
