"""HTTP retrieval of published spreadsheet documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import quote

import httpx
import structlog
from selectolax.parser import HTMLParser

from ..config import GhostsheetConfig
from ..errors import FetchError
from ..settlement import Settlement


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)

    def tree(self) -> HTMLParser:
        return HTMLParser(self.text)


class Fetcher:
    """Retrieve the published HTML for an identifier through a templated URL."""

    def __init__(
        self,
        config: GhostsheetConfig,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("ghostsheet.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True, timeout=config.timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def build_url(self, key: str) -> str:
        return self.config.request_url(quote(key, safe=""))

    def fetch(self, key: str) -> Settlement:
        """Settle with the navigable document tree, or reject with ``FetchError``."""

        settlement = Settlement()
        url = self.build_url(key)
        try:
            response = self.request(url)
        except FetchError as exc:
            self.logger.warning("fetch_failed", key=key, url=url, error=str(exc))
            return settlement.reject(exc)
        self.logger.info("fetch_succeeded", key=key, url=response.url, status=response.status_code)
        return settlement.resolve(response.tree())

    def request(self, url: str) -> FetchResponse:
        try:
            response = self._client.request(method="GET", url=url, timeout=self.config.timeout)
        except httpx.TimeoutException as exc:
            raise FetchError(f"Timed out fetching resource: {url}", url=url) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Failed to fetch resource: {url}", url=url) from exc
        if self._is_failure(response):
            raise FetchError(
                f"Unexpected status {response.status_code}: {url}",
                url=url,
                status_code=response.status_code,
            )
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
            raw=response,
        )

    @staticmethod
    def _is_failure(response: httpx.Response) -> bool:
        status_code = getattr(response, "status_code", 0)
        return not 200 <= status_code < 300


__all__ = ["Fetcher", "FetchResponse"]
