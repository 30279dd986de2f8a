import logging
from typing import Mapping, Optional, Protocol

import httpx

from mobilede_feed.core.config import get_settings
from mobilede_feed.core.exceptions import FetchError

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, url: str, headers: Optional[Mapping[str, str]] = None) -> bytes:  # pragma: no cover - interface
        """Return the raw response body for ``url`` or raise FetchError."""


class HttpFetcher:
    def __init__(self, client: Optional[httpx.Client] = None, timeout: Optional[float] = None) -> None:
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout

    def _client_or_default(self) -> httpx.Client:
        if self._client:
            return self._client
        settings = get_settings()
        self._client = httpx.Client(
            headers={"User-Agent": settings.user_agent},
            timeout=self.timeout or settings.request_timeout,
            follow_redirects=True,
        )
        return self._client

    def fetch(self, url: str, headers: Optional[Mapping[str, str]] = None) -> bytes:
        logger.debug("Fetching %s", url)
        try:
            response = self._client_or_default().get(url, headers=dict(headers or {}))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc
        return response.content

    def close(self) -> None:
        if self._client and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
