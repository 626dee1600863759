"""HTTP client helper."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ...core.exceptions import ProviderError
from .transport import TableResponse

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Accept": "application/json"}


class HTTPClient:
    """Async table API client on top of an aiohttp session.

    Implements ``TableTransport``. Credentials are supplied by the caller;
    this class never reads them from the environment.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        *,
        username: str | None = None,
        password: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.auth = aiohttp.BasicAuth(username, password or "") if username else None
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout, auth=self.auth, headers=self.headers
            )
        return self._session

    async def get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
    ) -> TableResponse:
        """GET request.

        Raises:
            ProviderError: On any non-2xx status.
        """
        # If base_url is set and url is relative, combine them
        if self.base_url and not url.startswith("http"):
            url = f"{self.base_url}{url}"

        async with self.session.get(url, params=params) as response:
            if response.status >= 400:
                detail = await response.text()
                logger.debug(
                    "table_request_failed",
                    extra={"url": url, "status": response.status},
                )
                raise ProviderError(
                    f"GET {url} failed with status {response.status}: {detail[:200]}",
                    status_code=response.status,
                    url=url,
                )
            body = await response.json(content_type=None)
            links = {str(rel): str(link.get("url")) for rel, link in response.links.items()}
            return TableResponse(
                body=body,
                headers=dict(response.headers),
                links=links,
                url=str(response.url),
            )

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
