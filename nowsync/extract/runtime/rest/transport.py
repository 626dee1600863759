"""Transport boundary between the pagination engine and the table API.

The engine never talks to aiohttp directly. It issues GET requests through
any object implementing ``TableTransport`` and reads three things from the
result: the rows in the body, the total-count header and the ``next`` link.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from ...core.exceptions import ResponseFormatError

TOTAL_COUNT_HEADER = "x-total-count"


@dataclass(frozen=True)
class TableResponse:
    """Decoded response of a table API request.

    Attributes:
        body: Parsed JSON body
        headers: Response headers (looked up case-insensitively)
        links: ``rel`` to URL mapping parsed from the ``Link`` header
        url: Final request URL, if known
    """

    body: Any
    headers: Mapping[str, str] = field(default_factory=dict)
    links: Mapping[str, str] = field(default_factory=dict)
    url: str | None = None

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def result(self) -> Any:
        if not isinstance(self.body, Mapping) or "result" not in self.body:
            raise ResponseFormatError("Response body has no 'result' member", url=self.url)
        return self.body["result"]

    @property
    def rows(self) -> list[dict[str, Any]]:
        """Rows of a table query, in the order the source returned them."""
        result = self.result
        if not isinstance(result, list):
            raise ResponseFormatError("Table response 'result' is not a list", url=self.url)
        return result

    @property
    def total_count(self) -> int:
        """Row count reported by the source for the query.

        The count is computed before access control filtering, so it can be
        larger than the number of rows the caller is allowed to see.
        """
        value = self.header(TOTAL_COUNT_HEADER)
        if value is None or not value.strip():
            return 0
        try:
            return int(value)
        except ValueError as e:
            raise ResponseFormatError(
                f"Invalid {TOTAL_COUNT_HEADER} header: {value!r}", url=self.url
            ) from e

    @property
    def next_link(self) -> str | None:
        return self.links.get("next") or None


class TableTransport(Protocol):
    """Anything that can issue an authenticated GET against the table API.

    Implementations are expected to raise on failure. The engine does not
    retry; retries, if any, belong to the transport.
    """

    async def get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
    ) -> TableResponse:
        """GET ``url`` and return the decoded response."""
        ...
