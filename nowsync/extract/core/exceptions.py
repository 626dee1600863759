"""Custom exception hierarchy."""

from __future__ import annotations


class ExtractError(Exception):
    """Base exception for all library errors."""

    pass


class ConfigurationError(ExtractError, ValueError):
    """Extraction options are missing or invalid.

    Raised synchronously, before any request is issued to the source.
    """

    def __init__(self, message: str, option: str | None = None) -> None:
        super().__init__(message)
        self.option = option


class ProviderError(ExtractError):
    """Error from the remote table API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class ResponseFormatError(ProviderError):
    """Response body does not have the expected shape."""

    pass
