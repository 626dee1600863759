"""REST runtime abstractions."""

from .http import HTTPClient
from .transport import TOTAL_COUNT_HEADER, TableResponse, TableTransport

__all__ = [
    "HTTPClient",
    "TableResponse",
    "TableTransport",
    "TOTAL_COUNT_HEADER",
]
