"""High-level extraction API."""

from .table_api import TableAPI, increment, snapshot

__all__ = ["TableAPI", "snapshot", "increment"]
