"""TableAPI facade for snapshot and incremental extraction.

Architecture:
    This module implements the Facade pattern over the runtime components.
    TableAPI handles:
    - Option validation (``build_config``) before any request
    - Incremental reconciliation before an incremental run
    - Delegation to the Orchestrator for the partitioned run
    - Transport lifecycle (an owned HTTPClient is closed with the facade)

Design Decisions:
    - Transport injection allows testing without a network
    - Options are plain mappings so callers can keep using the table API's
      camelCase option names (``dateField``, ``maxDateValue``, ...)
    - An aborted incremental run returns None rather than raising: a reset
      source is an expected condition the caller answers with a snapshot

See Also:
    - Orchestrator: Runs the partitions
    - IncrementalReconciler: High-water mark check
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.config import ExtractionConfig, build_config
from ..models import RunSummary
from ..runtime.incremental import IncrementalReconciler, ResumeOutcome
from ..runtime.orchestrator import Orchestrator
from ..runtime.pagination import PageSink
from ..runtime.rest import HTTPClient, TableTransport

logger = logging.getLogger(__name__)

MAX_DATE_OPTIONS = ("max_date_value", "maxDateValue")


async def _discard(rows: list[dict[str, Any]]) -> None:
    return None


class TableAPI:
    """High-level entry point for bulk table extraction.

    Example:
        >>> async with TableAPI(username="admin", password="secret") as api:
        ...     summary = await api.snapshot(
        ...         {"uri": "https://instance.example.com", "table": "incident", "threads": 4},
        ...         sink=store_rows,
        ...     )
        ...     next_mark = summary.max_order_value
    """

    def __init__(
        self,
        transport: TableTransport | None = None,
        *,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the TableAPI.

        Args:
            transport: Optional transport (creates an HTTPClient if not provided)
            username: Basic auth user for the created HTTPClient
            password: Basic auth password for the created HTTPClient
            timeout: Request timeout in seconds for the created HTTPClient
        """
        self._owns_transport = transport is None
        self._transport: TableTransport = transport or HTTPClient(
            timeout=timeout, username=username, password=password
        )
        self._orchestrator = Orchestrator(self._transport)
        self._reconciler = IncrementalReconciler(self._transport)

    async def snapshot(
        self,
        options: Mapping[str, Any] | ExtractionConfig,
        sink: PageSink | None = None,
    ) -> RunSummary:
        """Extract every row matching the options' base query.

        Raises:
            ConfigurationError: If ``uri`` or ``table`` is missing.
        """
        config = options if isinstance(options, ExtractionConfig) else build_config(options)
        logger.info(
            "Snapshot load",
            extra={"table": config.table, "query": config.query, "threads": config.threads},
        )
        return await self._orchestrator.run(config, sink or _discard)

    async def reconcile(
        self,
        options: Mapping[str, Any],
        max_date_value: str | None = None,
    ) -> tuple[ExtractionConfig, ResumeOutcome]:
        """Validate incremental options and check the high-water mark."""
        config = build_config(options)
        if max_date_value is None:
            max_date_value = next(
                (options[k] for k in MAX_DATE_OPTIONS if options.get(k)), None
            )
        outcome = await self._reconciler.resume_predicate(config, max_date_value)
        return config, outcome

    async def increment(
        self,
        options: Mapping[str, Any],
        sink: PageSink | None = None,
        *,
        max_date_value: str | None = None,
    ) -> RunSummary | None:
        """Extract the rows changed after the caller's high-water mark.

        The mark is ``max_date_value`` or the ``maxDateValue`` option.

        Returns:
            RunSummary, or None when the source looks reset/cloned and the
            caller should run a snapshot instead.

        Raises:
            ConfigurationError: If ``uri``, ``table`` or the mark is missing.
        """
        config, outcome = await self.reconcile(options, max_date_value)
        logger.info(
            "Increment load",
            extra={
                "table": config.table,
                "max_date_value": outcome.prior_max_value,
                "source_max_value": outcome.source_max_value,
            },
        )
        if outcome.aborted:
            return None
        return await self._orchestrator.run(config.with_query(outcome.query), sink or _discard)

    async def close(self) -> None:
        """Close the transport if this facade created it."""
        if self._owns_transport and isinstance(self._transport, HTTPClient):
            await self._transport.close()

    async def __aenter__(self) -> TableAPI:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()


async def snapshot(
    options: Mapping[str, Any],
    sink: PageSink | None = None,
    *,
    transport: TableTransport | None = None,
    username: str | None = None,
    password: str | None = None,
) -> RunSummary:
    """One-shot snapshot load; see ``TableAPI.snapshot``."""
    async with TableAPI(transport, username=username, password=password) as api:
        return await api.snapshot(options, sink)


async def increment(
    options: Mapping[str, Any],
    sink: PageSink | None = None,
    *,
    transport: TableTransport | None = None,
    username: str | None = None,
    password: str | None = None,
) -> RunSummary | None:
    """One-shot incremental load; see ``TableAPI.increment``."""
    async with TableAPI(transport, username=username, password=password) as api:
        return await api.increment(options, sink)
