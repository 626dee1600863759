"""Pagination engine for a single partition.

This module provides the PaginationEngine class that drives one partition's
state machine to completion: build the page request, fetch it, hand the rows
to the sink, interpret the response, repeat.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import Any

from ...core.config import ExtractionConfig
from ...models import PageSnapshot, PartitionLog
from ...query.builder import QueryBuilder
from ...query.predicates import Predicate, conjunction, raw, serialize
from ..rest.transport import TableTransport
from .definitions import ExtractionState, Partition, advance, expected_page_count
from .telemetry import (
    log_cursor_not_advanced,
    log_page_error,
    log_page_fetched,
    log_partition_complete,
)

Row = dict[str, Any]
PageSink = Callable[[list[Row]], Awaitable[None]] | Callable[[list[Row]], None]


def partition_base_predicate(partition: Partition, config: ExtractionConfig) -> Predicate | None:
    """Partition range AND the run's base query."""
    return conjunction(partition.predicate, raw(config.query))


class PaginationEngine:
    """Extracts one partition page by page.

    Pages are strictly sequential. The sink is awaited before the next
    request is built, so the source is never queried faster than the sink
    absorbs rows. Transport and sink errors are logged and propagate; there
    is no retry and no partial result.
    """

    def __init__(self, config: ExtractionConfig, transport: TableTransport) -> None:
        """Initialize pagination engine.

        Args:
            config: Validated run configuration
            transport: Table API transport used for every page request
        """
        self._config = config
        self._transport = transport

    async def run(self, partition: Partition, sink: PageSink) -> PartitionLog:
        """Extract every row of ``partition``.

        Args:
            partition: Identifier range to extract
            sink: Called once per non-empty page with that page's rows

        Returns:
            PartitionLog with one snapshot per request
        """
        base = partition_base_predicate(partition, self._config)
        builder = QueryBuilder(self._config, base)

        state = ExtractionState()
        expected_rows: int | None = None
        snapshots: list[PageSnapshot] = []

        while state.should_continue:
            page_number = state.page_number + 1
            # a continuation link bypasses the keyset query
            url = state.continuation_url or builder.build_url(state.cursor)

            started = perf_counter()
            try:
                response = await self._transport.get(url)
                if expected_rows is None:
                    # point-in-time estimate, never refreshed
                    expected_rows = response.total_count
                rows = response.rows
                if rows:
                    await self._deliver(sink, rows)
            except Exception as e:
                log_page_error(
                    table=self._config.table,
                    partition_index=partition.index,
                    page_number=page_number,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise
            latency_ms = (perf_counter() - started) * 1000.0

            state = advance(state, self._config, response, page_number, expected_rows)
            if (
                rows
                and state.should_continue
                and state.continuation_url is None
                and not state.cursor.is_set
            ):
                log_cursor_not_advanced(
                    table=self._config.table,
                    partition_index=partition.index,
                    page_number=page_number,
                    last_order_value=state.cursor.last_order_value,
                    last_identifier=state.cursor.last_identifier,
                )
            snapshots.append(
                PageSnapshot(
                    page_number=page_number,
                    row_count=len(rows),
                    request_url=url,
                    message=state.last_message,
                )
            )
            log_page_fetched(
                table=self._config.table,
                partition_index=partition.index,
                page_number=page_number,
                page_row_count=len(rows),
                total_row_count=state.total_rows_seen,
                expected_row_count=expected_rows,
                expected_page_count=expected_page_count(expected_rows, self._config.limit),
                latency_ms=latency_ms,
            )

        log_partition_complete(
            table=self._config.table,
            partition_index=partition.index,
            pages=len(snapshots),
            total_row_count=state.total_rows_seen,
            message=state.last_message,
        )

        return PartitionLog(
            index=partition.index,
            lower_bound=partition.lower_bound,
            upper_bound=partition.upper_bound,
            query=serialize(base) or None,
            pages=tuple(snapshots),
            total_row_count=state.total_rows_seen,
            expected_row_count=expected_rows,
            expected_page_count=(
                expected_page_count(expected_rows, self._config.limit)
                if expected_rows is not None
                else None
            ),
            max_order_value=state.max_order_value,
        )

    @staticmethod
    async def _deliver(sink: PageSink, rows: list[Row]) -> None:
        result = sink(rows)
        if inspect.isawaitable(result):
            await result
