"""Structured logging for pagination runs.

This module provides telemetry hooks for the planner, the engines and the
orchestrator, emitting structured logs for observability.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def log_partition_plan(
    *,
    requested: int | None,
    effective: int,
    block_size: int,
    total_partitions: int,
) -> None:
    """Log partition plan creation.

    Args:
        requested: Thread count asked for by the caller
        effective: Thread count after clamping
        block_size: Number of hex prefixes per partition
        total_partitions: Number of partitions planned
    """
    logger.debug(
        "partition_plan_created",
        extra={
            "requested_threads": requested,
            "effective_threads": effective,
            "block_size": block_size,
            "total_partitions": total_partitions,
        },
    )


def log_page_fetched(
    *,
    table: str,
    partition_index: int,
    page_number: int,
    page_row_count: int,
    total_row_count: int,
    expected_row_count: int | None,
    expected_page_count: int | None,
    latency_ms: float | None = None,
) -> None:
    """Log one fetched page."""
    logger.info(
        "page_fetched",
        extra={
            "table": table,
            "partition_index": partition_index,
            "page_number": page_number,
            "page_row_count": page_row_count,
            "total_row_count": total_row_count,
            "expected_row_count": expected_row_count,
            "expected_page_count": expected_page_count,
            "latency_ms": latency_ms,
        },
    )


def log_page_error(
    *,
    table: str,
    partition_index: int,
    page_number: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a failed page request or sink call."""
    logger.error(
        "page_error",
        extra={
            "table": table,
            "partition_index": partition_index,
            "page_number": page_number,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_partition_complete(
    *,
    table: str,
    partition_index: int,
    pages: int,
    total_row_count: int,
    message: str,
) -> None:
    """Log the end of a partition and the reason it stopped."""
    logger.info(
        "partition_complete",
        extra={
            "table": table,
            "partition_index": partition_index,
            "pages": pages,
            "total_row_count": total_row_count,
            "stop_reason": message,
        },
    )


def log_run_complete(
    *,
    table: str,
    partitions: int,
    total_rows: int,
    total_pages: int,
    total_latency_ms: float | None = None,
) -> None:
    """Log completion of a whole run."""
    logger.info(
        "run_complete",
        extra={
            "table": table,
            "partitions": partitions,
            "total_rows": total_rows,
            "total_pages": total_pages,
            "total_latency_ms": total_latency_ms,
        },
    )


def log_cursor_not_advanced(
    *,
    table: str,
    partition_index: int,
    page_number: int,
    last_order_value: str | None,
    last_identifier: str | None,
) -> None:
    """Log a page whose last row has no usable key; the next page repeats it."""
    logger.warning(
        "cursor_not_advanced",
        extra={
            "table": table,
            "partition_index": partition_index,
            "page_number": page_number,
            "last_order_value": last_order_value,
            "last_identifier": last_identifier,
        },
    )
