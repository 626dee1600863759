"""Partitioned keyset pagination.

This module provides the pagination engine used for bulk extraction: the
identifier range planner, the per-partition state machine and the engine
that drives it.

Architecture:
    The pagination layer consists of:
    - definitions.py: Partition, PageCursor, ExtractionState and ``advance``
    - planners.py: Identifier range planning (RangePlanner)
    - executors.py: Per-partition page loop (PaginationEngine)
    - telemetry.py: Structured logging
"""

from __future__ import annotations

from .definitions import (
    ExtractionState,
    PageCursor,
    Partition,
    advance,
    expected_page_count,
    page_threshold,
    row_value,
)
from .executors import PageSink, PaginationEngine, partition_base_predicate
from .planners import KEYSPACE_MAX, KEYSPACE_MIN, RangePlanner

__all__ = [
    "Partition",
    "PageCursor",
    "ExtractionState",
    "advance",
    "expected_page_count",
    "page_threshold",
    "row_value",
    "PaginationEngine",
    "PageSink",
    "partition_base_predicate",
    "RangePlanner",
    "KEYSPACE_MIN",
    "KEYSPACE_MAX",
]
