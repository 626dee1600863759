"""Pagination state definitions.

This module defines the per-partition structures the engine works with and
``advance``, the transition that interprets one page response.

State machine of a partition::

    START -> FETCHING -> ADVANCE      (rows on the page)        -> FETCHING
                      -> FOLLOW_LINK  (empty page, next link)   -> FETCHING
                      -> DONE         (empty page without link,
                                       threshold exceeded,
                                       zero matching rows,
                                       short final page)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any

from ...core.config import ExtractionConfig
from ...query.predicates import Predicate
from ..rest.transport import TableResponse


@dataclass(frozen=True)
class Partition:
    """Identifier sub-range extracted by one engine.

    Attributes:
        index: Zero-based position in the plan
        lower_bound: Inclusive hex prefix (None for the first partition)
        upper_bound: Exclusive hex prefix (None for the last partition)
        predicate: Identifier range filter (None when unbounded)
    """

    index: int
    lower_bound: str | None = None
    upper_bound: str | None = None
    predicate: Predicate | None = None


@dataclass(frozen=True)
class PageCursor:
    """Composite sort key of the last row consumed from the previous page."""

    last_order_value: str | None = None
    last_identifier: str | None = None

    @property
    def is_set(self) -> bool:
        return bool(self.last_order_value) and bool(self.last_identifier)


@dataclass
class ExtractionState:
    """Mutable state of one partition, owned by a single engine.

    Attributes:
        cursor: Keyset position after the last non-empty page
        continuation_url: Server supplied link to request next, if any
        page_number: Number of pages requested so far
        total_rows_seen: Rows delivered to the sink so far
        expected_total_rows: Count reported by the first page (None until then)
        should_continue: False once the partition reached DONE
        last_message: Why the last transition happened
        max_order_value: Highest ordering value seen in the partition
    """

    cursor: PageCursor = field(default_factory=PageCursor)
    continuation_url: str | None = None
    page_number: int = 0
    total_rows_seen: int = 0
    expected_total_rows: int | None = None
    should_continue: bool = True
    last_message: str = ""
    max_order_value: str | None = None

    def done(self, message: str) -> ExtractionState:
        return replace(self, should_continue=False, continuation_url=None, last_message=message)


def expected_page_count(total_rows: int, limit: int) -> int:
    """Number of pages needed for ``total_rows`` at ``limit`` rows per page."""
    return math.ceil(total_rows / limit)


def page_threshold(expected_total_rows: int, limit: int, factor: float) -> float:
    """Page number beyond which a partition is considered runaway."""
    return expected_page_count(expected_total_rows, limit) * factor


def row_value(row: dict[str, Any], name: str) -> str | None:
    """Read a field from a row.

    Rows requested with display values carry ``{"value": ..., "display_value":
    ...}`` objects instead of plain strings; the raw value is used.
    """
    value = row.get(name)
    if isinstance(value, dict):
        value = value.get("value")
    if value is None or value == "":
        return None
    return str(value)


def advance(
    state: ExtractionState,
    config: ExtractionConfig,
    response: TableResponse,
    page_number: int,
    expected_total_rows: int,
) -> ExtractionState:
    """Interpret one page response and return the state for the next request.

    Args:
        state: State before the page was requested
        config: Run configuration (limit, key fields, threshold)
        response: Response of the page request
        page_number: One-based number of the page just fetched
        expected_total_rows: Row count reported by the partition's first page

    Returns:
        New state. ``should_continue`` is False when the partition is done.
    """
    state = replace(
        state,
        page_number=page_number,
        expected_total_rows=expected_total_rows,
    )

    # the count is based on the raw query and does not follow access control
    if response.total_count == 0:
        return state.done("no rows match the query")

    # data is created faster than it is loaded
    threshold = page_threshold(expected_total_rows, config.limit, config.page_threshold)
    if page_number > threshold:
        return state.done(
            f"page threshold of {config.page_threshold} exceeded with page {page_number} "
            f"of expected {expected_page_count(expected_total_rows, config.limit)} pages"
        )

    rows = response.rows
    next_link = response.next_link
    message = f"page row count is {len(rows)}"

    if not rows:
        if next_link:
            # rows on this page are hidden by access control
            return replace(
                state,
                continuation_url=next_link,
                should_continue=True,
                last_message=f"{message}; rows hidden by access control, following next link",
            )
        return state.done(f"{message}; no next link, end of query")

    last_row = rows[-1]
    order_value = row_value(last_row, config.date_field)
    state = replace(
        state,
        cursor=PageCursor(
            last_order_value=order_value,
            last_identifier=row_value(last_row, config.sys_id_field),
        ),
        total_rows_seen=state.total_rows_seen + len(rows),
        max_order_value=_max_value(state.max_order_value, order_value),
        last_message=message,
    )

    if state.continuation_url is not None:
        if next_link:
            return replace(state, continuation_url=next_link, should_continue=True)
        return state.done(f"{message}; no next link, end of query")

    if len(rows) < config.limit and not next_link:
        return state.done(f"{message}; short page without next link, end of query")

    return replace(state, should_continue=True)


def _max_value(current: str | None, candidate: str | None) -> str | None:
    if candidate is None:
        return current
    if current is None:
        return candidate
    return max(current, candidate)
