"""Partition planning for parallel extraction.

This module provides the RangePlanner class that splits the identifier
keyspace of a table into contiguous ranges, one per concurrent engine.
"""

from __future__ import annotations

import math

from ...core.config import DEFAULT_SYS_ID_FIELD, MAX_THREADS
from ...query.predicates import Comparison, Operator, Predicate, conjunction
from .definitions import Partition
from .telemetry import log_partition_plan

# Identifiers are hex strings; partitions split on their first byte.
KEYSPACE_MIN = 0
KEYSPACE_MAX = 255


class RangePlanner:
    """Plans identifier ranges for concurrent pagination.

    The keyspace is the range of single-byte hex prefixes ``[0, 255]``. Each
    partition covers ``ceil(255 / n)`` prefixes; the first has no lower bound
    and the last has no upper bound, so together they cover every identifier
    exactly once.
    """

    def __init__(self, identifier_field: str = DEFAULT_SYS_ID_FIELD) -> None:
        self._identifier_field = identifier_field

    @staticmethod
    def effective_thread_count(thread_count: int | None) -> int:
        """Normalize a requested thread count to ``[1, MAX_THREADS]``."""
        count = abs(int(thread_count)) if thread_count else 1
        return max(1, min(count, MAX_THREADS))

    def plan(self, thread_count: int | None = 1) -> list[Partition]:
        """Split the keyspace into up to ``thread_count`` partitions.

        Args:
            thread_count: Requested number of partitions; ``abs()`` is taken,
                falsy means 1 and values above MAX_THREADS are clamped.

        Returns:
            Partitions ordered by lower bound.
        """
        count = self.effective_thread_count(thread_count)
        block_size = math.ceil(KEYSPACE_MAX / count)

        partitions: list[Partition] = []
        low = KEYSPACE_MIN
        while len(partitions) < count:
            high = low + block_size
            lower = _hex(low) if low > KEYSPACE_MIN else None
            upper = _hex(high) if high < KEYSPACE_MAX else None
            partitions.append(
                Partition(
                    index=len(partitions),
                    lower_bound=lower,
                    upper_bound=upper,
                    predicate=self._range_predicate(lower, upper),
                )
            )
            # blocks can overshoot the keyspace before the requested count
            # is reached; the unbounded partition already covers the rest
            if upper is None:
                break
            low = high

        log_partition_plan(
            requested=thread_count,
            effective=count,
            block_size=block_size,
            total_partitions=len(partitions),
        )
        return partitions

    def _range_predicate(self, lower: str | None, upper: str | None) -> Predicate | None:
        return conjunction(
            Comparison(self._identifier_field, Operator.GE, lower) if lower else None,
            Comparison(self._identifier_field, Operator.LT, upper) if upper else None,
        )


def _hex(value: int) -> str:
    # two digits so that bounds compare lexicographically with identifiers
    return format(value, "02x")
