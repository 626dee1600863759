"""Page query construction for keyset pagination.

Each page after the first asks for the rows strictly after the last row of
the previous page under the composite order ``(ordering field, identifier)``:

    (ordering > v AND base)  OR  (ordering = v AND identifier > id AND base)

Rows already delivered have a key at or below the cursor and are excluded.
Rows inserted while the scan runs either sort after the cursor, and are
picked up, or sort before it and are left for the next incremental run.
Offsets are never used, so inserts do not shift pages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode

from ..core.config import ExtractionConfig
from .predicates import Comparison, Operator, Predicate, conjunction, disjunction, serialize

if TYPE_CHECKING:
    from ..runtime.pagination.definitions import PageCursor


def keyset_predicate(
    base: Predicate | None,
    ordering_field: str,
    identifier_field: str,
    cursor: PageCursor | None,
) -> Predicate | None:
    """Filter selecting the rows after ``cursor`` that also match ``base``."""
    if cursor is None or not cursor.is_set:
        return base

    after_order = conjunction(
        Comparison(ordering_field, Operator.GT, str(cursor.last_order_value)),
        base,
    )
    same_order_after_id = conjunction(
        Comparison(ordering_field, Operator.EQ, str(cursor.last_order_value)),
        Comparison(identifier_field, Operator.GT, str(cursor.last_identifier)),
        base,
    )
    return disjunction(after_order, same_order_after_id)


def build_query(
    base: Predicate | None,
    ordering_field: str,
    identifier_field: str,
    cursor: PageCursor | None = None,
) -> str:
    """Encoded query for the next page, sorted by ordering field then identifier."""
    predicate = keyset_predicate(base, ordering_field, identifier_field, cursor)
    return serialize(predicate, order_by=(ordering_field, identifier_field))


class QueryBuilder:
    """Builds page request URLs for one partition.

    Args:
        config: Run configuration (endpoint, fields, limit, key fields)
        base: Partition base predicate (partition range AND run query)
    """

    def __init__(self, config: ExtractionConfig, base: Predicate | None = None) -> None:
        self._config = config
        self._base = base

    @property
    def base(self) -> Predicate | None:
        return self._base

    def build_query(self, cursor: PageCursor | None = None) -> str:
        return build_query(
            self._base,
            self._config.date_field,
            self._config.sys_id_field,
            cursor,
        )

    def build_url(self, cursor: PageCursor | None = None) -> str:
        """Full table request URL for the page after ``cursor``."""
        params = {
            "sysparm_fields": ",".join(self._config.fields),
            "sysparm_query": self.build_query(cursor),
            "sysparm_limit": str(self._config.limit),
            **self._config.extra_params,
        }
        return f"{self._config.table_url}?{urlencode(params, quote_via=quote, safe=',')}"
