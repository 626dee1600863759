"""Incremental load reconciliation.

Before an incremental run, the caller's high-water mark (the largest
ordering value it has already stored) is checked against the largest value
the source currently holds. A source whose maximum is *below* the caller's
mark has been reset or cloned from an older copy; continuing from the mark
could silently skip rows written again below it, so the run is aborted and
the caller should do a full snapshot instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from urllib.parse import quote, urlencode

from ..core.config import ExtractionConfig
from ..core.exceptions import ConfigurationError, ResponseFormatError
from ..query.predicates import Comparison, Operator, Predicate, conjunction, raw, serialize
from .rest.transport import TableTransport

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ResumeOutcome:
    """Result of reconciling a high-water mark with the source.

    Attributes:
        predicate: Base predicate for the incremental run (None when aborted)
        prior_max_value: Caller's high-water mark in the source's timestamp format
        source_max_value: Maximum ordering value reported by the source
        aborted: True when the source looks reset/cloned
    """

    predicate: Predicate | None
    prior_max_value: str
    source_max_value: str | None = None
    aborted: bool = False

    @property
    def query(self) -> str | None:
        """Encoded form of ``predicate``."""
        return serialize(self.predicate) or None


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse a source timestamp (``YYYY-MM-DD HH:MM:SS``, ISO 8601 accepted).

    Aware values are converted to naive UTC, the form the source reports.
    Datetimes are normalized the same way.

    Raises:
        ValueError: If ``value`` is not a timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


class IncrementalReconciler:
    """Computes the resumption predicate of an incremental run."""

    def __init__(self, transport: TableTransport) -> None:
        self._transport = transport

    def stats_url(self, config: ExtractionConfig) -> str:
        """Aggregate request for the max ordering value under the base query."""
        params = {"sysparm_max_fields": config.date_field}
        if config.query:
            params["sysparm_query"] = config.query
        return f"{config.stats_url}?{urlencode(params, quote_via=quote, safe=',')}"

    async def source_max_value(self, config: ExtractionConfig) -> str | None:
        """Ask the source for its current max ordering value."""
        response = await self._transport.get(self.stats_url(config))
        result = response.result
        try:
            stats = result["stats"]
        except (KeyError, TypeError) as e:
            raise ResponseFormatError(
                "Stats response has no 'stats' member", url=response.url
            ) from e
        maxima = stats.get("max") if isinstance(stats, Mapping) else None
        if not isinstance(maxima, Mapping):
            return None
        value = maxima.get(config.date_field)
        return str(value) if value else None

    async def resume_predicate(
        self,
        config: ExtractionConfig,
        prior_max_value: str | datetime | None,
    ) -> ResumeOutcome:
        """Reconcile ``prior_max_value`` against the source.

        Args:
            config: Run configuration; its ``query`` is the base predicate
            prior_max_value: Caller's high-water mark

        Returns:
            ResumeOutcome; ``aborted`` is set when the source's maximum is
            older than the caller's mark.

        Raises:
            ConfigurationError: If ``prior_max_value`` is missing or not a
                timestamp. Raised before any request.
        """
        if not prior_max_value:
            raise ConfigurationError("maxDateValue not specified", option="maxDateValue")
        try:
            prior = parse_timestamp(prior_max_value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid maxDateValue: {prior_max_value!r}", option="maxDateValue"
            ) from e
        # the source only understands its own naive UTC format
        prior_max_value = prior.strftime(TIMESTAMP_FORMAT)

        source_max = await self.source_max_value(config)
        if source_max is None:
            logger.info(
                "No records found for %s.%s",
                config.table,
                config.date_field,
                extra={"table": config.table, "query": config.query},
            )
        elif prior > self._source_timestamp(source_max, config):
            logger.warning(
                "Instance potentially cloned, do a full refresh",
                extra={
                    "table": config.table,
                    "prior_max_value": prior_max_value,
                    "source_max_value": source_max,
                },
            )
            return ResumeOutcome(
                predicate=None,
                prior_max_value=prior_max_value,
                source_max_value=source_max,
                aborted=True,
            )

        predicate = conjunction(
            Comparison(config.date_field, Operator.GT, prior_max_value),
            raw(config.query),
        )
        return ResumeOutcome(
            predicate=predicate,
            prior_max_value=prior_max_value,
            source_max_value=source_max,
        )

    @staticmethod
    def _source_timestamp(value: str, config: ExtractionConfig) -> datetime:
        try:
            return parse_timestamp(value)
        except ValueError as e:
            raise ResponseFormatError(
                f"Source reported a non-timestamp max for {config.date_field}: {value!r}"
            ) from e
