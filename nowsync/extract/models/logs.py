"""Run logs produced by the pagination engine.

These models are observability output only. Control flow never reads them
back; they are built once a partition (or the whole run) has finished.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field


class PageSnapshot(BaseModel):
    """What happened on one page request of a partition."""

    page_number: int = Field(..., ge=1)
    row_count: int = Field(..., ge=0)
    request_url: str
    message: str = ""

    model_config = ConfigDict(frozen=True)


class PartitionLog(BaseModel):
    """Ordered page snapshots and totals of one partition."""

    index: int = Field(..., ge=0)
    lower_bound: str | None = None
    upper_bound: str | None = None
    query: str | None = None
    pages: tuple[PageSnapshot, ...] = ()
    total_row_count: int = Field(default=0, ge=0)
    expected_row_count: int | None = None
    expected_page_count: int | None = None
    max_order_value: str | None = None

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def page_count(self) -> int:
        """Number of requests issued for the partition."""
        return len(self.pages)

    @property
    def final_message(self) -> str:
        """Message of the last page, i.e. why the partition stopped."""
        return self.pages[-1].message if self.pages else ""


class RunSummary(BaseModel):
    """Aggregate of every partition of a run, in partition order."""

    total_rows: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)
    partitions: tuple[PartitionLog, ...] = ()
    max_order_value: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_partitions(cls, logs: list[PartitionLog]) -> RunSummary:
        """Fold partition logs into a summary, keeping their order."""
        ordered = tuple(sorted(logs, key=lambda log: log.index))
        max_values = [log.max_order_value for log in ordered if log.max_order_value]
        return cls(
            total_rows=sum(log.total_row_count for log in ordered),
            total_pages=sum(log.page_count for log in ordered),
            partitions=ordered,
            max_order_value=max(max_values) if max_values else None,
        )
