"""Runtime orchestration components."""

from .incremental import IncrementalReconciler, ResumeOutcome, parse_timestamp
from .orchestrator import Orchestrator
from .pagination import (
    ExtractionState,
    PageCursor,
    PageSink,
    PaginationEngine,
    Partition,
    RangePlanner,
    advance,
)
from .rest import HTTPClient, TableResponse, TableTransport

__all__ = [
    "Orchestrator",
    "IncrementalReconciler",
    "ResumeOutcome",
    "parse_timestamp",
    "PaginationEngine",
    "PageSink",
    "RangePlanner",
    "Partition",
    "PageCursor",
    "ExtractionState",
    "advance",
    "HTTPClient",
    "TableResponse",
    "TableTransport",
]
