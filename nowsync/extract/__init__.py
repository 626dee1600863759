"""nowsync.extract - Partitioned keyset extraction from paginated table APIs."""

from .api import TableAPI, increment, snapshot
from .core import (
    DEFAULT_DATE_FIELD,
    DEFAULT_LIMIT,
    DEFAULT_PAGE_THRESHOLD,
    DEFAULT_SYS_ID_FIELD,
    MAX_THREADS,
    ConfigurationError,
    ExtractError,
    ExtractionConfig,
    ProviderError,
    ResponseFormatError,
    build_config,
)
from .models import PageSnapshot, PartitionLog, RunSummary
from .query import QueryBuilder, build_query
from .runtime import (
    ExtractionState,
    HTTPClient,
    IncrementalReconciler,
    Orchestrator,
    PageCursor,
    PaginationEngine,
    Partition,
    RangePlanner,
    ResumeOutcome,
    TableResponse,
    TableTransport,
    advance,
)

__version__ = "0.1.0"

__all__ = [
    # Facade
    "TableAPI",
    "snapshot",
    "increment",
    # Configuration
    "ExtractionConfig",
    "build_config",
    "DEFAULT_LIMIT",
    "DEFAULT_DATE_FIELD",
    "DEFAULT_SYS_ID_FIELD",
    "DEFAULT_PAGE_THRESHOLD",
    "MAX_THREADS",
    # Runtime
    "Orchestrator",
    "PaginationEngine",
    "RangePlanner",
    "IncrementalReconciler",
    "ResumeOutcome",
    "Partition",
    "PageCursor",
    "ExtractionState",
    "advance",
    "QueryBuilder",
    "build_query",
    # Transport
    "HTTPClient",
    "TableResponse",
    "TableTransport",
    # Models
    "PageSnapshot",
    "PartitionLog",
    "RunSummary",
    # Exceptions
    "ExtractError",
    "ConfigurationError",
    "ProviderError",
    "ResponseFormatError",
]
