"""Core components."""

from .config import (
    DEFAULT_DATE_FIELD,
    DEFAULT_LIMIT,
    DEFAULT_PAGE_THRESHOLD,
    DEFAULT_SYS_ID_FIELD,
    MAX_THREADS,
    ExtractionConfig,
    build_config,
)
from .exceptions import (
    ConfigurationError,
    ExtractError,
    ProviderError,
    ResponseFormatError,
)

__all__ = [
    "ExtractionConfig",
    "build_config",
    "DEFAULT_LIMIT",
    "DEFAULT_DATE_FIELD",
    "DEFAULT_SYS_ID_FIELD",
    "DEFAULT_PAGE_THRESHOLD",
    "MAX_THREADS",
    # Exceptions
    "ExtractError",
    "ConfigurationError",
    "ProviderError",
    "ResponseFormatError",
]
