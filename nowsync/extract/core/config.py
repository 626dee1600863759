"""Extraction configuration.

Architecture:
    ExtractionConfig is an immutable Pydantic v2 model. Callers never mutate
    a shared default: every run builds its own value through
    ``build_config``, which merges caller options over the defaults below and
    validates the result once, before any request is issued.

    Option names follow the table API's client conventions. Both snake_case
    names and the camelCase aliases (``dateField``, ``sysIdField``,
    ``pageThreshold``, ...) are accepted.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from .exceptions import ConfigurationError

DEFAULT_LIMIT = 25
DEFAULT_DATE_FIELD = "sys_updated_on"
DEFAULT_SYS_ID_FIELD = "sys_id"
DEFAULT_PAGE_THRESHOLD = 1.5
MAX_THREADS = 32

TABLE_PATH = "/api/now/table"
STATS_PATH = "/api/now/stats"


class ExtractionConfig(BaseModel):
    """Validated options for one extraction run."""

    uri: str = Field(..., min_length=1)
    table: str = Field(..., min_length=1)
    query: str | None = None
    limit: int = Field(default=DEFAULT_LIMIT, gt=0)
    # identifier/ordering fields are declared before ``fields`` so the fields
    # validator can see them
    date_field: str = Field(default=DEFAULT_DATE_FIELD, alias="dateField", min_length=1)
    sys_id_field: str = Field(default=DEFAULT_SYS_ID_FIELD, alias="sysIdField", min_length=1)
    fields: tuple[str, ...] = Field(default=(), validate_default=True)
    threads: int = Field(
        default=1,
        validation_alias=AliasChoices("threads", "partition_count", "partitionCount"),
    )
    page_threshold: float = Field(default=DEFAULT_PAGE_THRESHOLD, alias="pageThreshold")
    extra_params: dict[str, str] = Field(default_factory=dict, alias="extraParams")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    @field_validator("uri")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("query", mode="before")
    @classmethod
    def blank_query_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("query")
    @classmethod
    def reject_sort_keys(cls, v: str | None) -> str | None:
        # every page is sorted by the ordering and identifier fields
        if v is not None and "ORDERBY" in v.upper():
            raise ValueError("query must not contain ORDERBY terms")
        return v

    @field_validator("limit", mode="before")
    @classmethod
    def default_limit(cls, v: Any) -> Any:
        return DEFAULT_LIMIT if v is None else v

    @field_validator("fields", mode="before")
    @classmethod
    def split_fields(cls, v: Any) -> Any:
        """Accept a list or a comma separated string of field names."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        return tuple(str(f).strip() for f in v if str(f).strip())

    @field_validator("fields")
    @classmethod
    def inject_key_fields(cls, v: tuple[str, ...], info: ValidationInfo) -> tuple[str, ...]:
        """Identifier and ordering fields are always requested."""
        fields = list(dict.fromkeys(v))
        for key_field in (
            info.data.get("sys_id_field", DEFAULT_SYS_ID_FIELD),
            info.data.get("date_field", DEFAULT_DATE_FIELD),
        ):
            if key_field not in fields:
                fields.append(key_field)
        return tuple(fields)

    @field_validator("threads", mode="before")
    @classmethod
    def clamp_threads(cls, v: Any) -> int:
        if not v:
            return 1
        if isinstance(v, bool) or not isinstance(v, int | float | str):
            raise ValueError("threads must be a number")
        return max(1, min(abs(int(v)), MAX_THREADS))

    @field_validator("page_threshold", mode="before")
    @classmethod
    def floor_page_threshold(cls, v: Any) -> float:
        # threshold can not be less than 1
        if not v or isinstance(v, bool):
            return DEFAULT_PAGE_THRESHOLD
        if not isinstance(v, int | float):
            raise ValueError("pageThreshold must be a number")
        return max(1.0, abs(float(v)))

    @field_validator("extra_params", mode="before")
    @classmethod
    def stringify_extra_params(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, str):
            # "sysparm_a=1&sysparm_b=2"
            pairs = (p.partition("=") for p in v.split("&") if p)
            return {k.strip(): val.strip() for k, _, val in pairs}
        if isinstance(v, Mapping):
            return {
                str(k): str(val).lower() if isinstance(val, bool) else str(val)
                for k, val in v.items()
            }
        return v

    @property
    def table_url(self) -> str:
        """Row endpoint of the configured table."""
        return f"{self.uri}{TABLE_PATH}/{self.table}"

    @property
    def stats_url(self) -> str:
        """Aggregate endpoint of the configured table."""
        return f"{self.uri}{STATS_PATH}/{self.table}"

    def with_query(self, query: str | None) -> ExtractionConfig:
        """Return a copy whose base query is replaced."""
        return self.model_copy(update={"query": query or None})


def build_config(options: Mapping[str, Any] | None = None, **overrides: Any) -> ExtractionConfig:
    """Merge caller options over the defaults and validate them.

    Args:
        options: Caller options (snake_case or camelCase keys). Unknown keys
            are ignored so a single options mapping can also carry entry
            point specific values such as ``maxDateValue``.
        **overrides: Options applied on top of ``options``.

    Returns:
        A new immutable ExtractionConfig.

    Raises:
        ConfigurationError: If ``uri`` or ``table`` is missing, or any option
            fails validation.
    """
    merged: dict[str, Any] = {**(options or {}), **overrides}

    if not merged.get("uri"):
        raise ConfigurationError("URI of the source instance not defined", option="uri")
    if not merged.get("table"):
        raise ConfigurationError("Table to load not defined", option="table")

    try:
        return ExtractionConfig.model_validate(merged)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        option = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ConfigurationError(f"Invalid extraction options: {e}", option=option) from e
