"""Unit tests for extraction configuration."""

from __future__ import annotations

import pydantic
import pytest

from nowsync.extract.core import (
    DEFAULT_DATE_FIELD,
    DEFAULT_LIMIT,
    DEFAULT_PAGE_THRESHOLD,
    ConfigurationError,
    ExtractionConfig,
    build_config,
)

BASE = {"uri": "https://instance.example.com", "table": "incident"}


class TestBuildConfigDefaults:
    """Test default resolution."""

    def test_defaults(self):
        """Test every option falls back to its default."""
        config = build_config(BASE)

        assert config.limit == DEFAULT_LIMIT == 25
        assert config.date_field == DEFAULT_DATE_FIELD == "sys_updated_on"
        assert config.sys_id_field == "sys_id"
        assert config.threads == 1
        assert config.page_threshold == DEFAULT_PAGE_THRESHOLD == 1.5
        assert config.query is None
        assert config.extra_params == {}

    def test_key_fields_always_requested(self):
        """Test identifier and ordering fields are injected into an empty field list."""
        config = build_config(BASE)
        assert config.fields == ("sys_id", "sys_updated_on")

    def test_key_fields_not_duplicated(self):
        """Test fields already present are kept once, in caller order."""
        config = build_config(BASE, fields=["sys_updated_on", " number ", "sys_id"])
        assert config.fields == ("sys_updated_on", "number", "sys_id")

    def test_fields_from_comma_string(self):
        """Test comma separated field strings are split and trimmed."""
        config = build_config(BASE, fields="number, short_description ,,state")
        assert config.fields == (
            "number",
            "short_description",
            "state",
            "sys_id",
            "sys_updated_on",
        )

    def test_custom_key_fields_injected(self):
        """Test custom identifier/ordering fields are the ones injected."""
        config = build_config(
            BASE, fields=["operation"], sysIdField="document_id", dateField="sys_created_on"
        )
        assert config.fields == ("operation", "document_id", "sys_created_on")

    def test_uri_trailing_slash_removed(self):
        """Test the instance URI is normalized."""
        config = build_config({"uri": "https://instance.example.com/", "table": "incident"})
        assert config.table_url == "https://instance.example.com/api/now/table/incident"
        assert config.stats_url == "https://instance.example.com/api/now/stats/incident"


class TestBuildConfigAliases:
    """Test camelCase option names."""

    def test_camel_case_aliases(self):
        """Test the table API's option names are accepted."""
        config = build_config(
            {
                **BASE,
                "dateField": "sys_created_on",
                "sysIdField": "document_id",
                "pageThreshold": 3,
                "threads": 4,
                "extraParams": {"sysparm_exclude_reference_link": True},
            }
        )
        assert config.date_field == "sys_created_on"
        assert config.sys_id_field == "document_id"
        assert config.page_threshold == 3.0
        assert config.threads == 4
        assert config.extra_params == {"sysparm_exclude_reference_link": "true"}

    def test_partition_count_alias(self):
        """Test partitionCount is an alias of threads."""
        assert build_config(BASE, partitionCount=3).threads == 3

    def test_extra_params_from_string(self):
        """Test query string style extra parameters."""
        config = build_config(BASE, extraParams="sysparm_exclude_reference_link=true")
        assert config.extra_params == {"sysparm_exclude_reference_link": "true"}

    def test_unknown_options_ignored(self):
        """Test entry point specific options do not fail validation."""
        config = build_config(BASE, maxDateValue="2022-01-26 20:53:18")
        assert not hasattr(config, "maxDateValue")


class TestBuildConfigNormalization:
    """Test clamping of numeric options."""

    @pytest.mark.parametrize(
        ("threads", "expected"),
        [(None, 1), (0, 1), (1, 1), (-4, 4), (32, 32), (33, 32), (1000, 32)],
    )
    def test_threads_clamped(self, threads, expected):
        """Test thread counts are made positive and capped at 32."""
        assert build_config(BASE, threads=threads).threads == expected

    @pytest.mark.parametrize(
        ("threshold", "expected"),
        [(None, 1.5), (0, 1.5), (0.5, 1.0), (-2, 2.0), (2.5, 2.5)],
    )
    def test_page_threshold_floor(self, threshold, expected):
        """Test the threshold factor can not drop below 1."""
        assert build_config(BASE, pageThreshold=threshold).page_threshold == expected

    def test_limit_none_uses_default(self):
        """Test an explicit None limit keeps the default."""
        assert build_config(BASE, limit=None).limit == 25

    def test_blank_query_is_none(self):
        """Test a blank base query means no base query."""
        assert build_config(BASE, query="   ").query is None


class TestBuildConfigErrors:
    """Test configuration errors."""

    @pytest.mark.parametrize("missing", ["uri", "table"])
    def test_missing_required_option(self, missing):
        """Test uri and table are required and not silently defaulted."""
        options = {k: v for k, v in BASE.items() if k != missing}

        with pytest.raises(ConfigurationError) as exc_info:
            build_config(options)

        assert exc_info.value.option == missing

    def test_empty_uri(self):
        """Test an empty uri is treated as missing."""
        with pytest.raises(ConfigurationError, match="URI"):
            build_config({"uri": "", "table": "incident"})

    def test_invalid_limit(self):
        """Test a non-positive limit is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            build_config(BASE, limit=0)
        assert exc_info.value.option == "limit"

    def test_invalid_threshold_type(self):
        """Test a non-numeric threshold is rejected."""
        with pytest.raises(ConfigurationError):
            build_config(BASE, pageThreshold="fast")

    @pytest.mark.parametrize("query", ["active=true^ORDERBYnumber", "ORDERBYDESCsys_created_on"])
    def test_sort_keys_in_query_rejected(self, query):
        """Test a base query can not override the page order."""
        with pytest.raises(ConfigurationError) as exc_info:
            build_config(BASE, query=query)
        assert exc_info.value.option == "query"

    def test_configuration_error_is_value_error(self):
        """Test callers can catch configuration errors as ValueError."""
        with pytest.raises(ValueError):
            build_config({})


class TestExtractionConfigImmutability:
    """Test configuration values are never mutated."""

    def test_frozen(self):
        """Test assignment is rejected."""
        config = build_config(BASE)
        with pytest.raises(pydantic.ValidationError):
            config.limit = 100  # type: ignore[misc]

    def test_with_query_returns_copy(self):
        """Test with_query leaves the original untouched."""
        config = build_config(BASE, query="active=true")
        narrowed = config.with_query("active=true^priority=1")

        assert config.query == "active=true"
        assert narrowed.query == "active=true^priority=1"
        assert narrowed.fields == config.fields

    def test_build_does_not_share_state(self):
        """Test two builds from the same options are independent values."""
        options = dict(BASE, fields=["number"])
        first = build_config(options)
        second = build_config(options, fields=["state"])

        assert first.fields == ("number", "sys_id", "sys_updated_on")
        assert second.fields == ("state", "sys_id", "sys_updated_on")
        assert options["fields"] == ["number"]
        assert isinstance(first, ExtractionConfig)
