"""Shared fixtures: an in-memory table API.

FakeTableSource understands the subset of the encoded query syntax the
engine emits (``^``, ``^NQ``, ``ORDERBY`` and the comparison operators),
reports a raw ``X-Total-Count`` that ignores access control, hides rows
flagged ``_hidden`` from page bodies and emits offset based ``next`` links
the way the table API does.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest

from nowsync.extract.runtime.rest import TableResponse

CONDITION = re.compile(r"^([\w.]+?)(>=|<=|!=|=|>|<)(.*)$")
OPERATORS: dict[str, Callable[[str, str], bool]] = {
    "=": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
}


def make_row(sys_id: str, updated: str, *, hidden: bool = False, **extra: Any) -> dict[str, Any]:
    row = {"sys_id": sys_id, "sys_updated_on": updated, **extra}
    if hidden:
        row["_hidden"] = True
    return row


def parse_query(query: str) -> tuple[list[list[tuple[str, str, str]]], list[str]]:
    """Split an encoded query into OR-ed conjunctions and sort fields."""
    disjuncts: list[list[tuple[str, str, str]]] = []
    order_by: list[str] = []
    for part in query.split("^NQ") if query else []:
        terms: list[tuple[str, str, str]] = []
        for term in part.split("^"):
            if not term:
                continue
            if term.startswith("ORDERBY"):
                order_by.append(term[len("ORDERBY") :])
                continue
            match = CONDITION.match(term)
            assert match, f"unparseable condition {term!r}"
            terms.append((match.group(1), match.group(2), match.group(3)))
        if terms:
            disjuncts.append(terms)
    return disjuncts, order_by


def row_matches(row: Mapping[str, Any], disjuncts: list[list[tuple[str, str, str]]]) -> bool:
    if not disjuncts:
        return True
    return any(
        all(OPERATORS[op](str(row.get(name, "")), value) for name, op, value in terms)
        for terms in disjuncts
    )


class FakeTableSource:
    """In-memory stand-in for the table API, implementing TableTransport."""

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        *,
        latency: Callable[[str], float] | None = None,
    ) -> None:
        self.rows = list(rows or [])
        self.requests: list[str] = []
        self.latency = latency

    async def get(self, url: str, params: Mapping[str, Any] | None = None) -> TableResponse:
        self.requests.append(url)
        if self.latency is not None:
            await asyncio.sleep(self.latency(url))
        else:
            await asyncio.sleep(0)

        parts = urlsplit(url)
        qs = {k: v[0] for k, v in parse_qs(parts.query, keep_blank_values=True).items()}
        disjuncts, order_by = parse_query(qs.get("sysparm_query", ""))
        matching = [r for r in self.rows if row_matches(r, disjuncts)]

        if "/api/now/stats/" in parts.path:
            name = qs["sysparm_max_fields"]
            values = [str(r[name]) for r in matching if r.get(name)]
            return TableResponse(
                body={"result": {"stats": {"max": {name: max(values) if values else ""}}}},
                url=url,
            )

        for name in reversed(order_by):
            matching.sort(key=lambda r, n=name: str(r.get(n, "")))
        limit = int(qs.get("sysparm_limit", "10000"))
        offset = int(qs.get("sysparm_offset", "0"))
        page = matching[offset : offset + limit]
        fields = qs.get("sysparm_fields")
        visible = [
            {k: v for k, v in r.items() if not fields or k in fields.split(",")}
            for r in page
            if not r.get("_hidden")
        ]

        links: dict[str, str] = {}
        if offset + limit < len(matching):
            base = url.split("&sysparm_offset=")[0]
            links["next"] = f"{base}&sysparm_offset={offset + limit}"

        return TableResponse(
            body={"result": visible},
            headers={"X-Total-Count": str(len(matching))},
            links=links,
            url=url,
        )


@pytest.fixture
def table_source() -> Callable[..., FakeTableSource]:
    """Factory for in-memory table sources."""
    return FakeTableSource


@pytest.fixture
def row() -> Callable[..., dict[str, Any]]:
    """Factory for table rows."""
    return make_row
