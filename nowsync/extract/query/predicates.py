"""Filter predicates for the table API's encoded query syntax.

Predicates are a small tagged expression tree. ``serialize`` is the only
place that knows the textual syntax:

    field=value          Comparison
    a^b                  And (conjunction)
    a^NQb                Or  (top-level disjunction of conjunctions)
    ^ORDERBYfield        ascending sort key, appended after the filter

The table API only supports a disjunction at the top level of a query.
``conjunction`` distributes over ``Or`` terms to keep it there, and ``raw``
splits a caller query on ``^NQ`` so its disjuncts take part in that. An
``Or`` that still ends up nested inside an ``And`` is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from enum import Enum
from typing import Union

AND = "^"
NEW_QUERY = "^NQ"
ORDER_BY = "ORDERBY"


class Operator(str, Enum):
    """Comparison operators of the encoded query syntax."""

    EQ = "="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="


@dataclass(frozen=True)
class Comparison:
    field: str
    operator: Operator
    value: str

    def __post_init__(self) -> None:
        if not self.field:
            raise ValueError("Comparison requires a field name")


@dataclass(frozen=True)
class Raw:
    """Caller-supplied encoded query, passed through verbatim."""

    text: str


@dataclass(frozen=True)
class And:
    terms: tuple[Predicate, ...]


@dataclass(frozen=True)
class Or:
    terms: tuple[Predicate, ...]


Predicate = Union[Comparison, Raw, And, Or]


def raw(text: str | None) -> Predicate | None:
    """Wrap an encoded query string, ``None`` for blank input.

    A query with ``^NQ`` becomes an ``Or`` of its parts.
    """
    if text is None:
        return None
    parts = [part.strip() for part in text.split(NEW_QUERY)]
    return disjunction(*(Raw(part) for part in parts if part))


def conjunction(*terms: Predicate | None) -> Predicate | None:
    """AND together the given terms.

    ``None`` terms are dropped and nested conjunctions are flattened. An
    ``Or`` term is distributed, ``(a | b) & c`` becomes ``(a & c) | (b & c)``.
    Returns ``None`` when nothing is left and the bare term when only one is.
    """
    present = [term for term in terms if term is not None]
    if any(isinstance(term, Or) for term in present):
        alternatives = (term.terms if isinstance(term, Or) else (term,) for term in present)
        return disjunction(*(conjunction(*combo) for combo in product(*alternatives)))

    flat: list[Predicate] = []
    for term in present:
        if isinstance(term, And):
            flat.extend(term.terms)
        else:
            flat.append(term)
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return And(tuple(flat))


def disjunction(*terms: Predicate | None) -> Predicate | None:
    """OR together the given terms, same normalization as ``conjunction``."""
    flat: list[Predicate] = []
    for term in terms:
        if term is None:
            continue
        if isinstance(term, Or):
            flat.extend(term.terms)
        else:
            flat.append(term)
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return Or(tuple(flat))


def serialize(predicate: Predicate | None, order_by: tuple[str, ...] = ()) -> str:
    """Render a predicate (and optional ascending sort keys) as an encoded query."""
    parts: list[str] = []
    if predicate is not None:
        parts.append(_serialize(predicate, top_level=True))
    parts.extend(f"{ORDER_BY}{name}" for name in order_by)
    return AND.join(parts)


def _serialize(predicate: Predicate, *, top_level: bool) -> str:
    if isinstance(predicate, Comparison):
        return f"{predicate.field}{predicate.operator.value}{predicate.value}"
    if isinstance(predicate, Raw):
        return predicate.text
    if isinstance(predicate, And):
        return AND.join(_serialize(t, top_level=False) for t in predicate.terms)
    if isinstance(predicate, Or):
        if not top_level:
            raise ValueError("Disjunction is only supported at the top level of a query")
        return NEW_QUERY.join(_serialize(t, top_level=False) for t in predicate.terms)
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")
