"""Encoded query predicates and page query construction."""

from .builder import QueryBuilder, build_query, keyset_predicate
from .predicates import (
    And,
    Comparison,
    Operator,
    Or,
    Predicate,
    Raw,
    conjunction,
    disjunction,
    raw,
    serialize,
)

__all__ = [
    "QueryBuilder",
    "build_query",
    "keyset_predicate",
    "Predicate",
    "Comparison",
    "Operator",
    "And",
    "Or",
    "Raw",
    "conjunction",
    "disjunction",
    "raw",
    "serialize",
]
