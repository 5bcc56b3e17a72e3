"""
Filter operators for the generic data endpoint.

Each operator tag maps to one predicate builder in FILTER_OPERATORS; adding an
operator is a new enum member plus a table entry. Builders take a SQLAlchemy
column and the caller's value and return the store's native predicate.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import ColumnElement

from app.core.gateway.errors import InvalidRequest


class FilterOperator(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    IN = "in"


@dataclass(frozen=True)
class Filter:
    """One conjunctive predicate: ``column <operator> value``."""

    column: str
    operator: FilterOperator
    value: Any


def eq(column: str, value: Any) -> Filter:
    return Filter(column=column, operator=FilterOperator.EQ, value=value)


def _in(column: ColumnElement[Any], value: Any) -> ColumnElement[bool]:
    return column.in_(list(value))


FILTER_OPERATORS: dict[FilterOperator, Callable[[Any, Any], ColumnElement[bool]]] = {
    FilterOperator.EQ: lambda c, v: c == v,
    FilterOperator.NEQ: lambda c, v: c != v,
    FilterOperator.GT: lambda c, v: c > v,
    FilterOperator.LT: lambda c, v: c < v,
    FilterOperator.GTE: lambda c, v: c >= v,
    FilterOperator.LTE: lambda c, v: c <= v,
    FilterOperator.IN: _in,
}


_ORDERING = frozenset(
    {FilterOperator.GT, FilterOperator.LT, FilterOperator.GTE, FilterOperator.LTE}
)


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def parse_operator(raw: Any) -> FilterOperator:
    """Operator tag -> FilterOperator; unsupported tags are a request error."""
    try:
        return FilterOperator(str(raw).strip().lower())
    except ValueError:
        raise InvalidRequest(f"Unsupported filter operator: {raw!r}") from None


def build_filter(column: Any, operator: Any, value: Any) -> Filter:
    if not isinstance(column, str) or not column.strip():
        raise InvalidRequest("Filter column must be a non-empty string")
    op = parse_operator(operator)
    if op is FilterOperator.IN:
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise InvalidRequest(f"Filter operator 'in' on {column!r} requires a list")
        if not all(_is_scalar(v) for v in value):
            raise InvalidRequest(
                f"Filter operator 'in' on {column!r} requires a list of scalar values"
            )
    elif not _is_scalar(value):
        raise InvalidRequest(
            f"Filter operator {op.value!r} on {column!r} requires a scalar value"
        )
    elif value is None and op in _ORDERING:
        raise InvalidRequest(
            f"Filter operator {op.value!r} on {column!r} requires a value"
        )
    return Filter(column=column.strip(), operator=op, value=value)


def to_predicate(column: ColumnElement[Any], f: Filter) -> ColumnElement[bool]:
    return FILTER_OPERATORS[f.operator](column, f.value)
