"""Database-agnostic metadata filters.

A universal filter is either a single condition ``{field, op, value}``
or a compound ``{"and": [...]}`` / ``{"or": [...]}`` of nested filters.
Callers may also pass shorthand mappings, where each key is a field
name optionally suffixed with ``__<op>``:

    {"status": "published", "year__gte": 2020}
    -> and[status eq "published", year gte 2020]

Filters are normalized and validated before a store is touched, so an
unknown operator surfaces as a FilterError to the caller instead of a
half-finished enrichment run. Store adapters translate the normalized
form into their native query language; matches_filter() evaluates it
in-process for stores without native filtering.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from src.ragkit.exceptions import FilterError

FILTER_OPERATORS: tuple[str, ...] = (
    "eq",
    "neq",
    "in",
    "nin",
    "gt",
    "gte",
    "lt",
    "lte",
    "contains",
    "exists",
)


class FilterCondition(BaseModel):
    """A single ``field <op> value`` predicate."""

    field: str
    op: str
    value: Any = None


class AndFilter(BaseModel):
    """All nested filters must match."""

    model_config = ConfigDict(populate_by_name=True)

    and_: list[UniversalFilter] = Field(alias="and")


class OrFilter(BaseModel):
    """At least one nested filter must match."""

    model_config = ConfigDict(populate_by_name=True)

    or_: list[UniversalFilter] = Field(alias="or")


UniversalFilter = Union[FilterCondition, AndFilter, OrFilter]

AndFilter.model_rebuild()
OrFilter.model_rebuild()


def is_compound(filter_: UniversalFilter) -> bool:
    """Return True for and/or filters."""
    return isinstance(filter_, (AndFilter, OrFilter))


def normalize_filter(
    raw: UniversalFilter | Mapping[str, Any] | None,
) -> UniversalFilter | None:
    """Convert any accepted filter input into a validated UniversalFilter.

    Args:
        raw: A filter model, a standard-format mapping, a shorthand
            mapping, or None.

    Returns:
        The normalized filter, or None when no filter was given.

    Raises:
        FilterError: If the filter is malformed or uses an unknown operator.
    """
    if raw is None:
        return None

    if isinstance(raw, (FilterCondition, AndFilter, OrFilter)):
        validate_filter(raw)
        return raw

    if not isinstance(raw, Mapping):
        raise FilterError(f"Unsupported filter type: {type(raw).__name__}")

    normalized = _from_mapping(raw)
    validate_filter(normalized)
    return normalized


def validate_filter(filter_: UniversalFilter) -> None:
    """Validate a normalized filter tree.

    Raises:
        FilterError: On empty compounds, blank fields, unknown operators,
            or conditions without a value.
    """
    if isinstance(filter_, (AndFilter, OrFilter)):
        children = filter_.and_ if isinstance(filter_, AndFilter) else filter_.or_
        if not children:
            raise FilterError("Compound filter must have at least one condition")
        for child in children:
            validate_filter(child)
        return

    if not filter_.field or not isinstance(filter_.field, str):
        raise FilterError("Filter field must be a non-empty string")
    if filter_.op not in FILTER_OPERATORS:
        raise FilterError(f"Invalid filter operator: {filter_.op}")
    if filter_.value is None and filter_.op != "exists":
        raise FilterError(f"Filter value is required for field '{filter_.field}'")


def _from_mapping(raw: Mapping[str, Any]) -> UniversalFilter:
    if "and" in raw or "or" in raw:
        key = "and" if "and" in raw else "or"
        children = raw[key]
        if not isinstance(children, list):
            raise FilterError(f"'{key}' filter must hold a list of filters")
        nested = [
            child
            if isinstance(child, (FilterCondition, AndFilter, OrFilter))
            else _from_mapping(child)
            for child in children
        ]
        return AndFilter(and_=nested) if key == "and" else OrFilter(or_=nested)

    if "field" in raw and "op" in raw and "value" in raw:
        return FilterCondition(field=raw["field"], op=raw["op"], value=raw["value"])

    return _from_shorthand(raw)


def _from_shorthand(shorthand: Mapping[str, Any]) -> UniversalFilter:
    if not shorthand:
        raise FilterError("Cannot convert empty shorthand filter object")

    conditions: list[UniversalFilter] = []
    for key, value in shorthand.items():
        if "__" in key and not key.startswith("__"):
            field, _, op = key.rpartition("__")
            if op not in FILTER_OPERATORS:
                raise FilterError(f"Invalid filter operator in shorthand: {op}")
        else:
            field, op = key, "eq"
        conditions.append(FilterCondition(field=field, op=op, value=value))

    if len(conditions) == 1:
        return conditions[0]
    return AndFilter(and_=conditions)


# ── In-process evaluation ──────────────────────────────────────────────────

_MISSING = object()


def matches_filter(filter_: UniversalFilter | None, metadata: Mapping[str, Any]) -> bool:
    """Evaluate a normalized filter against a metadata mapping."""
    if filter_ is None:
        return True
    if isinstance(filter_, AndFilter):
        return all(matches_filter(child, metadata) for child in filter_.and_)
    if isinstance(filter_, OrFilter):
        return any(matches_filter(child, metadata) for child in filter_.or_)
    return _matches_condition(filter_, metadata)


def _matches_condition(condition: FilterCondition, metadata: Mapping[str, Any]) -> bool:
    actual = metadata.get(condition.field, _MISSING)
    op, expected = condition.op, condition.value

    if op == "exists":
        present = actual is not _MISSING and actual is not None
        return present == bool(expected if expected is not None else True)
    if op == "neq":
        return actual is _MISSING or actual != expected
    if op == "nin":
        return actual is _MISSING or actual not in expected
    if actual is _MISSING:
        return False
    if op == "eq":
        return actual == expected
    if op == "in":
        return actual in expected
    if op == "contains":
        if isinstance(actual, str):
            return isinstance(expected, str) and expected in actual
        if isinstance(actual, (list, tuple, set)):
            return expected in actual
        return False

    try:
        if op == "gt":
            return actual > expected
        if op == "gte":
            return actual >= expected
        if op == "lt":
            return actual < expected
        if op == "lte":
            return actual <= expected
    except TypeError:
        return False
    raise FilterError(f"Invalid filter operator: {op}")
