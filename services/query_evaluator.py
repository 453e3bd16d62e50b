"""Parse a free-text query plus structured filters into a condition tree.

Query terms are unscoped: a term matches an image when any posting of any
field contains it. Filters are scoped to their own field, except `people`
which covers both people fields. Every term and every filter must match.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from models.errors import InputValidationError
from models.fields import IndexField
from models.query import AllOf, Condition, FieldCondition, NeverMatch, PeopleCondition, TermCondition
from services.normalizer import fold


def validate_query(query: Any) -> str:
    """Return `query` as a string, treating None as empty.

    Raises:
        InputValidationError: If `query` is neither None nor a string.
    """
    if query is None:
        return ""
    if not isinstance(query, str):
        raise InputValidationError("query must be a string")
    return query


def validate_filters(filters: Any) -> Dict[str, str]:
    """Return the non-empty filters, with keys lower-cased and values trimmed.

    None and blank values mean "ignore this filter" and are dropped.

    Raises:
        InputValidationError: If `filters` is not a mapping, or a key or
            value is not a string.
    """
    if filters is None:
        return {}
    if not isinstance(filters, Mapping):
        raise InputValidationError("filters must be an object mapping field names to strings")
    cleaned: Dict[str, str] = {}
    for key, value in filters.items():
        if not isinstance(key, str):
            raise InputValidationError("filter names must be strings")
        if value is None:
            continue
        if not isinstance(value, str):
            raise InputValidationError(f"filter '{key}' must be a string value")
        if value.strip():
            cleaned[key.strip().lower()] = value.strip()
    return cleaned


def tokenize_query(query: str) -> List[str]:
    """Split a query into case-folded, whitespace-separated terms."""
    return fold(query).split()


def filter_condition(name: str, value: str) -> Condition:
    field = IndexField.parse(name)
    token = fold(value)
    if field is None:
        return NeverMatch(name)
    if field is IndexField.PEOPLE:
        return PeopleCondition(token)
    return FieldCondition(field, token)


def build_query(query: Any, filters: Any) -> Tuple[AllOf, Dict[str, str]]:
    """Validate inputs and build the conjunction to evaluate.

    Returns:
        The condition tree (empty when there is nothing to search for) and
        the cleaned filters.
    """
    text = validate_query(query)
    cleaned = validate_filters(filters)

    conditions: List[Condition] = [TermCondition(term) for term in dict.fromkeys(tokenize_query(text))]
    conditions.extend(filter_condition(name, value) for name, value in cleaned.items())
    return AllOf(tuple(conditions)), cleaned


def describe(query: AllOf) -> Optional[str]:
    """Human-readable rendering of a condition tree, for logs."""
    if not query:
        return None
    parts = []
    for condition in query.conditions:
        if isinstance(condition, TermCondition):
            parts.append(f"*~{condition.token!r}")
        elif isinstance(condition, FieldCondition):
            parts.append(f"{condition.field.value}~{condition.token!r}")
        elif isinstance(condition, PeopleCondition):
            parts.append(f"people~{condition.token!r}")
        else:
            parts.append(f"{condition.name}:never")
    return " AND ".join(parts)
