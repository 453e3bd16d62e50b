"""Boolean condition tree evaluated against the `search_index` table.

Each leaf condition selects the image ids having at least one posting row
that satisfies it. `AllOf` intersects the id sets of its children.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple, Union

from models.fields import IndexField

SqlFragment = Tuple[str, List[Any]]

LIKE_ESCAPE = "\\"


def like_pattern(token: str) -> str:
    """Build a substring LIKE pattern, escaping LIKE wildcards in `token`."""
    escaped = (
        token.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


_VALUE_LIKE = f"value LIKE ? ESCAPE '{LIKE_ESCAPE}'"


@dataclass(frozen=True)
class TermCondition:
    """Free-text term: any posting of any field contains `token`."""

    token: str

    def to_sql(self) -> SqlFragment:
        return _VALUE_LIKE, [like_pattern(self.token)]


@dataclass(frozen=True)
class FieldCondition:
    """Filter scoped to one stored field."""

    field: IndexField
    token: str

    def to_sql(self) -> SqlFragment:
        return f"field = ? AND {_VALUE_LIKE}", [self.field.value, like_pattern(self.token)]


@dataclass(frozen=True)
class PeopleCondition:
    """Synthetic `people` filter: people_number OR people_gender contains `token`."""

    token: str

    def to_sql(self) -> SqlFragment:
        return (
            f"field IN (?, ?) AND {_VALUE_LIKE}",
            [IndexField.PEOPLE_NUMBER.value, IndexField.PEOPLE_GENDER.value, like_pattern(self.token)],
        )


@dataclass(frozen=True)
class NeverMatch:
    """Filter on a field outside the indexed set; it matches no image."""

    name: str

    def to_sql(self) -> SqlFragment:
        return "0", []


Condition = Union[TermCondition, FieldCondition, PeopleCondition, NeverMatch]


@dataclass(frozen=True)
class AllOf:
    """Conjunction of conditions; an image must satisfy every child."""

    conditions: Tuple[Condition, ...]

    def __bool__(self) -> bool:
        return bool(self.conditions)
