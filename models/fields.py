"""Closed set of indexed metadata fields and the posting value type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional


class IndexField(str, Enum):
    """Metadata dimensions that can be indexed or filtered on.

    `PEOPLE` is a synthetic filter key. It is never stored; a filter on it
    expands to a lookup over `PEOPLE_NUMBER` OR `PEOPLE_GENDER`.
    """

    MEDIUM = "medium"
    PEOPLE = "people"
    PEOPLE_NUMBER = "people_number"
    PEOPLE_GENDER = "people_gender"
    ACTIONS = "actions"
    CLOTHES = "clothes"
    ENVIRONMENT = "environment"
    COLORS = "colors"
    STYLE = "style"
    MOOD = "mood"
    SCENE = "scene"
    SCENE_WORD = "scene_word"

    @classmethod
    def parse(cls, name: object) -> Optional["IndexField"]:
        """Return the field named `name`, or None for unknown names."""
        if not isinstance(name, str):
            return None
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


STORAGE_FIELDS: FrozenSet[IndexField] = frozenset(f for f in IndexField if f is not IndexField.PEOPLE)

# Fields whose distinct values count as "categories" in gallery statistics.
CATEGORY_FIELDS = (IndexField.MEDIUM, IndexField.STYLE, IndexField.ENVIRONMENT, IndexField.MOOD)


@dataclass(frozen=True)
class Posting:
    """A single (field, token, image_id) indexing fact."""

    field: IndexField
    token: str
    image_id: str
