"""Value types returned by search, ranking and batch operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, TypeVar

from models.image_record import ImageRecord

T = TypeVar("T")


@dataclass
class SearchCriteria:
    """Structured search derived from a natural-language query.

    `filters` only holds fields the query mentioned; absent fields are
    omitted rather than set to None.
    """

    filters: Dict[str, str] = field(default_factory=dict)
    keywords: List[str] = field(default_factory=list)

    @property
    def query(self) -> str:
        return " ".join(self.keywords)

    def to_dict(self) -> Dict[str, Any]:
        return {"filters": dict(self.filters), "keywords": list(self.keywords)}


@dataclass
class RelatedImage:
    """A candidate image with its similarity score against a source image."""

    image: ImageRecord
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {**self.image.to_dict(), "similarityScore": self.score}


@dataclass
class BatchFailure:
    """One item of a batch operation that failed."""

    item: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.item, "error": self.error}


@dataclass
class BatchResult(Generic[T]):
    """Outcome of a continue-on-error batch: what succeeded and what did not."""

    successes: List[T] = field(default_factory=list)
    failures: List[BatchFailure] = field(default_factory=list)


@dataclass
class Album:
    """A named group of images."""

    id: str
    name: str
    description: str = ""
    created_at: str = ""
    updated_at: str = ""
    image_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "image_count": self.image_count,
        }
