"""Weighted metadata similarity used to rank related images.

Scoring is a full scan over the candidate pool, which suits personal-sized
collections.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional

from dal.image_dal import sort_newest_first
from models.image_record import ImageRecord
from models.metadata import Metadata
from models.search_models import RelatedImage

DEFAULT_RELATED_LIMIT = 6

FIELD_WEIGHTS = {
    "medium": 3,
    "style": 3,
    "environment": 2,
    "mood": 2,
    "actions": 1,
    "clothes": 1,
}
COLOR_WEIGHT = 1


def _same(left: Optional[str], right: Optional[str]) -> bool:
    """Exact equality that never matches on missing values."""
    return left is not None and right is not None and left == right


def similarity_score(source: Metadata, candidate: Metadata) -> int:
    """Score how alike two metadata values are.

    Each shared scalar field adds its weight and each color present in both
    color lists (multiset intersection) adds one. Missing fields contribute
    nothing.
    """
    score = 0
    for name, weight in FIELD_WEIGHTS.items():
        if _same(getattr(source, name, None), getattr(candidate, name, None)):
            score += weight
    shared = Counter(source.colors or []) & Counter(candidate.colors or [])
    score += COLOR_WEIGHT * sum(shared.values())
    return score


def rank_related(
    source: Metadata,
    candidates: Iterable[ImageRecord],
    limit: int = DEFAULT_RELATED_LIMIT,
) -> List[RelatedImage]:
    """Return the top `limit` candidates with a positive score.

    Ties are broken by upload date (newest first), then by id.
    """
    if limit <= 0:
        return []
    ordered = sort_newest_first(list(candidates))
    scored = [RelatedImage(image=c, score=similarity_score(source, c.metadata)) for c in ordered]
    positive = [r for r in scored if r.score > 0]
    positive.sort(key=lambda r: r.score, reverse=True)
    return positive[:limit]
