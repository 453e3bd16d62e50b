"""Keyword, filter, natural-language and related-image search."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Protocol, Tuple

from dal.image_dal import ImageDAL
from dal.search_index_dal import SearchIndexDAL
from models.errors import InputValidationError
from models.fields import IndexField
from models.image_record import ImageRecord
from models.search_models import RelatedImage, SearchCriteria
from services.query_evaluator import build_query, describe
from services.similarity import DEFAULT_RELATED_LIMIT, rank_related

LOGGER = logging.getLogger(__name__)

# Criteria keys copied verbatim into filters when they hold a string.
_SCALAR_CRITERIA = (
    IndexField.MEDIUM,
    IndexField.STYLE,
    IndexField.MOOD,
    IndexField.ENVIRONMENT,
    IndexField.ACTIONS,
    IndexField.CLOTHES,
)


class CriteriaOracle(Protocol):
    async def extract(self, query: str) -> Mapping[str, Any]:
        ...


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            return str(int(value))
        except (ValueError, OverflowError):
            return None
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def criteria_to_search(raw: Any) -> SearchCriteria:
    """Convert raw oracle criteria into filters plus keywords.

    Only mentioned fields become filters. `people` prefers the gender
    description and falls back to the count; only the first color is used.
    """
    criteria = SearchCriteria()
    if not isinstance(raw, Mapping):
        return criteria

    for field in _SCALAR_CRITERIA:
        value = _as_text(raw.get(field.value))
        if value:
            criteria.filters[field.value] = value

    people = raw.get("people")
    if isinstance(people, Mapping):
        value = _as_text(people.get("gender")) or _as_text(people.get("number"))
        if value:
            criteria.filters[IndexField.PEOPLE.value] = value

    colors = raw.get("colors")
    if isinstance(colors, str):
        colors = [colors]
    if isinstance(colors, list):
        first = next((c for c in (_as_text(v) for v in colors) if c), None)
        if first:
            criteria.filters[IndexField.COLORS.value] = first

    keywords = raw.get("keywords")
    if isinstance(keywords, str):
        keywords = keywords.split()
    if isinstance(keywords, list):
        criteria.keywords = [k for k in (_as_text(v) for v in keywords) if k]

    return criteria


class SearchService:
    """Evaluate searches against the postings index and hydrate the results."""

    def __init__(
        self,
        image_dal: ImageDAL,
        index_dal: SearchIndexDAL,
        criteria_oracle: Optional[CriteriaOracle] = None,
    ) -> None:
        self.image_dal = image_dal
        self.index_dal = index_dal
        self.criteria_oracle = criteria_oracle

    async def search_ids(self, query: Any = "", filters: Any = None) -> List[str]:
        """Matching image ids, newest upload first.

        With no terms and no non-empty filters every image id is returned.

        Raises:
            InputValidationError: For a non-string query or malformed filters.
        """
        records = await self.search(query, filters)
        return [r.id for r in records]

    async def search(self, query: Any = "", filters: Any = None) -> List[ImageRecord]:
        """Matching image records, newest upload first."""
        condition, _ = build_query(query, filters)
        if not condition:
            return await self.image_dal.list_images()

        image_ids = await self.index_dal.find_image_ids(condition)
        LOGGER.debug("Search %s matched %d images", describe(condition), len(image_ids))
        if not image_ids:
            return []
        return await self.image_dal.list_images_by_ids(image_ids)

    async def extract_criteria(self, query: str) -> SearchCriteria:
        """Ask the criteria oracle about `query`; failures yield empty criteria."""
        if self.criteria_oracle is None:
            return SearchCriteria(keywords=query.split())
        try:
            raw = await self.criteria_oracle.extract(query)
            return criteria_to_search(raw)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("Criteria extraction failed: %s", exc)
            return SearchCriteria()

    async def natural_search(self, query: Any) -> Tuple[List[ImageRecord], SearchCriteria]:
        """Search with a free-form sentence.

        Raises:
            InputValidationError: If `query` is not a non-empty string.
        """
        if not isinstance(query, str) or not query.strip():
            raise InputValidationError("Valid query string is required")
        criteria = await self.extract_criteria(query.strip())
        results = await self.search(criteria.query, criteria.filters)
        return results, criteria

    async def find_related(self, source_id: str, limit: int = DEFAULT_RELATED_LIMIT) -> List[RelatedImage]:
        """Rank every other image against `source_id` by metadata similarity.

        Raises:
            NotFoundError: If the source image does not exist.
        """
        source = await self.image_dal.require_image(source_id)
        candidates = await self.image_dal.list_other_images(source_id)
        return rank_related(source.metadata, candidates, limit)
