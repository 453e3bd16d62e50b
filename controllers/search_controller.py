from fastapi import Request
from typing import Dict, Any, Optional

from controllers.errors import http_errors
from services.search_service import SearchService


def _search(request: Request) -> SearchService:
    return request.app.state.search_service


async def search_images(request: Request, query: Any, filters: Any) -> Dict[str, Any]:
    """Run a keyword and filter search.

    Every query term must match some field of an image; every filter must
    match within its own field. With nothing to match, all images are returned.

    Raises:
        HTTPException(400) for a malformed query or filters.
    """
    with http_errors():
        results = await _search(request).search(query, filters)
    return {"results": [r.to_dict() for r in results], "total": len(results)}


async def natural_search(request: Request, query: Any) -> Dict[str, Any]:
    """Search with a free-form sentence and report the criteria that were used."""
    with http_errors():
        results, criteria = await _search(request).natural_search(query)
    return {
        "results": [r.to_dict() for r in results],
        "total": len(results),
        "criteria": criteria.to_dict(),
    }


async def related_images(request: Request, image_id: str, limit: Optional[int] = None) -> Dict[str, Any]:
    """Return the images most similar to `image_id` with their scores.

    Raises:
        HTTPException(404) if the source image is not found.
    """
    if limit is None:
        limit = request.app.state.config.related_limit
    with http_errors():
        related = await _search(request).find_related(image_id, limit)
    return {"results": [r.to_dict() for r in related], "total": len(related)}
