from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel
from typing import Any, Optional

from controllers import search_controller

router = APIRouter(prefix="/api")


class SearchRequest(BaseModel):
    query: Any = ""
    filters: Any = None


class NaturalSearchRequest(BaseModel):
    query: Any = None


@router.post("/search")
async def post_search(request: Request, payload: SearchRequest):
    """Search images by free-text terms and per-field filters."""
    try:
        return await search_controller.search_images(request, payload.query, payload.filters)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/natural-search")
async def post_natural_search(request: Request, payload: NaturalSearchRequest):
    """Search images with a natural-language sentence."""
    try:
        return await search_controller.natural_search(request, payload.query)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/images/{image_id}/related")
async def get_related(request: Request, image_id: str, limit: Optional[int] = Query(default=None, ge=1, le=100)):
    """Return the images most similar to the given one."""
    try:
        return await search_controller.related_images(request, image_id, limit)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
