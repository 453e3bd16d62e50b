from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel
from typing import List, Optional

from controllers import album_controller

router = APIRouter(prefix="/api")


class AlbumRequest(BaseModel):
    name: str = ""
    description: Optional[str] = None


class AlbumImagesRequest(BaseModel):
    imageIds: List[str] = []


@router.post("/albums")
async def post_album(request: Request, payload: AlbumRequest):
    try:
        return await album_controller.create_album(request, payload.name, payload.description)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/albums")
async def get_albums(request: Request):
    try:
        return await album_controller.list_albums(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/albums/{album_id}/images")
async def post_album_images(request: Request, album_id: str, payload: AlbumImagesRequest):
    """Add images to an album."""
    try:
        return await album_controller.add_album_images(request, album_id, payload.imageIds)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/albums/{album_id}/images")
async def get_album_images(request: Request, album_id: str):
    try:
        return await album_controller.list_album_images(request, album_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
