from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel
from typing import Any, List

from controllers import image_controller

router = APIRouter(prefix="/api")


class PrivacyRequest(BaseModel):
    isPrivate: Any = None


class DeleteImagesRequest(BaseModel):
    imageIds: List[str] = []


@router.get("/images")
async def get_images(request: Request):
    """List every image, newest upload first."""
    try:
        return await image_controller.list_images(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/images/{image_id}")
async def get_image(request: Request, image_id: str):
    """Return a single image by id."""
    try:
        return await image_controller.get_image(request, image_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/upload")
async def post_upload(request: Request, images: List[UploadFile] = File(...)):
    """Upload up to the configured number of images in one multipart request."""
    try:
        return await image_controller.upload_images(request, images)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.put("/images/{image_id}/privacy")
async def put_privacy(request: Request, image_id: str, payload: PrivacyRequest):
    try:
        return await image_controller.set_privacy(request, image_id, payload.isPrivate)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/images/{image_id}")
async def delete_image(request: Request, image_id: str):
    try:
        return await image_controller.delete_image(request, image_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/images/delete-multiple")
async def delete_images(request: Request, payload: DeleteImagesRequest):
    """Delete several images, reporting the ids that could not be deleted."""
    try:
        return await image_controller.delete_images(request, payload.imageIds)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/stats")
async def get_stats(request: Request):
    try:
        return await image_controller.get_stats(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/cleanup")
async def post_cleanup(request: Request):
    """Remove orphaned index rows and unreferenced upload files."""
    try:
        return await image_controller.cleanup_storage(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
