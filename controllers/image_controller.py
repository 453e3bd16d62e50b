from fastapi import Request, UploadFile
from typing import Dict, Any, List

from controllers.errors import http_errors
from models.errors import InputValidationError
from services.gallery_service import GalleryService, UploadedFile

UPLOAD_CHUNK_BYTES = 1024 * 1024


def _gallery(request: Request) -> GalleryService:
    return request.app.state.gallery_service


def _base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")


async def read_limited(file: UploadFile, max_bytes: int, chunk_size: int = UPLOAD_CHUNK_BYTES) -> bytes:
    """Read an upload in chunks, stopping one byte past `max_bytes`.

    An oversized file is never held in memory in full; the extra byte lets
    validation report it as too large.
    """
    buf = bytearray()
    while len(buf) <= max_bytes:
        chunk = await file.read(min(chunk_size, max_bytes + 1 - len(buf)))
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)


async def list_images(request: Request) -> List[Dict[str, Any]]:
    """Return every image, newest upload first."""
    with http_errors():
        records = await _gallery(request).image_dal.list_images()
    return [r.to_dict() for r in records]


async def get_image(request: Request, image_id: str) -> Dict[str, Any]:
    """Return one image.

    Raises:
        HTTPException(404) if the image is not found.
    """
    with http_errors():
        record = await _gallery(request).image_dal.require_image(image_id)
    return record.to_dict()


async def upload_images(request: Request, files: List[UploadFile]) -> Dict[str, Any]:
    """Store, analyze and index a batch of uploaded images.

    Files that fail validation, storage or analysis are reported under
    `errors` while the rest of the batch is still processed.

    Args:
        request: FastAPI Request (used to access app.state services and config).
        files: Uploaded image files from the multipart `images` field.

    Returns:
        A dict with `success`, `images`, `errors` and a summary `message`.

    Raises:
        HTTPException(400) if no files or too many files are sent.
    """
    config = request.app.state.config
    with http_errors():
        if not files:
            raise InputValidationError("No files uploaded")
        if len(files) > config.max_upload_files:
            raise InputValidationError(f"At most {config.max_upload_files} files can be uploaded at once")

        uploads = []
        for f in files:
            data = await read_limited(f, config.max_upload_bytes)
            uploads.append(UploadedFile(filename=f.filename or "", content_type=f.content_type, data=data))

        result = await _gallery(request).upload_images(uploads, _base_url(request))

    return {
        "success": bool(result.successes),
        "images": [r.to_dict() for r in result.successes],
        "errors": [f.to_dict() for f in result.failures],
        "message": f"Successfully uploaded {len(result.successes)} of {len(uploads)} images",
    }


async def set_privacy(request: Request, image_id: str, is_private: Any) -> Dict[str, Any]:
    with http_errors():
        record = await _gallery(request).set_privacy(image_id, is_private)
    return {"success": True, "image": record.to_dict()}


async def delete_image(request: Request, image_id: str) -> Dict[str, Any]:
    """Delete an image along with its index entries, album links and files."""
    with http_errors():
        await _gallery(request).delete_image(image_id)
    return {"success": True, "message": "Image deleted successfully"}


async def delete_images(request: Request, image_ids: List[str]) -> Dict[str, Any]:
    with http_errors():
        result = await _gallery(request).delete_images(image_ids)
    return {
        "success": True,
        "deletedIds": result.successes,
        "errors": [f.to_dict() for f in result.failures],
        "message": f"Successfully deleted {len(result.successes)} of {len(image_ids)} images",
    }


async def get_stats(request: Request) -> Dict[str, Any]:
    """Return collection statistics."""
    with http_errors():
        return await _gallery(request).get_stats()


async def cleanup_storage(request: Request) -> Dict[str, Any]:
    """Remove postings and upload files that no image refers to."""
    with http_errors():
        result = await request.app.state.storage_cleaner.cleanup()
    return {"success": True, **result}
