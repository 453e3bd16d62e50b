from fastapi import Request
from typing import Dict, Any, List, Optional

from controllers.errors import http_errors
from dal.album_dal import AlbumDAL


def _albums(request: Request) -> AlbumDAL:
    return AlbumDAL(request.app.state.db_initializer)


async def create_album(request: Request, name: str, description: Optional[str] = None) -> Dict[str, Any]:
    with http_errors():
        album = await _albums(request).create_album(name, description or "")
    return {"success": True, "album": album.to_dict()}


async def list_albums(request: Request) -> List[Dict[str, Any]]:
    """Return albums with their image counts, most recently changed first."""
    with http_errors():
        albums = await _albums(request).list_albums()
    return [a.to_dict() for a in albums]


async def add_album_images(request: Request, album_id: str, image_ids: List[str]) -> Dict[str, Any]:
    """Link images to an album; ids that cannot be linked are reported in `errors`."""
    with http_errors():
        result = await _albums(request).add_images(album_id, image_ids)
    return {
        "success": True,
        "addedIds": result.successes,
        "errors": [f.to_dict() for f in result.failures],
    }


async def list_album_images(request: Request, album_id: str) -> List[Dict[str, Any]]:
    with http_errors():
        records = await _albums(request).list_album_images(album_id)
    return [r.to_dict() for r in records]
