"""Helpers for saving original images and their thumbnails on disk.

Originals are written as `<uuid><ext>` under the upload directory with
`aiofiles`; thumbnails are rendered next to them as `thumb_<uuid>.jpg`
in a worker thread. Both are served under the `/uploads` URL prefix.
"""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import aiofiles

from services.thumbnail_generator import ThumbnailGenerator

LOGGER = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"


@dataclass
class StoredFile:
    """Locations of a saved original and its thumbnail."""

    file_path: str
    thumbnail_path: str
    url: str
    thumbnail_url: str


class ImageStore:
    """Write uploaded images and thumbnails under a single directory."""

    def __init__(self, upload_dir: Path | str, thumbnails: Optional[ThumbnailGenerator] = None) -> None:
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.thumbnails = thumbnails or ThumbnailGenerator()

    async def save(self, original_name: str, data: bytes, base_url: str = "") -> StoredFile:
        """Save the image bytes, generate a thumbnail and return their locations.

        Args:
            original_name: Uploaded filename; only its extension is kept.
            data: Raw bytes of the uploaded image.
            base_url: Scheme and host prefixed to the public URLs.

        Raises:
            ValueError: If image bytes are missing or the thumbnail cannot be rendered.
        """
        if not data:
            raise ValueError("Image bytes are required for saving.")
        ext = os.path.splitext(original_name or "")[1].lower() or ".jpg"
        stem = str(uuid.uuid4())
        filename = f"{stem}{ext}"
        thumb_filename = f"thumb_{stem}.jpg"
        file_path = self.upload_dir / filename
        thumb_path = self.upload_dir / thumb_filename

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(data)

        try:
            # thumbnail generation is blocking -> run in thread
            await asyncio.to_thread(self.thumbnails.create_thumbnail, str(file_path), str(thumb_path))
        except Exception:
            await self.remove([str(file_path), str(thumb_path)])
            raise

        prefix = base_url.rstrip("/") + UPLOADS_URL_PREFIX
        return StoredFile(
            file_path=str(file_path),
            thumbnail_path=str(thumb_path),
            url=f"{prefix}/{filename}",
            thumbnail_url=f"{prefix}/{thumb_filename}",
        )

    @staticmethod
    def thumbnail_path_for(file_path: str) -> str:
        path = Path(file_path)
        return str(path.with_name(f"thumb_{path.stem}.jpg"))

    async def remove(self, paths: Iterable[Optional[str]]) -> None:
        """Delete files, logging rather than raising on failure."""
        for path in paths:
            if not path:
                continue
            try:
                await asyncio.to_thread(_unlink_if_exists, path)
            except OSError as exc:
                LOGGER.warning("Could not delete file %s: %s", path, exc)


def _unlink_if_exists(path: str) -> None:
    Path(path).unlink(missing_ok=True)
