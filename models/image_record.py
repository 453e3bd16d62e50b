from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from models.metadata import Metadata


@dataclass
class ImageRecord:
    """In-memory representation of a row in the `images` table.

    Attributes:
        id: Opaque UUID string (None for records not yet stored).
        file_name: Original filename supplied by the uploader.
        file_size: Size of the original file in bytes.
        mime_type: MIME type of the original file.
        url: Public URL of the original file.
        file_path: Filesystem path of the original file.
        thumbnail_url: Public URL of the thumbnail.
        upload_date: ISO-8601 UTC timestamp of the upload.
        metadata: Structured metadata attached at upload/import time.
        private: Whether the image is marked private.
    """

    id: Optional[str]
    file_name: str
    file_size: int = 0
    mime_type: Optional[str] = None
    url: Optional[str] = None
    file_path: Optional[str] = None
    thumbnail_url: Optional[str] = None
    upload_date: Optional[str] = None
    metadata: Metadata = field(default_factory=Metadata)
    private: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses (the file path stays server-side)."""
        return {
            "id": self.id,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "url": self.url,
            "thumbnailUrl": self.thumbnail_url,
            "uploadDate": self.upload_date,
            "metadata": self.metadata.to_dict(),
            "private": self.private,
        }
