"""Upload, deletion and statistics workflows for the gallery.

Batch operations never stop at the first bad item: each item either lands in
`successes` or is recorded in `failures` with its error message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from dal.image_dal import ImageDAL
from dal.search_index_dal import SearchIndexDAL
from models.errors import GalleryError, InputValidationError, OracleError
from models.fields import CATEGORY_FIELDS, IndexField
from models.image_record import ImageRecord
from models.metadata import Metadata
from models.search_models import BatchFailure, BatchResult
from services.image_store import ImageStore
from utils.media_validation import validate_image_upload

LOGGER = logging.getLogger(__name__)

TOP_VALUE_LIMIT = 5


class VisionOracle(Protocol):
    async def analyze(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> Metadata:
        ...


@dataclass
class UploadedFile:
    """An uploaded file already read into memory."""

    filename: str
    content_type: Optional[str]
    data: bytes


class GalleryService:
    """Coordinate storage, analysis and indexing of images."""

    def __init__(
        self,
        image_dal: ImageDAL,
        index_dal: SearchIndexDAL,
        store: ImageStore,
        vision: VisionOracle,
        *,
        fallback_on_oracle_error: bool = False,
        max_upload_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        self.image_dal = image_dal
        self.index_dal = index_dal
        self.store = store
        self.vision = vision
        self.fallback_on_oracle_error = fallback_on_oracle_error
        self.max_upload_bytes = max_upload_bytes

    async def analyze(self, data: bytes, mime_type: str) -> Metadata:
        """Run the vision oracle, substituting placeholder metadata when allowed.

        Raises:
            OracleError: If analysis fails and the fallback policy is off.
        """
        try:
            return await self.vision.analyze(data, mime_type)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            if not self.fallback_on_oracle_error:
                if isinstance(exc, OracleError):
                    raise
                raise OracleError(f"Image analysis failed: {exc}") from exc
            LOGGER.error("Image analysis failed, storing placeholder metadata: %s", exc)
            return Metadata.placeholder()

    async def upload_image(self, upload: UploadedFile, base_url: str = "") -> ImageRecord:
        """Validate, store, analyze and index a single upload.

        Files written for a failed upload are removed again.
        """
        mime_type = validate_image_upload(
            upload.filename, upload.content_type, len(upload.data), self.max_upload_bytes
        )
        stored = await self.store.save(upload.filename, upload.data, base_url)
        try:
            metadata = await self.analyze(upload.data, mime_type)
            return await self.image_dal.create_image(
                ImageRecord(
                    id=None,
                    file_name=upload.filename,
                    file_size=len(upload.data),
                    mime_type=mime_type,
                    url=stored.url,
                    file_path=stored.file_path,
                    thumbnail_url=stored.thumbnail_url,
                    metadata=metadata,
                )
            )
        except BaseException:
            await self.store.remove([stored.file_path, stored.thumbnail_path])
            raise

    async def upload_images(self, uploads: Sequence[UploadedFile], base_url: str = "") -> BatchResult[ImageRecord]:
        """Upload every file, collecting per-file failures instead of aborting."""
        result: BatchResult[ImageRecord] = BatchResult()
        for upload in uploads:
            try:
                result.successes.append(await self.upload_image(upload, base_url))
            except (GalleryError, ValueError, OSError) as exc:
                LOGGER.warning("Error processing image %s: %s", upload.filename, exc)
                result.failures.append(BatchFailure(item=upload.filename, error=str(exc)))
        return result

    async def delete_image(self, image_id: str) -> ImageRecord:
        """Delete an image with its postings and album links, then its files.

        Raises:
            NotFoundError: If the image does not exist.
        """
        record = await self.image_dal.delete_image(image_id)
        if record.file_path:
            await self.store.remove([record.file_path, self.store.thumbnail_path_for(record.file_path)])
        return record

    async def delete_images(self, image_ids: Sequence[str]) -> BatchResult[str]:
        """Delete several images, recording the ones that could not be deleted.

        Raises:
            InputValidationError: If no ids are given.
        """
        if not image_ids:
            raise InputValidationError("No image IDs provided")
        result: BatchResult[str] = BatchResult()
        for image_id in image_ids:
            try:
                await self.delete_image(image_id)
                result.successes.append(image_id)
            except GalleryError as exc:
                result.failures.append(BatchFailure(item=str(image_id), error=str(exc)))
        return result

    async def set_privacy(self, image_id: str, is_private: Any) -> ImageRecord:
        if not isinstance(is_private, bool):
            raise InputValidationError("isPrivate must be a boolean value")
        return await self.image_dal.set_privacy(image_id, is_private)

    async def reindex_image(self, image_id: str, metadata: Metadata) -> int:
        """Replace an image's metadata and postings."""
        return await self.index_dal.index_image(image_id, metadata)

    async def get_stats(self) -> Dict[str, Any]:
        """Collection statistics derived from the image table and the index."""
        stats: Dict[str, Any] = await self.image_dal.storage_summary()
        stats["uniqueCategories"] = await self.index_dal.count_distinct_values(CATEGORY_FIELDS)
        stats["totalPeople"] = await self.index_dal.total_people()
        tops: List[tuple] = [
            ("topStyles", IndexField.STYLE),
            ("topEnvironments", IndexField.ENVIRONMENT),
            ("topMoods", IndexField.MOOD),
            ("topColors", IndexField.COLORS),
        ]
        for key, field in tops:
            stats[key] = await self.index_dal.top_values(field, TOP_VALUE_LIMIT)
        return stats
