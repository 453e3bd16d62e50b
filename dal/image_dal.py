"""Async Data Access Layer for the `images` table.

Provides ImageDAL class with async CRUD operations compatible with
`utils.database_init.AsyncDatabaseInitializer`. Writes that touch an image
row and its postings run in a single transaction.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import aiosqlite

from dal.search_index_dal import SearchIndexDAL
from models.errors import NotFoundError, SearchIndexError
from models.image_record import ImageRecord
from models.metadata import Metadata
from services.normalizer import normalize_metadata
from utils.database_init import AsyncDatabaseInitializer

LOGGER = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class ImageDAL:
    """Data access layer for image records.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    _COLUMNS = (
        "id",
        "file_name",
        "file_size",
        "mime_type",
        "url",
        "file_path",
        "thumbnail_url",
        "upload_date",
        "metadata",
        "private",
    )
    _COLUMN_LIST = ", ".join(_COLUMNS)
    _PLACEHOLDERS = ", ".join("?" for _ in _COLUMNS)
    _ORDER = "ORDER BY upload_date DESC, id ASC"

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_image(self, record: ImageRecord) -> ImageRecord:
        """Insert an image row together with its postings and return the stored record.

        A missing `id` or `upload_date` is generated. The row and every
        posting are committed together; on failure neither is kept.

        Raises:
            SearchIndexError: If the insert fails.
        """
        image_id = record.id or str(uuid.uuid4())
        stored = ImageRecord(
            id=image_id,
            file_name=record.file_name,
            file_size=int(record.file_size or 0),
            mime_type=record.mime_type,
            url=record.url,
            file_path=record.file_path,
            thumbnail_url=record.thumbnail_url or record.url,
            upload_date=record.upload_date or utc_now_iso(),
            metadata=record.metadata,
            private=record.private,
        )
        postings = normalize_metadata(image_id, stored.metadata)

        try:
            async with self._db.connection() as conn:
                try:
                    await conn.execute(
                        f"INSERT INTO images ({self._COLUMN_LIST}) VALUES ({self._PLACEHOLDERS})",
                        self._record_to_row(stored),
                    )
                    await SearchIndexDAL.insert_postings(conn, postings)
                    await conn.commit()
                except BaseException:
                    await conn.rollback()
                    raise
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to store image {image_id}: {exc}") from exc

        LOGGER.info("Stored image %s (%s) with %d postings", image_id, stored.file_name, len(postings))
        return stored

    async def import_image(self, record: ImageRecord) -> ImageRecord:
        """Store an externally produced record under a freshly generated id."""
        fresh = ImageRecord(**{**record.__dict__, "id": str(uuid.uuid4())})
        return await self.create_image(fresh)

    async def get_image_by_id(self, image_id: str) -> Optional[ImageRecord]:
        """Return ImageRecord for `image_id`, or None if not found."""
        rows = await self._fetch_all(
            f"SELECT {self._COLUMN_LIST} FROM images WHERE id = ?", (image_id,)
        )
        return self._row_to_record(rows[0]) if rows else None

    async def require_image(self, image_id: str) -> ImageRecord:
        """Like `get_image_by_id` but raises NotFoundError for unknown ids."""
        record = await self.get_image_by_id(image_id)
        if record is None:
            raise NotFoundError(f"Image {image_id} not found")
        return record

    async def list_images(self) -> List[ImageRecord]:
        """All images, newest upload first."""
        rows = await self._fetch_all(f"SELECT {self._COLUMN_LIST} FROM images {self._ORDER}")
        return [self._row_to_record(r) for r in rows]

    async def list_images_by_ids(self, image_ids: Sequence[str]) -> List[ImageRecord]:
        """Hydrate ids into records, newest upload first. Unknown ids are skipped."""
        if not image_ids:
            return []
        records: Dict[str, ImageRecord] = {}
        # Stay well below SQLite's bound-parameter limit.
        chunk_size = 500
        ids = list(dict.fromkeys(image_ids))
        for start in range(0, len(ids), chunk_size):
            chunk = ids[start:start + chunk_size]
            placeholders = ", ".join("?" for _ in chunk)
            rows = await self._fetch_all(
                f"SELECT {self._COLUMN_LIST} FROM images WHERE id IN ({placeholders})",
                tuple(chunk),
            )
            for row in rows:
                record = self._row_to_record(row)
                records[record.id] = record
        return sort_newest_first(list(records.values()))

    async def list_other_images(self, image_id: str) -> List[ImageRecord]:
        """Every image except `image_id`, newest upload first."""
        rows = await self._fetch_all(
            f"SELECT {self._COLUMN_LIST} FROM images WHERE id != ? {self._ORDER}", (image_id,)
        )
        return [self._row_to_record(r) for r in rows]

    async def set_privacy(self, image_id: str, is_private: bool) -> ImageRecord:
        """Set the private flag and return the updated record.

        Raises:
            NotFoundError: If the image does not exist.
        """
        try:
            async with self._db.connection() as conn:
                cur = await conn.execute(
                    "UPDATE images SET private = ? WHERE id = ?", (1 if is_private else 0, image_id)
                )
                await conn.commit()
                changed = cur.rowcount
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to update image {image_id}: {exc}") from exc
        if not changed:
            raise NotFoundError(f"Image {image_id} not found")
        return await self.require_image(image_id)

    async def delete_image(self, image_id: str) -> ImageRecord:
        """Delete an image row, its postings and its album links in one transaction.

        Returns:
            The record as it was before deletion (callers remove files from it).

        Raises:
            NotFoundError: If the image does not exist.
            SearchIndexError: If the delete fails; nothing is removed.
        """
        try:
            async with self._db.connection() as conn:
                try:
                    cur = await conn.execute(
                        f"SELECT {self._COLUMN_LIST} FROM images WHERE id = ?", (image_id,)
                    )
                    row = await cur.fetchone()
                    if row is None:
                        raise NotFoundError(f"Image {image_id} not found")
                    await conn.execute("DELETE FROM search_index WHERE image_id = ?", (image_id,))
                    await conn.execute("DELETE FROM album_images WHERE image_id = ?", (image_id,))
                    await conn.execute("DELETE FROM images WHERE id = ?", (image_id,))
                    await conn.commit()
                except BaseException:
                    await conn.rollback()
                    raise
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to delete image {image_id}: {exc}") from exc
        LOGGER.info("Deleted image %s", image_id)
        return self._row_to_record(row)

    async def storage_summary(self) -> Dict[str, int]:
        """Counts and byte totals over all images."""
        rows = await self._fetch_all(
            "SELECT COUNT(*), COALESCE(SUM(file_size), 0), "
            "COALESCE(SUM(CASE WHEN private = 1 THEN 1 ELSE 0 END), 0) FROM images"
        )
        total, size, private = rows[0] if rows else (0, 0, 0)
        return {"totalImages": int(total), "storageUsed": int(size), "privateImages": int(private)}

    async def referenced_paths(self) -> List[str]:
        """File paths of every stored image."""
        rows = await self._fetch_all("SELECT file_path FROM images WHERE file_path IS NOT NULL")
        return [r[0] for r in rows]

    async def _fetch_all(self, sql: str, params: tuple = ()) -> List[Sequence[object]]:
        try:
            async with self._db.connection() as conn:
                cur = await conn.execute(sql, params)
                return list(await cur.fetchall())
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Image query failed: {exc}") from exc

    @staticmethod
    def _record_to_row(record: ImageRecord) -> tuple:
        return (
            record.id,
            record.file_name,
            record.file_size,
            record.mime_type,
            record.url,
            record.file_path,
            record.thumbnail_url,
            record.upload_date,
            json.dumps(record.metadata.to_dict()),
            1 if record.private else 0,
        )

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> ImageRecord:
        """Convert a DB row tuple into an ImageRecord."""
        try:
            raw_metadata = json.loads(row[8]) if row[8] else {}
        except (TypeError, ValueError):
            LOGGER.warning("Image %s has unreadable metadata JSON", row[0])
            raw_metadata = {}
        return ImageRecord(
            id=row[0],
            file_name=row[1],
            file_size=int(row[2] or 0),
            mime_type=row[3],
            url=row[4],
            file_path=row[5],
            thumbnail_url=row[6],
            upload_date=row[7],
            metadata=Metadata.from_dict(raw_metadata),
            private=bool(row[9]),
        )


def sort_newest_first(records: Sequence[ImageRecord]) -> List[ImageRecord]:
    """Order records by upload date descending, then id ascending."""
    by_id = sorted(records, key=lambda r: r.id or "")
    return sorted(by_id, key=lambda r: r.upload_date or "", reverse=True)
