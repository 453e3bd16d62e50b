"""Async data access for albums and their image membership links."""

from __future__ import annotations

import uuid
from typing import List, Sequence

import aiosqlite

from dal.image_dal import ImageDAL, utc_now_iso
from models.errors import InputValidationError, NotFoundError, SearchIndexError
from models.image_record import ImageRecord
from models.search_models import Album, BatchFailure, BatchResult
from utils.database_init import AsyncDatabaseInitializer


class AlbumDAL:
    """Create albums, link images to them and read them back."""

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_album(self, name: str, description: str = "") -> Album:
        """Insert a new album.

        Raises:
            InputValidationError: If `name` is blank.
        """
        if not isinstance(name, str) or not name.strip():
            raise InputValidationError("Valid album name is required")
        now = utc_now_iso()
        album = Album(
            id=str(uuid.uuid4()),
            name=name.strip(),
            description=(description or "").strip(),
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._db.connection() as conn:
                await conn.execute(
                    "INSERT INTO albums (id, name, description, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                    (album.id, album.name, album.description, album.created_at, album.updated_at),
                )
                await conn.commit()
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to create album: {exc}") from exc
        return album

    async def list_albums(self) -> List[Album]:
        """All albums with their image counts, most recently updated first."""
        try:
            async with self._db.connection() as conn:
                cur = await conn.execute(
                    """
                    SELECT albums.id, albums.name, albums.description, albums.created_at,
                           albums.updated_at, COUNT(album_images.image_id)
                    FROM albums
                    LEFT JOIN album_images ON albums.id = album_images.album_id
                    GROUP BY albums.id
                    ORDER BY albums.updated_at DESC
                    """
                )
                rows = await cur.fetchall()
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to list albums: {exc}") from exc
        return [
            Album(
                id=r[0],
                name=r[1],
                description=r[2] or "",
                created_at=r[3] or "",
                updated_at=r[4] or "",
                image_count=int(r[5] or 0),
            )
            for r in rows
        ]

    async def add_images(self, album_id: str, image_ids: Sequence[str]) -> BatchResult[str]:
        """Link images to an album, skipping links that already exist.

        Unknown image ids are reported as failures; the rest are still added.

        Raises:
            InputValidationError: If `image_ids` is empty.
            NotFoundError: If the album does not exist.
        """
        if not image_ids:
            raise InputValidationError("No image IDs provided")
        result: BatchResult[str] = BatchResult()
        now = utc_now_iso()
        try:
            async with self._db.connection() as conn:
                cur = await conn.execute("SELECT 1 FROM albums WHERE id = ?", (album_id,))
                if await cur.fetchone() is None:
                    raise NotFoundError(f"Album {album_id} not found")
                for image_id in image_ids:
                    try:
                        cur = await conn.execute(
                            "INSERT OR IGNORE INTO album_images (album_id, image_id, added_at) VALUES (?, ?, ?)",
                            (album_id, image_id, now),
                        )
                    except aiosqlite.IntegrityError as exc:
                        result.failures.append(BatchFailure(item=str(image_id), error=str(exc)))
                        continue
                    if cur.rowcount > 0:
                        result.successes.append(image_id)
                if result.successes:
                    await conn.execute("UPDATE albums SET updated_at = ? WHERE id = ?", (now, album_id))
                await conn.commit()
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to add images to album {album_id}: {exc}") from exc
        return result

    async def list_album_images(self, album_id: str) -> List[ImageRecord]:
        """Images of an album, most recently added first.

        Raises:
            NotFoundError: If the album does not exist.
        """
        columns = ", ".join(f"images.{c}" for c in ImageDAL._COLUMNS)
        try:
            async with self._db.connection() as conn:
                cur = await conn.execute("SELECT 1 FROM albums WHERE id = ?", (album_id,))
                if await cur.fetchone() is None:
                    raise NotFoundError(f"Album {album_id} not found")
                cur = await conn.execute(
                    f"""
                    SELECT {columns}
                    FROM images
                    JOIN album_images ON images.id = album_images.image_id
                    WHERE album_images.album_id = ?
                    ORDER BY album_images.added_at DESC, images.id ASC
                    """,
                    (album_id,),
                )
                rows = await cur.fetchall()
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to list album {album_id}: {exc}") from exc
        return [ImageDAL._row_to_record(r) for r in rows]
