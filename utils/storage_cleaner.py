"""Helpers to remove stray postings and unreferenced upload files."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Set, Tuple

from dal.image_dal import ImageDAL
from utils.database_init import AsyncDatabaseInitializer

LOGGER = logging.getLogger(__name__)


class StorageCleaner:
    """Remove index rows and files that no image record refers to."""

    def __init__(self, db_initializer: AsyncDatabaseInitializer, upload_dir: Path | str) -> None:
        """
        Args:
            db_initializer: Shared database initializer/connection provider.
            upload_dir: Directory holding originals and thumbnails.
        """
        self._db = db_initializer
        self._images = ImageDAL(db_initializer)
        self.upload_dir = Path(upload_dir)

    async def remove_orphan_postings(self) -> int:
        """Delete postings whose image row no longer exists and return count removed."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                "DELETE FROM search_index WHERE image_id NOT IN (SELECT id FROM images)"
            )
            await conn.commit()
            return cur.rowcount if cur.rowcount and cur.rowcount > 0 else 0

    async def remove_unused_files(self) -> Tuple[List[str], int]:
        """Delete upload files not referenced by any image.

        Returns:
            The deleted file names and the number of bytes reclaimed.
        """
        keep: Set[str] = set()
        for file_path in await self._images.referenced_paths():
            path = Path(file_path)
            keep.add(path.name)
            keep.add(f"thumb_{path.stem}.jpg")

        return await asyncio.to_thread(self._unlink_except, keep)

    async def cleanup(self) -> Dict[str, Any]:
        """Run both cleanups and summarize what was removed."""
        postings = await self.remove_orphan_postings()
        deleted, reclaimed = await self.remove_unused_files()
        LOGGER.info("Cleanup removed %d postings and %d files", postings, len(deleted))
        return {"removedPostings": postings, "deletedFiles": deleted, "totalReclaimed": reclaimed}

    def _unlink_except(self, keep: Set[str]) -> Tuple[List[str], int]:
        deleted: List[str] = []
        reclaimed = 0
        if not self.upload_dir.is_dir():
            return deleted, reclaimed
        for entry in sorted(self.upload_dir.iterdir()):
            if not entry.is_file() or entry.name in keep:
                continue
            try:
                size = entry.stat().st_size
                entry.unlink()
            except OSError as exc:
                LOGGER.warning("Could not delete unused file %s: %s", entry, exc)
                continue
            deleted.append(entry.name)
            reclaimed += size
        return deleted, reclaimed
