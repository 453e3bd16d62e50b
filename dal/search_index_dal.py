"""Async data access layer for the `search_index` postings table.

Postings are `(image_id, field, value)` rows with case-folded values. Reads
always return de-duplicated image id sets; duplicate postings are tolerated
on write.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

import aiosqlite

from models.errors import NotFoundError, SearchIndexError
from models.fields import IndexField, Posting
from models.metadata import Metadata
from models.query import (
    AllOf,
    Condition,
    FieldCondition,
    NeverMatch,
    PeopleCondition,
    TermCondition,
)
from services.normalizer import fold, normalize_metadata
from utils.database_init import AsyncDatabaseInitializer

LOGGER = logging.getLogger(__name__)

# SQLite allows at most 500 terms in one compound SELECT.
MAX_CONDITIONS_PER_QUERY = 200


class SearchIndexDAL:
    """Data access layer for postings.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    @staticmethod
    async def insert_postings(conn: aiosqlite.Connection, postings: Sequence[Posting]) -> None:
        """Insert postings on `conn` without committing.

        Used inside a caller's transaction so that an image row and its
        postings become visible together.
        """
        if not postings:
            return
        await conn.executemany(
            "INSERT INTO search_index (image_id, field, value) VALUES (?, ?, ?)",
            [(p.image_id, p.field.value, p.token) for p in postings],
        )

    async def index_image(self, image_id: str, metadata: Metadata) -> int:
        """Replace the postings of an existing image with those of `metadata`.

        The image row's stored metadata is updated in the same transaction.

        Returns:
            Number of postings written.

        Raises:
            NotFoundError: If no image with `image_id` exists.
            SearchIndexError: If the write fails; nothing is changed.
        """
        postings = normalize_metadata(image_id, metadata)
        try:
            async with self._db.connection() as conn:
                try:
                    cur = await conn.execute("SELECT 1 FROM images WHERE id = ?", (image_id,))
                    if await cur.fetchone() is None:
                        raise NotFoundError(f"Image {image_id} not found")
                    await conn.execute("DELETE FROM search_index WHERE image_id = ?", (image_id,))
                    await self.insert_postings(conn, postings)
                    await conn.execute(
                        "UPDATE images SET metadata = ? WHERE id = ?",
                        (_metadata_json(metadata), image_id),
                    )
                    await conn.commit()
                except BaseException:
                    await conn.rollback()
                    raise
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to index image {image_id}: {exc}") from exc
        LOGGER.debug("Indexed image %s with %d postings", image_id, len(postings))
        return len(postings)

    async def deindex_image(self, image_id: str) -> int:
        """Remove every posting of `image_id`. Returns the number removed (may be 0)."""
        try:
            async with self._db.connection() as conn:
                cur = await conn.execute("DELETE FROM search_index WHERE image_id = ?", (image_id,))
                await conn.commit()
                return max(cur.rowcount, 0)
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to remove postings for {image_id}: {exc}") from exc

    async def lookup(self, field: str | IndexField, token: str) -> Set[str]:
        """Return ids of images whose `field` posting contains `token` (case-insensitive).

        `people` matches either people_number or people_gender; an unknown
        field yields an empty set.
        """
        parsed = field if isinstance(field, IndexField) else IndexField.parse(field)
        folded = fold(token)
        if parsed is None:
            condition: Condition = NeverMatch(str(field))
        elif parsed is IndexField.PEOPLE:
            condition = PeopleCondition(folded)
        else:
            condition = FieldCondition(parsed, folded)
        return set(await self.find_image_ids(AllOf((condition,))))

    async def lookup_any(self, token: str) -> Set[str]:
        """Return ids of images with a posting in any field containing `token`."""
        return set(await self.find_image_ids(AllOf((TermCondition(fold(token)),))))

    async def find_image_ids(self, query: AllOf) -> List[str]:
        """Evaluate a conjunction of conditions and return distinct matching ids.

        Each condition is evaluated per image (any one posting row may satisfy
        it) and the per-condition id sets are intersected. Conditions are sent
        in batches that stay below SQLite's compound-select and bound-parameter
        limits; batch results are intersected here.
        """
        if not query:
            return []
        conditions = list(query.conditions)
        matched: Optional[Dict[str, None]] = None
        try:
            async with self._db.connection() as conn:
                for start in range(0, len(conditions), MAX_CONDITIONS_PER_QUERY):
                    batch = conditions[start:start + MAX_CONDITIONS_PER_QUERY]
                    selects: List[str] = []
                    params: List[Any] = []
                    for condition in batch:
                        where, cond_params = condition.to_sql()
                        selects.append(f"SELECT image_id FROM search_index WHERE {where}")
                        params.extend(cond_params)
                    cur = await conn.execute(" INTERSECT ".join(selects), tuple(params))
                    ids = dict.fromkeys(row[0] for row in await cur.fetchall())
                    matched = ids if matched is None else {i: None for i in matched if i in ids}
                    if not matched:
                        return []
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Search query failed: {exc}") from exc
        return list(matched or ())

    async def postings_for_image(self, image_id: str) -> List[Posting]:
        """Return the stored postings of one image in insertion order."""
        try:
            async with self._db.connection() as conn:
                cur = await conn.execute(
                    "SELECT field, value FROM search_index WHERE image_id = ? ORDER BY id",
                    (image_id,),
                )
                rows = await cur.fetchall()
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Failed to read postings for {image_id}: {exc}") from exc
        postings = []
        for field_name, value in rows:
            parsed = IndexField.parse(field_name)
            if parsed is not None:
                postings.append(Posting(field=parsed, token=value, image_id=image_id))
        return postings

    async def top_values(self, field: IndexField, limit: int = 5) -> List[Dict[str, Any]]:
        """Most frequent values of `field` as `{"value", "count"}` dicts."""
        rows = await self._fetch_all(
            "SELECT value, COUNT(*) AS count FROM search_index WHERE field = ? "
            "GROUP BY value ORDER BY count DESC, value ASC LIMIT ?",
            (field.value, limit),
        )
        return [{"value": row[0], "count": row[1]} for row in rows]

    async def count_distinct_values(self, fields: Iterable[IndexField]) -> int:
        """Number of distinct values across the given fields."""
        names = [f.value for f in fields]
        if not names:
            return 0
        placeholders = ", ".join("?" for _ in names)
        rows = await self._fetch_all(
            f"SELECT COUNT(DISTINCT value) FROM search_index WHERE field IN ({placeholders})",
            tuple(names),
        )
        return int(rows[0][0] or 0) if rows else 0

    async def total_people(self) -> int:
        """Sum of all indexed people counts."""
        rows = await self._fetch_all(
            "SELECT SUM(CAST(value AS INTEGER)) FROM search_index WHERE field = ?",
            (IndexField.PEOPLE_NUMBER.value,),
        )
        return int(rows[0][0] or 0) if rows else 0

    async def _fetch_all(self, sql: str, params: Optional[tuple] = None) -> List[Any]:
        try:
            async with self._db.connection() as conn:
                cur = await conn.execute(sql, params or ())
                return list(await cur.fetchall())
        except aiosqlite.Error as exc:
            raise SearchIndexError(f"Index read failed: {exc}") from exc


def _metadata_json(metadata: Metadata) -> str:
    return json.dumps(metadata.to_dict())
