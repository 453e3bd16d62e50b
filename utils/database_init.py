import asyncio
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiosqlite

DATABASE_FILENAME = "gallery.db"

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS images (
        id TEXT PRIMARY KEY,
        file_name TEXT NOT NULL,
        file_size INTEGER NOT NULL DEFAULT 0,
        mime_type TEXT,
        url TEXT,
        file_path TEXT,
        thumbnail_url TEXT,
        upload_date TEXT NOT NULL,
        metadata TEXT NOT NULL,
        private INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS search_index (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        image_id TEXT NOT NULL,
        field TEXT NOT NULL,
        value TEXT NOT NULL,
        FOREIGN KEY (image_id) REFERENCES images(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS albums (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        created_at TEXT,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS album_images (
        album_id TEXT NOT NULL,
        image_id TEXT NOT NULL,
        added_at TEXT,
        PRIMARY KEY (album_id, image_id),
        FOREIGN KEY (album_id) REFERENCES albums(id) ON DELETE CASCADE,
        FOREIGN KEY (image_id) REFERENCES images(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_images_upload_date ON images(upload_date)",
    "CREATE INDEX IF NOT EXISTS idx_search_field ON search_index(field)",
    "CREATE INDEX IF NOT EXISTS idx_search_value ON search_index(value)",
    "CREATE INDEX IF NOT EXISTS idx_search_image_id ON search_index(image_id)",
    "CREATE INDEX IF NOT EXISTS idx_album_images_image_id ON album_images(image_id)",
)


class AsyncDatabaseInitializer:
    """
    Manage the gallery's async SQLite database.

    - The database file is located at: <db_dir>/gallery.db, where `db_dir`
      is the constructor argument or, when omitted, the DATABASE_DIR
      environment variable.
    - A RuntimeError is raised if the directory is missing from both, or
      points to a file, or cannot be created.
    - The first call to `ensure_database()` creates the tables and indexes
      (existing data is kept) and switches the file to WAL journaling.
      Later calls are no-ops, so `connection()` can call it every time.
    - Every connection has foreign keys enabled so postings and album links
      cascade with their image.
    """

    def __init__(self, db_dir: Optional[Path | str] = None) -> None:
        raw_dir = str(db_dir) if db_dir is not None else os.getenv("DATABASE_DIR")

        if raw_dir is None or not raw_dir.strip():
            raise RuntimeError(
                "DATABASE_DIR environment variable must be set to a writable "
                "directory path where the SQLite database file will be stored."
            )

        path = Path(raw_dir).expanduser()

        if path.exists() and not path.is_dir():
            raise RuntimeError(
                f"DATABASE_DIR={raw_dir!r} points to a file, not a directory "
                f"({path}). Please set DATABASE_DIR to a directory path."
            )

        try:
            path.mkdir(parents=True, exist_ok=True)
        except Exception as exc:
            raise RuntimeError(
                f"Failed to create or access database directory at {path}"
            ) from exc

        self.db_dir = path
        self.db_path = path / DATABASE_FILENAME
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def ensure_database(self) -> None:
        """
        Create the schema at `self.db_path` if it does not exist yet.

        Subsequent calls on the same instance are no-ops.
        """
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            max_attempts = 3
            for attempt in range(1, max_attempts + 1):
                try:
                    async with aiosqlite.connect(self.db_path) as db:
                        await db.execute("PRAGMA journal_mode=WAL")
                        for statement in SCHEMA_STATEMENTS:
                            await db.execute(statement)
                        await db.commit()
                    break
                except FileNotFoundError:
                    # On some platforms a transient missing file error may occur; retry a few times.
                    if attempt >= max_attempts:
                        raise
                    await asyncio.sleep(0.1 * attempt)

            self._initialized = True

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Async context manager yielding an `aiosqlite.Connection`.

        The schema is created on first use via `ensure_database()`. Writes
        are not committed automatically; callers commit or roll back their
        own unit of work.
        """
        await self.ensure_database()
        conn = await aiosqlite.connect(self.db_path)
        try:
            await conn.execute("PRAGMA foreign_keys=ON")
            yield conn
        finally:
            await conn.close()
