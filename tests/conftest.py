"""
Pytest configuration and fixtures for gallery tests
"""

import pytest

from dal.album_dal import AlbumDAL
from dal.image_dal import ImageDAL
from dal.search_index_dal import SearchIndexDAL
from models.image_record import ImageRecord
from models.metadata import Metadata, PeopleInfo
from utils.database_init import AsyncDatabaseInitializer


@pytest.fixture
async def db(tmp_path):
    """A fresh SQLite database in a temporary directory for each test."""
    initializer = AsyncDatabaseInitializer(tmp_path / "db")
    await initializer.ensure_database()
    return initializer


@pytest.fixture
def image_dal(db):
    return ImageDAL(db)


@pytest.fixture
def index_dal(db):
    return SearchIndexDAL(db)


@pytest.fixture
def album_dal(db):
    return AlbumDAL(db)


def make_metadata(**overrides):
    """Metadata for a typical outdoor photo, with selected fields replaced."""
    values = dict(
        medium="Photography",
        people=PeopleInfo(number=2, gender="Female"),
        actions="Walking",
        clothes="Casual",
        environment="Outdoor",
        colors=["Blue", "Green"],
        style="Realistic",
        mood="Peaceful",
        scene="Two friends walking along a beach at sunset.",
    )
    values.update(overrides)
    return Metadata(**values)


def make_record(image_id=None, upload_date="2024-01-01T00:00:00.000+00:00", metadata=None, **overrides):
    values = dict(
        id=image_id,
        file_name=f"{image_id or 'image'}.jpg",
        file_size=1024,
        mime_type="image/jpeg",
        url=f"/uploads/{image_id or 'image'}.jpg",
        upload_date=upload_date,
        metadata=metadata if metadata is not None else make_metadata(),
    )
    values.update(overrides)
    return ImageRecord(**values)


@pytest.fixture
def store_image(image_dal):
    """Store an image record with an explicit id and upload date."""

    async def _store(image_id, upload_date="2024-01-01T00:00:00.000+00:00", metadata=None, **overrides):
        return await image_dal.create_image(make_record(image_id, upload_date, metadata, **overrides))

    return _store
