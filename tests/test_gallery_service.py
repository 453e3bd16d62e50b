import io
import os

import pytest
from PIL import Image

from models.errors import InputValidationError, NotFoundError, OracleError
from models.metadata import UNKNOWN, Metadata
from services.gallery_service import GalleryService, UploadedFile
from services.image_store import ImageStore
from services.mock_oracle import MockImageAnalyzer


def png_bytes(color=(200, 30, 30, 128), size=(64, 48)):
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FailingAnalyzer:
    async def analyze(self, image_bytes, mime_type="image/jpeg"):
        raise OracleError("vision service unavailable")


class FixedAnalyzer:
    def __init__(self, metadata):
        self.metadata = metadata

    async def analyze(self, image_bytes, mime_type="image/jpeg"):
        return self.metadata


@pytest.fixture
def store(tmp_path):
    return ImageStore(tmp_path / "uploads")


def make_service(image_dal, index_dal, store, vision, **kwargs):
    return GalleryService(image_dal, index_dal, store, vision, **kwargs)


async def test_upload_stores_files_and_indexes(image_dal, index_dal, store):
    metadata = Metadata(medium="Photography", style="Modern", colors=["Red"])
    service = make_service(image_dal, index_dal, store, FixedAnalyzer(metadata))

    record = await service.upload_image(UploadedFile("photo.png", "image/png", png_bytes()), "http://testserver")

    assert record.mime_type == "image/png"
    assert record.url.startswith("http://testserver/uploads/")
    assert os.path.isfile(record.file_path)
    thumb = store.thumbnail_path_for(record.file_path)
    with Image.open(thumb) as img:
        assert img.format == "JPEG"
        assert max(img.size) <= 300
    assert await index_dal.lookup("style", "modern") == {record.id}


async def test_upload_batch_collects_failures(image_dal, index_dal, store):
    service = make_service(image_dal, index_dal, store, MockImageAnalyzer(seed=1), max_upload_bytes=1_000_000)
    uploads = [
        UploadedFile("ok.png", "image/png", png_bytes()),
        UploadedFile("notes.txt", "text/plain", b"hello"),
        UploadedFile("broken.png", "image/png", b"not really a png"),
        UploadedFile("huge.png", "image/png", b"x" * 1_000_001),
    ]

    result = await service.upload_images(uploads)

    assert [r.file_name for r in result.successes] == ["ok.png"]
    assert [f.item for f in result.failures] == ["notes.txt", "broken.png", "huge.png"]
    # only the successful upload and its thumbnail remain on disk
    assert len(os.listdir(store.upload_dir)) == 2


async def test_oracle_failure_without_fallback_fails_item(image_dal, index_dal, store):
    service = make_service(image_dal, index_dal, store, FailingAnalyzer())
    result = await service.upload_images([UploadedFile("a.png", "image/png", png_bytes())])
    assert result.successes == []
    assert "vision service unavailable" in result.failures[0].error
    assert os.listdir(store.upload_dir) == []
    assert await image_dal.list_images() == []


async def test_oracle_failure_with_fallback_uses_placeholder(image_dal, index_dal, store):
    service = make_service(image_dal, index_dal, store, FailingAnalyzer(), fallback_on_oracle_error=True)
    record = await service.upload_image(UploadedFile("a.png", "image/png", png_bytes()))
    assert record.metadata == Metadata.placeholder()
    assert record.metadata.medium == UNKNOWN
    assert await index_dal.lookup("people", "0") == {record.id}


async def test_delete_removes_files(image_dal, index_dal, store):
    service = make_service(image_dal, index_dal, store, MockImageAnalyzer(seed=2))
    record = await service.upload_image(UploadedFile("a.png", "image/png", png_bytes()))

    await service.delete_image(record.id)

    assert os.listdir(store.upload_dir) == []
    assert await index_dal.postings_for_image(record.id) == []
    with pytest.raises(NotFoundError):
        await service.delete_image(record.id)


async def test_delete_images_reports_missing(store_image, image_dal, index_dal, store):
    await store_image("a")
    service = make_service(image_dal, index_dal, store, MockImageAnalyzer())

    result = await service.delete_images(["a", "ghost"])

    assert result.successes == ["a"]
    assert [f.to_dict()["id"] for f in result.failures] == ["ghost"]
    with pytest.raises(InputValidationError):
        await service.delete_images([])


async def test_set_privacy_requires_boolean(store_image, image_dal, index_dal, store):
    await store_image("a")
    service = make_service(image_dal, index_dal, store, MockImageAnalyzer())
    assert (await service.set_privacy("a", True)).private is True
    with pytest.raises(InputValidationError):
        await service.set_privacy("a", "yes")


async def test_reindex_and_stats(store_image, image_dal, index_dal, store):
    await store_image("a", file_size=10, metadata=Metadata(medium="Painting", style="Modern", colors=["Red"]))
    await store_image("b", file_size=20, metadata=Metadata(medium="Painting", mood="Happy"))
    service = make_service(image_dal, index_dal, store, MockImageAnalyzer())

    await service.reindex_image("b", Metadata(medium="Sketch", mood="Happy", colors=["Red", "Blue"]))
    stats = await service.get_stats()

    assert stats["totalImages"] == 2
    assert stats["storageUsed"] == 30
    assert stats["uniqueCategories"] == 4
    assert stats["topColors"] == [{"value": "red", "count": 2}, {"value": "blue", "count": 1}]
    assert stats["topMoods"] == [{"value": "happy", "count": 1}]
