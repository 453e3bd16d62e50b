import pytest

from models.errors import NotFoundError
from models.fields import IndexField
from models.metadata import Metadata, PeopleInfo
from services.normalizer import normalize_metadata

from conftest import make_metadata


async def test_create_image_writes_postings(store_image, index_dal):
    metadata = make_metadata()
    await store_image("a", metadata=metadata)
    assert await index_dal.postings_for_image("a") == normalize_metadata("a", metadata)


async def test_lookup_is_case_insensitive_substring(store_image, index_dal):
    await store_image("a", metadata=make_metadata(environment="Outdoor"))
    assert await index_dal.lookup("environment", "OUT") == {"a"}
    assert await index_dal.lookup(IndexField.ENVIRONMENT, "door") == {"a"}
    assert await index_dal.lookup("environment", "indoor") == set()


async def test_lookup_unknown_field_matches_nothing(store_image, index_dal):
    await store_image("a")
    assert await index_dal.lookup("camera", "photo") == set()


async def test_people_lookup_matches_number_or_gender(store_image, index_dal):
    await store_image("a", metadata=Metadata(people=PeopleInfo(number=2, gender="Male")))
    await store_image("b", metadata=Metadata(people=PeopleInfo(number=1, gender="Female")))
    assert await index_dal.lookup("people", "female") == {"b"}
    assert await index_dal.lookup("people", "2") == {"a"}
    # "male" is a substring of "female"
    assert await index_dal.lookup("people", "male") == {"a", "b"}


async def test_like_wildcards_are_literal(store_image, index_dal):
    await store_image("a", metadata=Metadata(medium="100% cotton"))
    await store_image("b", metadata=Metadata(medium="Photography"))
    assert await index_dal.lookup("medium", "%") == {"a"}
    assert await index_dal.lookup("medium", "_") == set()


async def test_lookup_any_spans_fields(store_image, index_dal):
    await store_image("a", metadata=Metadata(mood="Peaceful"))
    await store_image("b", metadata=Metadata(scene="A peaceful harbor"))
    assert await index_dal.lookup_any("peace") == {"a", "b"}


async def test_deindex_then_reindex_restores_postings(store_image, index_dal):
    metadata = make_metadata()
    await store_image("a", metadata=metadata)
    before = await index_dal.postings_for_image("a")

    assert await index_dal.deindex_image("a") == len(before)
    assert await index_dal.postings_for_image("a") == []
    assert await index_dal.deindex_image("a") == 0

    assert await index_dal.index_image("a", metadata) == len(before)
    assert await index_dal.postings_for_image("a") == before


async def test_reindex_replaces_postings_and_stored_metadata(store_image, index_dal, image_dal):
    await store_image("a", metadata=Metadata(medium="Painting"))
    await index_dal.index_image("a", Metadata(medium="Sketch"))
    assert await index_dal.lookup("medium", "painting") == set()
    assert await index_dal.lookup("medium", "sketch") == {"a"}
    record = await image_dal.require_image("a")
    assert record.metadata.medium == "Sketch"


async def test_index_unknown_image_raises(index_dal):
    with pytest.raises(NotFoundError):
        await index_dal.index_image("missing", Metadata(medium="Painting"))


async def test_statistics_queries(store_image, index_dal):
    await store_image("a", metadata=Metadata(style="Modern", people=PeopleInfo(number=2), colors=["Red", "Blue"]))
    await store_image("b", metadata=Metadata(style="Modern", people=PeopleInfo(number=3), colors=["Red"]))
    await store_image("c", metadata=Metadata(style="Vintage", medium="Painting"))

    assert await index_dal.top_values(IndexField.STYLE) == [
        {"value": "modern", "count": 2},
        {"value": "vintage", "count": 1},
    ]
    assert await index_dal.top_values(IndexField.COLORS, limit=1) == [{"value": "red", "count": 2}]
    assert await index_dal.count_distinct_values([IndexField.MEDIUM, IndexField.STYLE]) == 3
    assert await index_dal.total_people() == 5
