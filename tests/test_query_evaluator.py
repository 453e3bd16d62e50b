import pytest

from models.errors import InputValidationError
from models.fields import IndexField
from models.metadata import Metadata
from models.query import FieldCondition, NeverMatch, PeopleCondition, TermCondition
from services.query_evaluator import build_query, describe, validate_filters
from services.search_service import SearchService


@pytest.fixture
def search(image_dal, index_dal):
    return SearchService(image_dal, index_dal)


def test_build_query_terms_then_filters():
    query, cleaned = build_query("Red  red car", {"Medium": " Photo ", "mood": "", "style": None})
    assert query.conditions == (
        TermCondition("red"),
        TermCondition("car"),
        FieldCondition(IndexField.MEDIUM, "photo"),
    )
    assert cleaned == {"medium": "Photo"}


def test_build_query_special_filters():
    query, _ = build_query("", {"people": "Female", "camera": "Nikon"})
    assert query.conditions == (PeopleCondition("female"), NeverMatch("camera"))
    assert describe(query) == "people~'female' AND camera:never"


def test_empty_query_builds_empty_tree():
    query, _ = build_query(None, {})
    assert not query
    assert describe(query) is None


@pytest.mark.parametrize("filters", [["medium"], {"medium": 3}, {1: "x"}, "medium=photo"])
def test_malformed_filters_rejected(filters):
    with pytest.raises(InputValidationError):
        validate_filters(filters)


def test_non_string_query_rejected():
    with pytest.raises(InputValidationError):
        build_query(42, None)


async def test_term_matches_any_field_but_filter_is_scoped(store_image, search):
    await store_image("a", metadata=Metadata(mood="Calm", environment="Urban"))
    await store_image("b", metadata=Metadata(scene="A calm lake"))

    assert {r.id for r in await search.search("calm")} == {"a", "b"}
    assert [r.id for r in await search.search("", {"mood": "calm"})] == ["a"]


async def test_terms_and_filters_are_combined_with_and(store_image, search):
    await store_image("a", metadata=Metadata(medium="Photography", mood="Happy", environment="Beach"))
    await store_image("b", metadata=Metadata(medium="Photography", mood="Sad", environment="Beach"))
    await store_image("c", metadata=Metadata(medium="Painting", mood="Happy", environment="Beach"))

    assert [r.id for r in await search.search("happy beach", {"medium": "photo"})] == ["a"]
    assert await search.search("happy sad") == []


async def test_empty_search_returns_everything_newest_first(store_image, search):
    await store_image("old", upload_date="2024-01-01T00:00:00.000+00:00")
    await store_image("new", upload_date="2024-06-01T00:00:00.000+00:00")

    assert [r.id for r in await search.search("", {})] == ["new", "old"]
    assert await search.search_ids("   ", {"mood": "  "}) == ["new", "old"]


async def test_no_match_returns_empty_list(store_image, search):
    await store_image("a")
    assert await search.search("zebra") == []
    assert await search.search("", {"camera": "nikon"}) == []


async def test_results_are_hydrated_newest_first(store_image, search):
    await store_image("b", upload_date="2024-03-01T00:00:00.000+00:00", metadata=Metadata(style="Modern"))
    await store_image("a", upload_date="2024-03-01T00:00:00.000+00:00", metadata=Metadata(style="Modern"))
    await store_image("c", upload_date="2024-05-01T00:00:00.000+00:00", metadata=Metadata(style="Modern"))

    assert await search.search_ids("modern") == ["c", "a", "b"]


async def test_validation_happens_before_lookup(search):
    with pytest.raises(InputValidationError):
        await search.search("x", {"medium": ["photo"]})


async def test_long_queries_are_evaluated_in_batches(store_image, search):
    words = [f"word{i:03d}" for i in range(450)]
    await store_image("long", metadata=Metadata(scene=" ".join(words)))
    await store_image("short", metadata=Metadata(scene="word000 only"))

    assert await search.search_ids(" ".join(words)) == ["long"]
    assert await search.search_ids(" ".join(words + ["missing"])) == []
    assert await search.search(" ".join(f"t{i}" for i in range(600))) == []
