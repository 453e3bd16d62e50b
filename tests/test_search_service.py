import pytest

from models.errors import InputValidationError
from models.metadata import Metadata, PeopleInfo
from services.mock_oracle import MockCriteriaExtractor
from services.search_service import SearchService, criteria_to_search


class BrokenExtractor:
    async def extract(self, query):
        raise RuntimeError("quota exceeded")


def test_criteria_to_search_maps_fields():
    criteria = criteria_to_search(
        {
            "medium": "Photography",
            "mood": "",
            "people": {"number": 2, "gender": "Female"},
            "colors": ["Red", "Blue"],
            "keywords": ["sunset", " "],
            "scene": "ignored",
        }
    )
    assert criteria.filters == {"medium": "Photography", "people": "Female", "colors": "Red"}
    assert criteria.keywords == ["sunset"]
    assert criteria.query == "sunset"


def test_criteria_people_falls_back_to_number():
    assert criteria_to_search({"people": {"number": 0, "gender": None}}).filters == {"people": "0"}


def test_criteria_to_search_ignores_garbage():
    assert criteria_to_search(None).to_dict() == {"filters": {}, "keywords": []}
    assert criteria_to_search({"colors": "Green"}).filters == {"colors": "Green"}


async def test_mock_extractor_prefers_female_over_male():
    criteria = await MockCriteriaExtractor().extract("a group of women dancing")
    assert criteria["people"] == {"number": 3, "gender": "Female"}
    assert criteria["actions"] == "Dancing"


async def test_natural_search_with_mock_extractor(store_image, image_dal, index_dal):
    await store_image("beach", metadata=Metadata(environment="Beach", colors=["Blue"], scene="Waves under a sunset"))
    await store_image("city", metadata=Metadata(environment="Urban", colors=["Blue"]))
    service = SearchService(image_dal, index_dal, MockCriteriaExtractor())

    results, criteria = await service.natural_search("blue beach at sunset")

    assert criteria.filters == {"environment": "Beach", "colors": "Blue"}
    assert "sunset" in criteria.keywords
    assert [r.id for r in results] == ["beach"]


async def test_natural_search_people_filter(store_image, image_dal, index_dal):
    await store_image("women", metadata=Metadata(people=PeopleInfo(number=2, gender="Female")))
    await store_image("men", metadata=Metadata(people=PeopleInfo(number=1, gender="Male")))
    service = SearchService(image_dal, index_dal, MockCriteriaExtractor())

    results, _ = await service.natural_search("person female")

    assert [r.id for r in results] == ["women"]


async def test_natural_search_degrades_when_oracle_fails(store_image, image_dal, index_dal):
    await store_image("a")
    service = SearchService(image_dal, index_dal, BrokenExtractor())

    results, criteria = await service.natural_search("anything at all")

    assert criteria.to_dict() == {"filters": {}, "keywords": []}
    assert [r.id for r in results] == ["a"]


@pytest.mark.parametrize("query", [None, "", "   ", 5])
async def test_natural_search_requires_text(image_dal, index_dal, query):
    with pytest.raises(InputValidationError):
        await SearchService(image_dal, index_dal, MockCriteriaExtractor()).natural_search(query)


def test_criteria_to_search_skips_non_finite_numbers():
    criteria = criteria_to_search({"people": {"number": float("nan")}, "mood": float("inf")})
    assert criteria.filters == {}


def test_people_info_skips_non_finite_count():
    assert PeopleInfo.from_dict({"number": float("inf"), "gender": "Male"}) == PeopleInfo(number=None, gender="Male")


class OddOutputExtractor:
    async def extract(self, query):
        return {"people": {"number": float("nan")}, "keywords": ["harbor"]}


async def test_natural_search_tolerates_odd_oracle_numbers(store_image, image_dal, index_dal):
    await store_image("a", metadata=Metadata(scene="Boats in the harbor"))
    service = SearchService(image_dal, index_dal, OddOutputExtractor())

    results, criteria = await service.natural_search("boats in the harbor")

    assert criteria.to_dict() == {"filters": {}, "keywords": ["harbor"]}
    assert [r.id for r in results] == ["a"]
