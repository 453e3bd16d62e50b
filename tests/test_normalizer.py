from models.fields import IndexField, Posting
from models.metadata import Metadata, PeopleInfo
from services.normalizer import extract_scene_words, fold, normalize_metadata

from conftest import make_metadata


def test_scene_words_drop_short_words_and_punctuation():
    assert extract_scene_words("A red car speeds past quickly.") == ["speeds", "past", "quickly"]
    assert extract_scene_words("A red car, parked.") == ["parked"]


def test_scene_words_are_unique_in_first_seen_order():
    assert extract_scene_words("Waves, WAVES and more waves near rocks!") == ["waves", "more", "near", "rocks"]


def test_scene_words_empty_for_missing_scene():
    assert extract_scene_words(None) == []
    assert extract_scene_words("") == []


def test_postings_are_case_folded():
    postings = normalize_metadata("img-1", Metadata(medium="  Photography ", colors=["BLUE"]))
    assert postings == [
        Posting(IndexField.MEDIUM, "photography", "img-1"),
        Posting(IndexField.COLORS, "blue", "img-1"),
    ]


def test_postings_follow_field_order():
    postings = normalize_metadata("img-1", make_metadata(scene="Calm lake view"))
    fields = [p.field for p in postings]
    assert fields == [
        IndexField.MEDIUM,
        IndexField.PEOPLE_NUMBER,
        IndexField.PEOPLE_GENDER,
        IndexField.ACTIONS,
        IndexField.CLOTHES,
        IndexField.ENVIRONMENT,
        IndexField.COLORS,
        IndexField.COLORS,
        IndexField.STYLE,
        IndexField.MOOD,
        IndexField.SCENE,
        IndexField.SCENE_WORD,
        IndexField.SCENE_WORD,
        IndexField.SCENE_WORD,
    ]
    assert [p.token for p in postings if p.field is IndexField.SCENE_WORD] == ["calm", "lake", "view"]


def test_normalize_is_deterministic():
    metadata = make_metadata()
    assert normalize_metadata("a", metadata) == normalize_metadata("a", metadata)


def test_zero_people_is_indexed():
    postings = normalize_metadata("img", Metadata(people=PeopleInfo(number=0)))
    assert postings == [Posting(IndexField.PEOPLE_NUMBER, "0", "img")]


def test_missing_fields_emit_nothing():
    assert normalize_metadata("img", Metadata()) == []


def test_fold_trims_and_casefolds():
    assert fold("  StraSSe ") == "strasse"
