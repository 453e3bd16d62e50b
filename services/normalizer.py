"""Turn image metadata into the postings stored in the search index.

Every token is case-folded before it is emitted. The function is pure: the
same metadata and id always yield the same postings in the same order.
"""

from __future__ import annotations

import re
from typing import List, Optional

from models.fields import IndexField, Posting
from models.metadata import Metadata

MIN_SCENE_WORD_LENGTH = 4

_PUNCTUATION = re.compile(r"[^\w\s]")


def fold(value: str) -> str:
    """Case-fold and trim a token value."""
    return value.strip().casefold()


def extract_scene_words(scene: Optional[str]) -> List[str]:
    """Return the unique words of `scene` worth indexing, in first-seen order.

    Words are case-folded, stripped of punctuation and kept only when longer
    than three characters.
    """
    if not scene:
        return []
    words = _PUNCTUATION.sub("", scene.casefold()).split()
    seen = dict.fromkeys(w for w in words if len(w) >= MIN_SCENE_WORD_LENGTH)
    return list(seen)


def normalize_metadata(image_id: str, metadata: Metadata) -> List[Posting]:
    """Compute the postings for one image.

    Args:
        image_id: Id of the image the postings belong to.
        metadata: Metadata attached to the image.

    Returns:
        Postings in field order: scalar fields, one per color, the full scene
        text, then one per unique scene word.
    """
    postings: List[Posting] = []

    def emit(field: IndexField, value: Optional[str]) -> None:
        if value is None:
            return
        token = fold(value)
        if token:
            postings.append(Posting(field=field, token=token, image_id=image_id))

    emit(IndexField.MEDIUM, metadata.medium)
    if metadata.people is not None:
        if metadata.people.number is not None:
            emit(IndexField.PEOPLE_NUMBER, str(metadata.people.number))
        emit(IndexField.PEOPLE_GENDER, metadata.people.gender)
    emit(IndexField.ACTIONS, metadata.actions)
    emit(IndexField.CLOTHES, metadata.clothes)
    emit(IndexField.ENVIRONMENT, metadata.environment)
    for color in metadata.colors:
        emit(IndexField.COLORS, color)
    emit(IndexField.STYLE, metadata.style)
    emit(IndexField.MOOD, metadata.mood)
    emit(IndexField.SCENE, metadata.scene)
    for word in extract_scene_words(metadata.scene):
        emit(IndexField.SCENE_WORD, word)

    return postings
