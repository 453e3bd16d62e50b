"""Local stand-ins for the vision and criteria oracles.

Used when MOCK_VISION is enabled so the gallery runs without an API key.
"""

from __future__ import annotations

import random
import re
from typing import Any, Dict, List, Optional

from models.metadata import Metadata, PeopleInfo

MEDIUMS = ["Photography", "Painting", "Digital Art", "Illustration", "Sketch"]
STYLES = ["Abstract", "Realistic", "Vintage", "Modern", "Minimalist", "Surreal"]
MOODS = ["Happy", "Sad", "Dramatic", "Nostalgic", "Peaceful", "Mysterious"]
ENVIRONMENTS = ["Indoor", "Outdoor", "Urban", "Nature", "Studio", "Beach"]
COLORS = ["Red", "Blue", "Green", "Yellow", "Purple", "Orange", "Black", "White"]
ACTIONS = ["Standing", "Running", "Sitting", "Dancing", "Jumping", "Sleeping"]
CLOTHES = ["Formal", "Casual", "Sportswear", "Traditional", "Vintage", "Elegant"]
GENDERS = ["Male", "Female", "Mixed group"]
SCENES = [
    "A serene landscape with mountains in the background and a calm lake reflecting the sky.",
    "A bustling city street with people walking and cars passing by.",
    "A cozy living room with a fireplace and comfortable furniture.",
    "A beautiful sunset over the ocean with waves crashing on the shore.",
    "A forest path with sunlight filtering through the trees.",
    "An abstract composition of shapes and colors creating a vibrant pattern.",
    "A portrait of a person with an expressive facial expression.",
    "A still life arrangement of fruits and flowers on a table.",
    "A macro shot of a flower with intricate details visible.",
    "A snowy winter scene with trees covered in white.",
]

_STOP_WORDS = {
    "people", "person", "male", "female", "men", "women", "man", "woman",
    "group", "multiple", "with", "in", "and", "the", "a", "an", "of",
    "find", "show", "search", "for", "me", "images",
}


class MockImageAnalyzer:
    """Produce random but plausible metadata."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._random = random.Random(seed)

    async def analyze(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> Metadata:
        rnd = self._random
        count = rnd.randint(0, 5)
        people = PeopleInfo(number=count, gender=rnd.choice(GENDERS)) if count else None
        return Metadata(
            medium=rnd.choice(MEDIUMS),
            people=people,
            actions=rnd.choice(ACTIONS) if count else None,
            clothes=rnd.choice(CLOTHES) if count else None,
            environment=rnd.choice(ENVIRONMENTS),
            colors=[rnd.choice(COLORS), rnd.choice(COLORS)],
            style=rnd.choice(STYLES),
            mood=rnd.choice(MOODS),
            scene=rnd.choice(SCENES),
        )


def _first_mentioned(text: str, options: List[str]) -> Optional[str]:
    for option in options:
        if option.lower() in text:
            return option
    return None


class MockCriteriaExtractor:
    """Keyword-spotting criteria extraction over the mock vocabulary."""

    async def extract(self, query: str) -> Dict[str, Any]:
        text = (query or "").lower()
        words = set(re.findall(r"\w+", text))
        criteria: Dict[str, Any] = {}

        for key, options in (
            ("medium", MEDIUMS),
            ("style", STYLES),
            ("mood", MOODS),
            ("environment", ENVIRONMENTS),
            ("actions", ACTIONS),
            ("clothes", CLOTHES),
        ):
            found = _first_mentioned(text, options)
            if found:
                criteria[key] = found

        colors = [c for c in COLORS if c.lower() in words]
        if colors:
            criteria["colors"] = colors

        if words & {"people", "person", "group", "multiple"}:
            people: Dict[str, Any] = {"number": 3 if words & {"group", "multiple"} else 1}
            if words & {"female", "women", "woman"}:
                people["gender"] = "Female"
            elif words & {"male", "men", "man"}:
                people["gender"] = "Male"
            criteria["people"] = people

        vocabulary = {v.lower() for v in MEDIUMS + STYLES + MOODS + ENVIRONMENTS + COLORS + ACTIONS + CLOTHES}
        keywords = [
            w for w in dict.fromkeys(re.findall(r"\w+", text))
            if len(w) > 3 and w not in vocabulary and w not in _STOP_WORDS
        ]
        if keywords:
            criteria["keywords"] = keywords
        return criteria
