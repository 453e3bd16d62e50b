from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

UNKNOWN = "Unknown"
PLACEHOLDER_SCENE = (
    "Could not analyze this image. The content might be unclear or the "
    "analysis service encountered an error."
)


def _clean_str(value: Any) -> Optional[str]:
    """Return a stripped string, or None for missing/blank/non-scalar values."""
    if value is None or isinstance(value, (dict, list, tuple, bool)):
        return None
    text = str(value).strip()
    return text or None


def _clean_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class PeopleInfo:
    """People detected in an image.

    Attributes:
        number: Count of people; 0 is a valid, indexable count.
        gender: Free-form description such as "Female" or "Mixed group".
    """

    number: Optional[int] = None
    gender: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["PeopleInfo"]:
        if not isinstance(data, dict):
            return None
        info = cls(number=_clean_int(data.get("number")), gender=_clean_str(data.get("gender")))
        if info.number is None and info.gender is None:
            return None
        return info

    def to_dict(self) -> Dict[str, Any]:
        return {"number": self.number, "gender": self.gender}


@dataclass(frozen=True)
class Metadata:
    """Structured description of an image produced by the vision oracle.

    Every field is optional. Values keep the casing the oracle returned;
    case-folding happens only when postings are derived for the index.
    """

    medium: Optional[str] = None
    people: Optional[PeopleInfo] = None
    actions: Optional[str] = None
    clothes: Optional[str] = None
    environment: Optional[str] = None
    colors: List[str] = field(default_factory=list)
    style: Optional[str] = None
    mood: Optional[str] = None
    scene: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Metadata":
        """Build Metadata from a loosely shaped dict (oracle output or stored JSON).

        Unknown keys are ignored, blank strings become None, and a non-list
        `colors` value is treated as a single color.
        """
        if not isinstance(data, dict):
            return cls()

        raw_colors = data.get("colors")
        if isinstance(raw_colors, (list, tuple)):
            colors = [c for c in (_clean_str(v) for v in raw_colors) if c]
        else:
            single = _clean_str(raw_colors)
            colors = [single] if single else []

        return cls(
            medium=_clean_str(data.get("medium")),
            people=PeopleInfo.from_dict(data.get("people")),
            actions=_clean_str(data.get("actions")),
            clothes=_clean_str(data.get("clothes")),
            environment=_clean_str(data.get("environment")),
            colors=colors,
            style=_clean_str(data.get("style")),
            mood=_clean_str(data.get("mood")),
            scene=_clean_str(data.get("scene")),
        )

    @classmethod
    def placeholder(cls) -> "Metadata":
        """Metadata used when analysis fails under the fallback policy."""
        return cls(
            medium=UNKNOWN,
            people=PeopleInfo(number=0, gender=None),
            environment=UNKNOWN,
            colors=[UNKNOWN],
            style=UNKNOWN,
            mood=UNKNOWN,
            scene=PLACEHOLDER_SCENE,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "medium": self.medium,
            "people": self.people.to_dict() if self.people else None,
            "actions": self.actions,
            "clothes": self.clothes,
            "environment": self.environment,
            "colors": list(self.colors),
            "style": self.style,
            "mood": self.mood,
            "scene": self.scene,
        }
