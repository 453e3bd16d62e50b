"""Schema definitions for the metadata extraction tools."""

from typing import Any, Dict

ANALYZE_FUNCTION_NAME = "describe_image"
CRITERIA_FUNCTION_NAME = "extract_search_criteria"


def _nullable(description: str, kind: str = "string") -> Dict[str, Any]:
    return {"type": [kind, "null"], "description": description}


ANALYZE_FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": ANALYZE_FUNCTION_NAME,
    "description": "Return structured metadata describing the image.",
    "parameters": {
        "type": "object",
        "properties": {
            "medium": _nullable("Photography, Painting, Digital Art, etc."),
            "people": {
                "type": "object",
                "properties": {
                    "number": _nullable("Number of people detected (0 if none).", "integer"),
                    "gender": _nullable("Males, Females, Mixed group, etc. Null if no people."),
                },
                "required": ["number", "gender"],
                "additionalProperties": False,
            },
            "actions": _nullable("Running, dancing, sitting, etc. Null if not applicable."),
            "clothes": _nullable("Formal, casual, sportswear, etc. Null if not applicable."),
            "environment": _nullable("Indoor, outdoor, city, nature, etc."),
            "colors": {
                "type": "array",
                "items": {"type": "string"},
                "description": "The two most dominant colors.",
            },
            "style": _nullable("Abstract, realistic, vintage, modern, etc."),
            "mood": _nullable("Happy, dramatic, nostalgic, etc."),
            "scene": _nullable("Factual description of the scene in 40-50 words."),
        },
        "required": [
            "medium",
            "people",
            "actions",
            "clothes",
            "environment",
            "colors",
            "style",
            "mood",
            "scene",
        ],
        "additionalProperties": False,
    },
    "strict": True,
}

# Not strict: fields the query does not mention must be omitted, not nulled.
CRITERIA_FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": CRITERIA_FUNCTION_NAME,
    "description": "Return the search criteria explicitly mentioned in the query.",
    "parameters": {
        "type": "object",
        "properties": {
            "medium": {"type": "string", "description": "e.g. Photography"},
            "people": {
                "type": "object",
                "properties": {
                    "number": {"type": "integer"},
                    "gender": {"type": "string"},
                },
            },
            "actions": {"type": "string", "description": "e.g. Running"},
            "clothes": {"type": "string"},
            "environment": {"type": "string", "description": "e.g. Outdoor"},
            "colors": {"type": "array", "items": {"type": "string"}},
            "style": {"type": "string", "description": "e.g. Vintage"},
            "mood": {"type": "string", "description": "e.g. Happy"},
            "keywords": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Other significant keywords from the query.",
            },
        },
    },
}
