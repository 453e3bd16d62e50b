"""Prompt builders for image tagging and search-criteria extraction."""


def build_system_prompt() -> str:
    """Return the system prompt for the image tagger."""
    return (
        "You are a meticulous photo archivist. "
        "You describe images factually and tag them with short, reusable values "
        "so they can be searched later."
    )


def build_user_prompt() -> str:
    """Return the user prompt sent alongside the image."""
    return (
        "Analyze this image and fill in every field of the metadata tool. "
        "Keep values concise (1-2 words) except for the scene description, "
        "which should be factual and 40-50 words long. "
        "Use null for fields that don't apply."
    )


def build_criteria_prompt(query: str) -> str:
    """Return the instruction for turning a sentence into search criteria."""
    return (
        f'Extract search criteria from this natural language query: "{query}". '
        "Include only fields that are explicitly mentioned in the query and "
        "leave out fields that aren't mentioned (don't use null, just omit them). "
        "Put any other significant words into `keywords`. "
        "Be precise and concise with extracted values."
    )
