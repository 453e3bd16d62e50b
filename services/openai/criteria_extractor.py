"""Natural-language to search-criteria extraction via the Responses API."""

import logging
from typing import Any, Dict

from openai import AsyncOpenAI

from services.openai.image_prompts import build_criteria_prompt
from services.openai.image_schema import CRITERIA_FUNCTION_DEFINITION, CRITERIA_FUNCTION_NAME
from services.openai.media_inputs import build_text_inputs
from services.openai.response_parser import parse_function_call

LOGGER = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You convert photo search requests into structured filters for an image "
    "gallery. Only report what the user actually asked for."
)


class CriteriaExtractor:
    """Ask a language model which metadata fields a search sentence mentions."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-5") -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def extract(self, query: str) -> Dict[str, Any]:
        """Return raw criteria for `query`, or an empty dict if extraction fails."""
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=build_text_inputs(SYSTEM_PROMPT, build_criteria_prompt(query)),
                tools=[CRITERIA_FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": CRITERIA_FUNCTION_NAME},
            )
            return parse_function_call(response, tool_name=CRITERIA_FUNCTION_NAME)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("Error extracting search criteria: %s", exc)
            return {}
