"""Description: Vision metadata extraction using OpenAI's Responses API."""

import logging
import time
from typing import Any, Dict, List

from openai import AsyncOpenAI

from models.errors import OracleError
from models.metadata import Metadata
from services.openai.image_prompts import build_system_prompt, build_user_prompt
from services.openai.image_schema import ANALYZE_FUNCTION_DEFINITION, ANALYZE_FUNCTION_NAME
from services.openai.media_inputs import build_image_inputs
from services.openai.response_parser import extract_usage, parse_function_call

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = "gpt-5"


class ImageAnalyzer:
    """Turn image bytes into structured `Metadata` with a vision model."""

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        """Initialize the analyzer with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt()

    async def analyze(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> Metadata:
        """Analyze one image.

        Raises:
            OracleError: If the request fails or the tool output cannot be parsed.
        """
        start_time = time.time()
        try:
            inputs = build_image_inputs(
                self.system_prompt, build_user_prompt(), image_bytes=image_bytes, mime_type=mime_type
            )
        except ValueError as exc:
            raise OracleError(str(exc)) from exc
        response = await self._create_response(inputs)
        metadata = self._parse_response(response)
        LOGGER.info(
            "Image analysis latency: %.3fs usage=%s", time.time() - start_time, extract_usage(response)
        )
        return metadata

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the multimodal request to the OpenAI Responses API."""
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[ANALYZE_FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": ANALYZE_FUNCTION_NAME},
            )
        except Exception as exc:
            LOGGER.error("Error during OpenAI Responses API call: %s", exc)
            raise OracleError(f"Image analysis request failed: {exc}") from exc

    def _parse_response(self, response: Any) -> Metadata:
        """Parse the metadata tool output from the model."""
        try:
            args = parse_function_call(response, tool_name=ANALYZE_FUNCTION_NAME)
        except Exception as exc:
            LOGGER.error("Error parsing OpenAI response: %s", exc)
            LOGGER.error("Full response object: %r", response)
            raise OracleError("Failed to parse image analysis response") from exc

        metadata = Metadata.from_dict(args)
        if metadata.medium is None and metadata.scene is None:
            LOGGER.error("Incomplete metadata output received from OpenAI.")
        return metadata
