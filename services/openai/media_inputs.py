"""Utilities to build input payloads for the Responses API."""

import base64
from typing import Any, Dict, List


def to_image_data_url(image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    """Encode raw image bytes as a data URL suitable for vision input."""
    if not image_bytes:
        raise ValueError("Image bytes are required.")
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type or 'image/jpeg'};base64,{encoded}"


def _text_message(role: str, text: str) -> Dict[str, Any]:
    return {"type": "message", "role": role, "content": [{"type": "input_text", "text": text}]}


def build_image_inputs(
    system_prompt: str,
    user_prompt: str,
    *,
    image_bytes: bytes,
    mime_type: str,
) -> List[Dict[str, Any]]:
    """Build the Responses API input array for one image."""
    image_url = to_image_data_url(image_bytes, mime_type)
    return [
        _text_message("system", system_prompt),
        _text_message("user", user_prompt),
        {"type": "message", "role": "user", "content": [{"type": "input_image", "image_url": image_url}]},
    ]


def build_text_inputs(system_prompt: str, user_prompt: str) -> List[Dict[str, Any]]:
    """Build a text-only Responses API input array."""
    return [_text_message("system", system_prompt), _text_message("user", user_prompt)]
