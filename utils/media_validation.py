"""Validation helpers for uploaded image content."""

import os
from typing import Optional

from models.errors import InputValidationError

ALLOWED_IMAGE_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
}

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a MIME type and drop any parameters."""
    return (content_type or "").lower().split(";", 1)[0].strip()


def validate_image_upload(filename: Optional[str], content_type: Optional[str], size: int, max_bytes: int) -> str:
    """Validate one uploaded image and return its normalized MIME type.

    Both the extension and the declared content type must name a supported
    format (JPEG, PNG, GIF or WebP).

    Raises:
        InputValidationError: If the file is empty, too large, or of an
            unsupported type.
    """
    if not filename:
        raise InputValidationError("Image file must have a filename.")
    ext = os.path.splitext(filename)[1].lower()
    mime = normalize_content_type(content_type)
    if ext not in ALLOWED_EXTENSIONS or mime not in ALLOWED_IMAGE_TYPES:
        raise InputValidationError(
            "Invalid file type. Only JPEG, PNG, GIF, and WebP files are allowed."
        )
    if size <= 0:
        raise InputValidationError("Uploaded image file is empty.")
    if size > max_bytes:
        raise InputValidationError(f"Image exceeds the {max_bytes} byte upload limit.")
    return "image/jpeg" if mime == "image/jpg" else mime
