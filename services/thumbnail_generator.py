"""Thumbnail generator service.

Provides a small OOP wrapper around Pillow to create JPEG thumbnails
from image files. The resulting thumbnail fits inside the configured
bounding box while preserving aspect ratio.

Public class: `ThumbnailGenerator`

Example:
    tg = ThumbnailGenerator(max_size=(300, 300), quality=80)
    tg.create_thumbnail("uploads/abc.png", "uploads/thumb_abc.jpg")
"""
from __future__ import annotations

import os
from typing import Tuple

from PIL import Image


class ThumbnailGenerator:
    """Generate thumbnails from image files.

    Args:
        max_size: Maximum width and height for the thumbnail. Defaults to (300, 300).
        quality: JPEG quality of the written thumbnail.
        background: Background color used when flattening images with alpha.
    """

    def __init__(
        self,
        max_size: Tuple[int, int] = (300, 300),
        quality: int = 80,
        background: Tuple[int, int, int] | None = None,
    ):
        self.max_size = max_size
        self.quality = quality
        self.background = background or (255, 255, 255)

    def create_thumbnail(self, input_path: str, output_path: str) -> str:
        """Write a JPEG thumbnail of `input_path` to `output_path`.

        Returns:
            `output_path`.

        Raises:
            FileNotFoundError: If the input file does not exist.
            ValueError: If the file cannot be opened as an image.
        """
        if not os.path.isfile(input_path):
            raise FileNotFoundError(f"Input file not found: {input_path}")

        try:
            src = Image.open(input_path)
            src.load()
        except Exception as exc:
            raise ValueError("File is not a supported image format") from exc

        with src:
            rgba = src.convert("RGBA")
        rgba.thumbnail(self.max_size, Image.LANCZOS)

        # Flatten alpha against the background color
        flat = Image.new("RGB", rgba.size, self.background)
        flat.paste(rgba, mask=rgba.split()[3])
        flat.save(output_path, format="JPEG", quality=self.quality, optimize=True)
        return output_path
