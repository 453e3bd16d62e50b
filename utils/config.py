"""Application configuration read from environment variables.

A `.env` file is loaded by `main.py` at import time, so values placed there
are visible here as well.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} must be an integer") from exc
    if value <= 0:
        raise RuntimeError(f"{name}={raw!r} must be a positive integer")
    return value


@dataclass(frozen=True)
class AppConfig:
    """Resolved runtime settings for the gallery service."""

    database_dir: Path
    upload_dir: Path
    openai_model: str = "gpt-5"
    mock_vision: bool = False
    vision_fallback: bool = False
    max_upload_bytes: int = 10 * 1024 * 1024
    max_upload_files: int = 10
    thumbnail_size: int = 300
    thumbnail_quality: int = 80
    related_limit: int = 6
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build the configuration from the current environment."""
        production = os.getenv("APP_ENV", "development").strip().lower() == "production"
        return cls(
            database_dir=Path(os.getenv("DATABASE_DIR") or "data").expanduser(),
            upload_dir=Path(os.getenv("UPLOAD_DIR") or "uploads").expanduser(),
            openai_model=os.getenv("OPENAI_MODEL") or "gpt-5",
            mock_vision=_env_bool("MOCK_VISION", False),
            vision_fallback=_env_bool("VISION_FALLBACK", production),
            max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
            max_upload_files=_env_int("MAX_UPLOAD_FILES", 10),
            thumbnail_size=_env_int("THUMBNAIL_SIZE", 300),
            thumbnail_quality=min(_env_int("THUMBNAIL_QUALITY", 80), 95),
            related_limit=_env_int("RELATED_LIMIT", 6),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )
