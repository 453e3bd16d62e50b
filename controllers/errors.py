"""Translate gallery errors into HTTP errors."""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from models.errors import GalleryError, InputValidationError, NotFoundError, OracleError

LOGGER = logging.getLogger(__name__)


def status_for(exc: GalleryError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, InputValidationError):
        return 400
    if isinstance(exc, OracleError):
        return 502
    return 500


@contextmanager
def http_errors() -> Iterator[None]:
    """Re-raise `GalleryError`s raised in the block as `HTTPException`s."""
    try:
        yield
    except GalleryError as exc:
        status = status_for(exc)
        if status >= 500:
            LOGGER.error("Request failed: %s", exc)
        raise HTTPException(status_code=status, detail=str(exc)) from exc
