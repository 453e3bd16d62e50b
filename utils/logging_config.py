"""Root logger setup for the gallery service."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a console handler on the root logger once.

    Calling this again only adjusts the level, so app factories and tests
    can call it freely.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(getattr(h, "_gallery_handler", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._gallery_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
