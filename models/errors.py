"""Exception types shared by the index, search and oracle layers."""


class GalleryError(Exception):
    """Base class for gallery domain errors."""


class SearchIndexError(GalleryError):
    """Storage-layer failure while reading or writing images or postings."""


class OracleError(GalleryError):
    """The vision or natural-language oracle failed to produce a result."""


class NotFoundError(GalleryError, LookupError):
    """An image or album id does not exist."""


class InputValidationError(GalleryError, ValueError):
    """Malformed query or filter input, rejected before touching the index."""
