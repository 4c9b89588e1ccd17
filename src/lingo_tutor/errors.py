"""Exceptions raised by the tutor core and its stores."""


class LingoTutorError(Exception):
    """Base class for all tutor errors."""


class ValidationError(LingoTutorError):
    """Content-integrity failure: malformed or out-of-range input."""


class NotFoundError(LingoTutorError):
    """A required record is missing from a store."""
