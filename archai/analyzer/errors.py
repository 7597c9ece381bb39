from typing import Optional


class ArchaiError(Exception):
    """Base class for analysis errors."""


class InputFormatError(ArchaiError):
    """Manifest text is present but is not a valid service mapping."""


# Alias for callers that name manifest failures parse errors.
ParseError = InputFormatError


class ExternalServiceError(ArchaiError):
    """A remote repository host or text-generation backend failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
