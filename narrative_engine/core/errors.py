"""
Exception types raised inside the engine.

Only GenerationError crosses a public boundary (the collaborator adapters
raise it). ParseFailure and ValidationFailure are caught at the seam where
they occur and turned into outcome records.
"""

from typing import Optional


class GenerationError(Exception):
    """The generative collaborator failed to produce text."""

    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    TRANSPORT = "transport"
    EMPTY_RESPONSE = "empty_response"
    UNKNOWN = "unknown"

    def __init__(self, message: str, reason: str = UNKNOWN, provider: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.provider = provider


class ParseFailure(Exception):
    """Collaborator text does not match the expected structured shape."""


class ValidationFailure(Exception):
    """A dimension assessor raised or returned malformed data."""

    def __init__(self, dimension: str, message: str):
        super().__init__(f"{dimension}: {message}")
        self.dimension = dimension
