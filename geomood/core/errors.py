"""
Error taxonomy for mood creation.

Every domain error carries a ``kind`` so callers can branch on the failure
category instead of matching messages:
- NOT_FOUND: the user does not exist
- CONFLICT: a mood was already posted in the last hour
- INVALID_INPUT: rating out of range, bad weight vector, malformed request
- FATAL: anything without a fallback (persistence failure, etc.)
"""

from enum import Enum


class ErrorKind(Enum):
    """Discriminates the failure categories surfaced to the boundary layer."""
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"
    FATAL = "fatal"


class MoodError(Exception):
    """Base class for domain errors."""
    kind: ErrorKind = ErrorKind.FATAL


class UserNotFoundError(MoodError):
    """Raised when no user matches the submitted email."""
    kind = ErrorKind.NOT_FOUND


class DuplicateMoodError(MoodError):
    """Raised when the user already posted within the rolling hour."""
    kind = ErrorKind.CONFLICT


class InvalidInputError(MoodError, ValueError):
    """Raised on caller errors."""
    kind = ErrorKind.INVALID_INPUT


class InvalidRatingError(InvalidInputError):
    """Raised when a component rating is outside its legal range."""
    pass


class InvalidWeightError(InvalidInputError):
    """Raised when a weight vector does not sum to 100%."""
    pass


class MoodCreationError(MoodError):
    """Raised when a collaborator failure aborts the whole creation."""
    kind = ErrorKind.FATAL
