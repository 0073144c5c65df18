"""
errors.py

Exception hierarchy raised by the quiz services.
Each class carries the HTTP status the API layer answers with.
"""

from enum import Enum


class QuizError(Exception):
    """Base class for every failure the services report to a caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QuizError):
    """Missing or malformed input."""

    status_code = 400


class DuplicateSubmissionError(QuizError):
    status_code = 400


class AuthorizationError(QuizError):
    """Unknown token, or a token whose role may not perform the operation."""

    status_code = 403


class NotFoundError(QuizError):
    status_code = 404


class GateReason(str, Enum):
    NOT_STARTED = "not_started"
    ENDED = "ended"


class GateError(QuizError):
    """The quiz window is closed: no session yet, not started, or already over."""

    status_code = 403

    def __init__(self, reason: GateReason):
        message = "Quiz ended" if reason is GateReason.ENDED else "Quiz has not started yet"
        super().__init__(message)
        self.reason = reason


class StoreError(QuizError):
    """A collection file exists but cannot be read or written."""

    status_code = 503
