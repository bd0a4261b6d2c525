"""
Domain error codes and their translation to HTTP.

Routers raise ``ApiError``; the handlers registered in ``rentmyride.main``
turn it into the ``{ok, code, message, data}`` envelope.
"""

import enum
import logging
import re

from fastapi import status
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_DATES = "INVALID_DATES"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    NOT_AVAILABLE = "NOT_AVAILABLE"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    DB_ERROR = "DB_ERROR"


HTTP_STATUS = {
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_DATES: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_AVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.DB_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Used for framework-level HTTP errors that carry only a status code.
CODE_FOR_STATUS = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHENTICATED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
}

NOT_AVAILABLE_MESSAGE = "Vehicle not available for requested dates"

OVERLAP_PATTERN = re.compile(r"booking_no_overlap_excl|overlap|exclusion|exclude", re.IGNORECASE)
EXCLUSION_VIOLATION_SQLSTATE = "23P01"


class ApiError(Exception):
    """An error with a domain code, rendered as a JSON envelope."""

    def __init__(self, code: ErrorCode, message: str):
        self.code = ErrorCode(code)
        self.message = message
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.code]

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


def code_for_status(status_code: int) -> ErrorCode:
    if status_code in CODE_FOR_STATUS:
        return CODE_FOR_STATUS[status_code]
    if status_code >= 500:
        return ErrorCode.DB_ERROR
    return ErrorCode.INVALID_INPUT


def is_overlap_error(err: Exception) -> bool:
    """True when a database error comes from the booking exclusion constraint."""
    orig = getattr(err, "orig", None)
    if getattr(orig, "pgcode", None) == EXCLUSION_VIOLATION_SQLSTATE:
        return True
    # Driver message only; the statement and its parameters may carry user text.
    return bool(OVERLAP_PATTERN.search(str(orig if orig is not None else err)))


def commit_or_raise(db):
    """
    Commit the session, translating exclusion violations into NOT_AVAILABLE.
    The session is rolled back on any integrity error.
    """
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        if is_overlap_error(err):
            logger.error(f"Overlap rejected by database: {err.orig}")
            raise ApiError(ErrorCode.NOT_AVAILABLE, NOT_AVAILABLE_MESSAGE) from err
        raise
