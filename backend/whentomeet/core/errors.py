"""
Centralized error handling for storage/API failures.
Exception types plus a rule table so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Exception taxonomy
# ---------------------------------------------------------------------------


class WhenToMeetError(Exception):
    """Base class for every error raised by stores, backends and the client."""


class ConfigurationError(WhenToMeetError):
    """Persistence backend unreachable or not configured. Surfaced to the caller, never retried."""


class NotFoundError(WhenToMeetError):
    """Absent week or profile. Stores return empty results instead; only explicit lookups raise this."""


class TransientIOError(WhenToMeetError):
    """A storage or network call failed. Logged; the operation fails; callers do not retry."""


class ValidationError(WhenToMeetError):
    """Missing or invalid input. Raised before any mutation is attempted."""


# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500
STATUS_SERVICE_UNAVAILABLE = 503  # backend not configured / unreachable

MSG_NOT_CONFIGURED = "Database not configured. Please set STORAGE_BACKEND and its connection settings."


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code, detail or None to use str(exc))
# Add new rules here instead of scattering checks in routes. First match wins.
# ---------------------------------------------------------------------------

ERROR_RULES: list[tuple[type[Exception], int, str | None]] = [
    (ValidationError, STATUS_BAD_REQUEST, None),
    (NotFoundError, STATUS_NOT_FOUND, None),
    (ConfigurationError, STATUS_SERVICE_UNAVAILABLE, MSG_NOT_CONFIGURED),
]


def error_to_http(exc: Exception, fallback: str = "Internal error") -> HTTPException:
    """
    Map an exception from a store/backend into an HTTPException.
    Uses ERROR_RULES for known types; otherwise 500 with the route's generic fallback message
    (storage details stay in the log, not in the response).
    """
    for exc_type, status_code, detail in ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=detail or str(exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=fallback)
