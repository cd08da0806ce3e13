"""Error kinds surfaced by the conference services."""
from __future__ import annotations

from fastapi import status


class ConferenceError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class Unauthorized(ConferenceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class BadRequest(ConferenceError):
    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(ConferenceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ConferenceError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ConferenceError):
    status_code = status.HTTP_409_CONFLICT


class StoreError(Exception):
    """Base class for failures raised by the entity store."""


class ConflictAbort(StoreError):
    """A transaction lost a race for the store lock and was rolled back."""


class TransientUnavailable(ConferenceError, StoreError):
    """The store could not serve the request; the caller may try again later."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


__all__ = [
    "BadRequest",
    "ConferenceError",
    "Conflict",
    "ConflictAbort",
    "Forbidden",
    "NotFound",
    "StoreError",
    "TransientUnavailable",
    "Unauthorized",
]
