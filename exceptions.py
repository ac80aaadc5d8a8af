"""Service exceptions.

Every failure a service reports carries a machine-checkable ``kind`` and the
HTTP status the boundary layer should use. Human-facing wording is left to
the boundary.
"""

from __future__ import annotations

from typing import Any


class ServiceException(Exception):
    """Base service exception with HTTP status."""

    kind = "error"
    default_status = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status
        self.data = data or {}


class InvalidInput(ServiceException):
    kind = "invalid_input"
    default_status = 400


class AlreadyExists(ServiceException):
    kind = "already_exists"
    default_status = 409


class NotFound(ServiceException):
    kind = "not_found"
    default_status = 404


class InvalidOrExpired(ServiceException):
    """Code mismatch, expiry and prior consumption are reported identically."""

    kind = "invalid_or_expired"
    default_status = 400


class LockedOut(ServiceException):
    kind = "locked_out"
    default_status = 429


class RateLimited(ServiceException):
    kind = "rate_limited"
    default_status = 429

    def __init__(self, message: str, seconds_left: int):
        super().__init__(message, data={"seconds_left": seconds_left})
        self.seconds_left = seconds_left


class DataError(ServiceException):
    kind = "data_error"
    default_status = 500


class DependencyFailure(ServiceException):
    kind = "dependency_failure"
    default_status = 502


class Conflict(ServiceException):
    kind = "conflict"
    default_status = 409
