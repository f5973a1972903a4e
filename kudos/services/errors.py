"""Typed errors raised by the service layer.

Services raise these and never deal with HTTP; ``kudos.api.errors`` maps
each kind to a status code at the boundary.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class ServiceError(Exception):
    """Base class for expected, user-facing failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(ServiceError):
    """A required field is missing or malformed."""


class Unauthorized(ServiceError):
    """No signed-in identity."""


class Forbidden(ServiceError):
    """The action breaks a policy rule, such as voting on one's own nomination."""


class NotFound(ServiceError):
    """A referenced entity does not exist."""


class Conflict(ServiceError):
    """A uniqueness rule was violated."""


class RateLimited(ServiceError):
    """Too many requests; ``reset_at`` is the Unix time the window frees up."""

    def __init__(self, message: str, reset_at: float, retry_after: int) -> None:
        super().__init__(message)
        self.reset_at = reset_at
        self.retry_after = retry_after


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when ``exc`` comes from a unique or primary key constraint."""

    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


__all__ = [
    "Conflict",
    "Forbidden",
    "InvalidInput",
    "NotFound",
    "RateLimited",
    "ServiceError",
    "Unauthorized",
    "is_unique_violation",
]
