"""Typed errors raised by the access-control and lifecycle layers.

Each error carries a machine-checkable ``kind`` and a human-readable
``message``. Callers branch on the class (or ``kind``) and can render the
message directly. The HTTP layer maps every kind to one status code.
"""

from enum import Enum


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"


class PlannerError(Exception):
    """Base class for every precondition failure surfaced to callers."""

    kind: ErrorKind
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind.value, "message": self.message}


class Unauthorized(PlannerError):
    """No authenticated (or no active) actor."""
    kind = ErrorKind.UNAUTHORIZED
    status_code = 401

    def __init__(self, message: str = "Unauthorized: No authenticated user"):
        super().__init__(message)


class Forbidden(PlannerError):
    """Authenticated, but the role or permission set is insufficient."""
    kind = ErrorKind.FORBIDDEN
    status_code = 403


class NotFound(PlannerError):
    """Referenced entity is absent, soft-deleted for ordinary reads, or hard-deleted."""
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class Conflict(PlannerError):
    """The operation would violate an invariant."""
    kind = ErrorKind.CONFLICT
    status_code = 409


class ValidationFailed(PlannerError):
    """Malformed input."""
    kind = ErrorKind.VALIDATION
    status_code = 422
