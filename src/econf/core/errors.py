"""Typed error taxonomy shared by the engines and the web layer.

Every error raised on purpose by an engine operation is an
``EconfError``: it carries the kind, the HTTP status the web layer
answers with, and a message that is safe to show to the caller.
Anything else reaching the web layer is treated as ``Internal``.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of failures for status mapping."""
    UNAUTHENTICATED = "unauthenticated"
    PROFILE_NOT_FOUND = "profile_not_found"
    ROLE_NOT_SUPPORTED = "role_not_supported"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"
    SERVICE_UNAVAILABLE = "service_unavailable"
    CONFLICT = "conflict"              # Reserved for optimistic concurrency checks
    INTERNAL = "internal"


class EconfError(Exception):
    """Base class for all typed errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    default_message: str = "Internal server error. Please try again."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} status={self.status_code} message={self.message!r}>"


class Unauthenticated(EconfError):
    kind = ErrorKind.UNAUTHENTICATED
    status_code = 401
    default_message = "Authentication required."


class ProfileNotFound(EconfError):
    kind = ErrorKind.PROFILE_NOT_FOUND
    status_code = 404
    default_message = "User profile not found."


class RoleNotSupported(EconfError):
    kind = ErrorKind.ROLE_NOT_SUPPORTED
    status_code = 403
    default_message = "Unsupported role for this operation."


class Forbidden(EconfError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403
    default_message = "You are not allowed to perform this action."


class NotFound(EconfError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Resource not found."


class InvalidArgument(EconfError):
    kind = ErrorKind.INVALID_ARGUMENT
    status_code = 400
    default_message = "Invalid request."


class ServiceUnavailable(EconfError):
    kind = ErrorKind.SERVICE_UNAVAILABLE
    status_code = 503
    default_message = "Not enough reviewers available. Please contact an organizer."


class Conflict(EconfError):
    kind = ErrorKind.CONFLICT
    status_code = 409
    default_message = "The resource was modified concurrently. Please retry."


class Internal(EconfError):
    kind = ErrorKind.INTERNAL
    status_code = 500
