"""Domain exception classes.

Provides structured error handling with error codes and user-facing messages.
Every failure that crosses the HTTP boundary is one of these; the mapping to
status codes lives in ``tourney.main``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    STORAGE_ERROR = "STORAGE_ERROR"

    # Event / registration errors
    INVALID_STATE = "INVALID_STATE"
    EVENT_FULL = "EVENT_FULL"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"


class DomainError(Exception):
    """Base exception for domain errors.

    Attributes:
        code: Error code for programmatic handling
        message: User-facing error message
        details: Additional error details
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode | str | None = None,
    ):
        if code is not None:
            self.code = code if isinstance(code, ErrorCode) else ErrorCode(code)
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when input fails field validation."""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)

    @classmethod
    def from_errors(cls, errors: list[dict[str, Any]]) -> "ValidationError":
        """Build from pydantic-style error dicts, one message per field."""
        details: dict[str, Any] = {}
        for err in errors:
            loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            field = ".".join(loc) or "__root__"
            details.setdefault(field, err.get("msg", "invalid value"))
        first = next(iter(details.items()), None)
        message = f"{first[0]}: {first[1]}" if first else "Validation failed"
        return cls(message, details)


class BadRequestError(DomainError):
    """Raised when a request is structurally incomplete."""

    code = ErrorCode.BAD_REQUEST


class UnauthorizedError(DomainError):
    """Raised when the caller could not be authenticated."""

    code = ErrorCode.UNAUTHORIZED

    def __init__(
        self,
        message: str = "Unauthorized",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class AuthorizationError(DomainError):
    """Raised when an authenticated caller lacks a capability."""

    code = ErrorCode.FORBIDDEN

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class NotFoundError(DomainError):
    """Raised when a record does not exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, resource_id: str | None = None):
        message = f"{resource} not found"
        details = {"id": resource_id} if resource_id is not None else None
        super().__init__(message, details)
        self.resource = resource


class InvalidStateError(DomainError):
    """Raised when a record is not in a state that allows the operation."""

    code = ErrorCode.INVALID_STATE


class EventFullError(DomainError):
    """Raised when an event has reached its team capacity."""

    code = ErrorCode.EVENT_FULL

    def __init__(self, event_id: str, max_teams: int | None = None):
        super().__init__(
            "Event is full",
            {"event_id": event_id, "max_teams": max_teams},
        )


class AlreadyRegisteredError(DomainError):
    """Raised when a participant already holds a live ticket for an event."""

    code = ErrorCode.ALREADY_REGISTERED

    def __init__(self, event_id: str, participant_id: str):
        super().__init__(
            "Already registered for this event",
            {"event_id": event_id, "participant_id": participant_id},
        )


class StorageError(DomainError):
    """Raised when the record store fails."""

    code = ErrorCode.STORAGE_ERROR

    def __init__(
        self,
        message: str = "A storage error occurred",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class ReconciliationError(DomainError):
    """Raised when a confirmed payment could not be applied to its ticket."""

    code = ErrorCode.INTERNAL_ERROR


# Errors that represent normal business outcomes rather than faults
BUSINESS_ERRORS: tuple[type[DomainError], ...] = (
    ValidationError,
    BadRequestError,
    UnauthorizedError,
    AuthorizationError,
    NotFoundError,
    InvalidStateError,
    EventFullError,
    AlreadyRegisteredError,
)
