from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Sequence] = None):
        super().__init__(message)
        self.message = message
        self.details = list(details) if details else None


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400


class ReferenceIntegrityError(DomainError):
    """Raised when a write points at a row that does not exist."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when credentials or the bearer token are missing or invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Raised on uniqueness conflicts or when a delete would orphan rows."""

    status_code = 409


class NotificationError(DomainError):
    """Raised when an outbound notification cannot be delivered."""

    status_code = 502
