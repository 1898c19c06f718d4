"""
Error Taxonomy - Failures Raised by Guards and Lifecycle Managers

Every error carries the HTTP status the web layer answers with and a message
that is safe to return to the caller and to log.

- UnauthorizedError: missing, malformed or expired identity token
- ForbiddenError: authenticated, but role, standing or ownership is insufficient
- NotFoundError: identifier has no matching record
- InvalidArgumentError: malformed identifier or missing/invalid field
- ConflictError: transition not allowed from the current state
- InternalError: storage failure, no state was changed
"""

from __future__ import annotations

from typing import Final, Optional


UNAUTHORIZED_MESSAGE: Final[str] = "unauthorized access"
FORBIDDEN_MESSAGE: Final[str] = "forbidden access"


class MarketplaceError(Exception):
    """Base exception for the marketplace core."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(MarketplaceError):
    """Identity token missing or failed verification."""

    status_code = 401
    default_message = UNAUTHORIZED_MESSAGE


class ForbiddenError(MarketplaceError):
    """Caller is authenticated but not allowed to perform the operation."""

    status_code = 403
    default_message = FORBIDDEN_MESSAGE


class NotFoundError(MarketplaceError):
    """Entity identifier has no matching record."""

    status_code = 404
    default_message = "Not found"


class InvalidArgumentError(MarketplaceError):
    """Malformed identifier or missing required field."""

    status_code = 400
    default_message = "Invalid argument"


class ConflictError(MarketplaceError):
    """State transition rejected by the entity's current state."""

    status_code = 409
    default_message = "Conflict"


class InternalError(MarketplaceError):
    """Storage layer failed; the transition was not applied."""

    status_code = 500
    default_message = "Internal server error"
