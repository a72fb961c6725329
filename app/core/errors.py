"""Error taxonomy shared by the registration saga, profile lifecycle and sync endpoints.

Every error carries the HTTP status the API layer reports for it, so the
Flask error handlers never need to inspect messages to pick a status code.
"""
from __future__ import annotations
from typing import Optional


class IdentityError(Exception):
    """Base class for all identity/profile errors surfaced to callers."""

    status = 500
    error = "Internal Server Error"

    def __init__(self, message: str = "", detail: Optional[str] = None):
        self.message = message or self.error
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to the JSON error body returned by the API."""
        return {"error": self.error, "message": self.message}


class ValidationError(IdentityError):
    """Bad or missing input (email, role). No store was touched."""

    status = 400
    error = "Bad Request"


class InvalidRole(ValidationError):
    """Role text is not one of the application roles."""


class ConflictError(IdentityError):
    """Email already used in the IdP or the Profile Store."""

    status = 409
    error = "Conflict"


class NotFoundError(IdentityError):
    """Lookup by id or email missed."""

    status = 404
    error = "Not Found"


class UpstreamError(IdentityError):
    """The IdP or the profile service was unreachable or returned a failure.

    Attributes:
        detail: Error body reported by the upstream, when available
    """

    status = 502
    error = "Bad Gateway"


class AuthenticationError(IdentityError):
    """Missing, invalid or expired bearer token."""

    status = 401
    error = "Unauthorized"

    def to_dict(self) -> dict:
        # Never echo token validation details back to the caller
        return {"error": self.error, "message": "Authentication required"}


class AuthorizationError(IdentityError):
    """Caller is authenticated but not allowed (role check or trust gate)."""

    status = 403
    error = "Forbidden"

    def to_dict(self) -> dict:
        return {"error": self.error, "message": "Insufficient permissions"}
