"""Typed authentication failures surfaced to the HTTP layer."""

from typing import Literal, Optional


class AuthError(Exception):
    """Base auth failure carrying the HTTP status it maps to."""

    status_code: int = 400
    error: str = "Bad request"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConflictError(AuthError):
    """Registration collided with an existing email or username."""

    error = "Conflict"

    def __init__(self, field: Literal["email", "username"]):
        message = "Email already in use" if field == "email" else "Username already taken"
        super().__init__(message)
        self.field = field


class UnauthorizedError(AuthError):
    """Bad credentials or a missing/invalid access token."""

    status_code = 401
    error = "Unauthorized"


class ForbiddenError(AuthError):
    """Refresh token absent, expired, revoked, or not owned by the caller."""

    status_code = 403
    error = "Forbidden"


class InvalidTokenError(AuthError):
    """Signature, expiry, or claim check failed in the token codec."""

    status_code = 401
    error = "Invalid token"
