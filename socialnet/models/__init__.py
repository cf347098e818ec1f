"""Models package exports."""

from socialnet.models.auth import (
    LoginRequest,
    LoginResponse,
    LoginResult,
    LogoutResponse,
    RefreshResponse,
    RegisterRequest,
    TokenPair,
)
from socialnet.models.response import ErrorResponse
from socialnet.models.user import RefreshToken, User, UserRecord

__all__ = [
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "LoginResult",
    "LogoutResponse",
    "RefreshResponse",
    "RefreshToken",
    "RegisterRequest",
    "TokenPair",
    "User",
    "UserRecord",
]
