"""Auth request and response models with validation."""

import re
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from socialnet.models.user import CamelModel, User

# bcrypt only considers the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class RegisterRequest(CamelModel):
    """New account details.

    Attributes:
        email: Unique email address (stored lower-cased)
        username: Unique handle (3-30 chars, alphanumeric + underscore/hyphen)
        password: Plain-text password (6-72 bytes)
        first_name: Optional given name
        last_name: Optional family name
        display_name: Optional name shown on the profile
    """

    email: EmailStr
    username: str = Field(..., min_length=3, max_length=30)
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    display_name: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, v: str) -> str:
        """Emails are compared case-insensitively."""
        return v.strip().lower()

    @field_validator("username")
    @classmethod
    def username_valid_chars(cls, v: str) -> str:
        """Ensure username contains only alphanumeric, underscore, or hyphen."""
        if not re.match(r'^[a-zA-Z0-9_-]+$', v):
            raise ValueError(
                "Username must contain only alphanumeric characters, "
                "underscores, or hyphens"
            )
        return v

    @field_validator("password")
    @classmethod
    def password_acceptable(cls, v: str) -> str:
        """Reject blank passwords and ones bcrypt would truncate."""
        if not v.strip():
            raise ValueError("Password cannot be empty or whitespace only")
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(CamelModel):
    """Login credentials. Users sign in with their email, not their username."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, v: str) -> str:
        return v.strip().lower()


class TokenPair(CamelModel):
    """Freshly signed access and refresh tokens."""

    access_token: str
    refresh_token: str


class LoginResult(TokenPair):
    """Outcome of a successful login."""

    user: User


class LoginResponse(CamelModel):
    """Body of POST /auth/login. The refresh token travels in a cookie."""

    access_token: str
    user: User


class RefreshResponse(CamelModel):
    """Body of POST /auth/refresh."""

    access_token: str


class LogoutResponse(CamelModel):
    """Body of POST /auth/logout."""

    success: bool = True
    message: str = "Logged out successfully"
