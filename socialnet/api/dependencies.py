"""FastAPI dependencies: service lookup, auth guards and cookie helpers."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from socialnet.config import Settings, get_settings
from socialnet.errors import ForbiddenError, InvalidTokenError, UnauthorizedError
from socialnet.models.user import User
from socialnet.services.session_manager import SessionManager
from socialnet.services.token_codec import TokenCodec
from socialnet.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


@dataclass(frozen=True)
class RefreshPrincipal:
    """Caller identified by a signature-valid refresh cookie."""

    user_id: UUID
    refresh_token: str


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    codec: TokenCodec = Depends(get_token_codec),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Access guard: resolve the Bearer access token to an active user.

    Raises:
        UnauthorizedError: Missing or invalid token, or user not found/inactive
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    try:
        subject = codec.verify(credentials.credentials, "access")
        user_id = UUID(subject)
    except (InvalidTokenError, ValueError):
        raise UnauthorizedError("Invalid or expired access token")

    user = await user_service.get_by_id(user_id)

    if user is None:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise UnauthorizedError("User account is disabled")

    return user


async def get_refresh_principal(
    request: Request,
    codec: TokenCodec = Depends(get_token_codec),
) -> RefreshPrincipal:
    """Refresh guard: check the refresh cookie's signature and expiry.

    Whether the token is still live is decided later by the session manager
    against the store.

    Raises:
        ForbiddenError: Cookie missing or the token fails verification
    """
    settings = get_settings()
    token = request.cookies.get(settings.refresh_cookie_name)
    if not token:
        raise ForbiddenError("Refresh token missing")

    try:
        subject = codec.verify(token, "refresh")
        user_id = UUID(subject)
    except (InvalidTokenError, ValueError):
        raise ForbiddenError("Invalid refresh token")

    return RefreshPrincipal(user_id=user_id, refresh_token=token)


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    """Store the refresh token in an HttpOnly cookie.

    Production serves the frontend from another site, so the cookie must be
    ``Secure`` with ``SameSite=None``; elsewhere ``Lax`` over plain HTTP.
    """
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        max_age=settings.jwt_refresh_expiration,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )
