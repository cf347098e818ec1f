"""Authentication API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
import structlog

from socialnet.api.dependencies import (
    RefreshPrincipal,
    clear_refresh_cookie,
    get_current_user,
    get_refresh_principal,
    get_session_manager,
    set_refresh_cookie,
)
from socialnet.config import get_settings
from socialnet.models.auth import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RefreshResponse,
    RegisterRequest,
)
from socialnet.models.user import User
from socialnet.services.session_manager import SessionManager

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    sessions: SessionManager = Depends(get_session_manager),
) -> User:
    """Create an account.

    Raises:
        ConflictError (400): Email or username already taken
    """
    return await sessions.register(
        email=request.email,
        username=request.username,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        display_name=request.display_name,
    )


@router.post("/login")
async def login(
    request: LoginRequest,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
) -> LoginResponse:
    """Login with email and password.

    The access token is returned in the body; the refresh token is set as an
    HttpOnly cookie.

    Raises:
        UnauthorizedError (401): Invalid credentials
    """
    result = await sessions.login(request.email, request.password)
    set_refresh_cookie(response, result.refresh_token, get_settings())
    return LoginResponse(access_token=result.access_token, user=result.user)


@router.post("/refresh")
async def refresh(
    response: Response,
    principal: RefreshPrincipal = Depends(get_refresh_principal),
    sessions: SessionManager = Depends(get_session_manager),
) -> RefreshResponse:
    """Rotate the refresh cookie and return a new access token.

    Raises:
        ForbiddenError (403): Cookie missing, invalid, expired, or already used
    """
    pair = await sessions.refresh(principal.user_id, principal.refresh_token)
    set_refresh_cookie(response, pair.refresh_token, get_settings())
    return RefreshResponse(access_token=pair.access_token)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
) -> LogoutResponse:
    """Revoke the refresh cookie (if any) and clear it. Always succeeds."""
    settings = get_settings()
    refresh_token: Optional[str] = request.cookies.get(settings.refresh_cookie_name)
    if refresh_token:
        await sessions.revoke(refresh_token)

    clear_refresh_cookie(response, settings)
    logger.info("user_logged_out", had_session=bool(refresh_token))
    return LogoutResponse()


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    """Get the authenticated caller's profile."""
    return current_user
