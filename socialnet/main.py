"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from socialnet import __version__
from socialnet.api.auth import router as auth_router
from socialnet.api.middleware import CORRELATION_HEADER, CorrelationIdMiddleware
from socialnet.api.routes import router
from socialnet.config import Settings, get_settings
from socialnet.errors import AuthError, ConflictError, UnauthorizedError
from socialnet.models.response import ErrorResponse
from socialnet.services.logging_service import configure_logging, get_logger
from socialnet.services.password_hasher import PasswordHasher
from socialnet.services.session_manager import SessionManager
from socialnet.services.token_codec import TokenCodec
from socialnet.services.user_service import UserService
from socialnet.stores import build_credential_store


def install_auth_services(app: FastAPI, settings: Settings) -> None:
    """Wire the credential store and auth services onto app.state."""
    store = build_credential_store(settings.credential_store)
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    codec = TokenCodec(settings)
    users = UserService(store, hasher)

    app.state.credential_store = store
    app.state.token_codec = codec
    app.state.user_service = users
    app.state.session_manager = SessionManager(
        store=store,
        users=users,
        hasher=hasher,
        codec=codec,
        refresh_lifetime_seconds=settings.jwt_refresh_expiration,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("main")

    if settings.credential_store == "postgres":
        from socialnet.database import init_database, run_migrations

        await init_database()
        await run_migrations()
        logger.info("database_initialized")

    install_auth_services(app, settings)

    logger.info(
        "application_started",
        credential_store=settings.credential_store,
        production=settings.is_production,
        log_level=settings.log_level,
    )

    yield

    if settings.credential_store == "postgres":
        from socialnet.database import close_database

        await close_database()

    logger.info("application_shutdown")


app = FastAPI(
    title="socialnet API",
    description="Users, authentication and session tokens for the socialnet frontend",
    version=__version__,
    lifespan=lifespan,
)


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


@app.exception_handler(AuthError)
async def auth_exception_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render typed auth failures as 400/401/403 responses."""
    correlation_id = _correlation_id(request)
    body = ErrorResponse(
        error=exc.error,
        detail=exc.message,
        correlation_id=correlation_id,
        field=exc.field if isinstance(exc, ConflictError) else None,
    )

    headers = {CORRELATION_HEADER: correlation_id}
    if isinstance(exc, UnauthorizedError):
        headers["WWW-Authenticate"] = "Bearer"

    structlog.get_logger().info(
        "auth_error",
        error=exc.error,
        status_code=exc.status_code,
        detail=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with a 400 and the first failing field."""
    correlation_id = _correlation_id(request)
    logger = structlog.get_logger()

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    # Error entries echo the input, which may hold a password
    logger.warning("validation_error", detail=detail)

    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Validation error", detail=detail, correlation_id=correlation_id
        ).model_dump(exclude_none=True),
        headers={CORRELATION_HEADER: correlation_id},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Store and other unexpected failures become an opaque 500."""
    correlation_id = _correlation_id(request)
    structlog.get_logger().error(
        "unhandled_exception",
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            detail="An unexpected error occurred",
            correlation_id=correlation_id,
        ).model_dump(exclude_none=True),
        headers={CORRELATION_HEADER: correlation_id},
    )


# CORS middleware for the browser frontend; credentials are needed for the refresh cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Correlation ID middleware for request tracking and observability
app.add_middleware(CorrelationIdMiddleware)

app.include_router(auth_router)
app.include_router(router)
