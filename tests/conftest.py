"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest

# Set test environment variables before importing app
os.environ["CREDENTIAL_STORE"] = "memory"
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from socialnet.config import Settings  # noqa: E402
from socialnet.services.password_hasher import PasswordHasher  # noqa: E402
from socialnet.services.session_manager import SessionManager  # noqa: E402
from socialnet.services.token_codec import TokenCodec  # noqa: E402
from socialnet.services.user_service import UserService  # noqa: E402
from socialnet.stores.memory import MemoryCredentialStore  # noqa: E402

ACCESS_SECRET = "unit-access-secret"
REFRESH_SECRET = "unit-refresh-secret"


class FakeClock:
    """Controllable replacement for datetime.now(timezone.utc)."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings, independent of the environment."""
    return Settings(
        app_env="test",
        credential_store="memory",
        jwt_access_secret=ACCESS_SECRET,
        jwt_refresh_secret=REFRESH_SECRET,
        jwt_access_expiration="1h",
        jwt_refresh_expiration=604800,
        bcrypt_rounds=4,
    )


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def hasher() -> PasswordHasher:
    """Minimum bcrypt cost keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec(settings) -> TokenCodec:
    return TokenCodec(settings)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def user_service(store, hasher) -> UserService:
    return UserService(store, hasher)


@pytest.fixture
def session_manager(store, user_service, hasher, codec, settings, clock) -> SessionManager:
    return SessionManager(
        store=store,
        users=user_service,
        hasher=hasher,
        codec=codec,
        refresh_lifetime_seconds=settings.jwt_refresh_expiration,
        clock=clock,
    )


@pytest.fixture
def client() -> Generator:
    """TestClient running the full lifespan against a fresh memory store."""
    from fastapi.testclient import TestClient
    from socialnet.main import app

    with TestClient(app) as tc:
        yield tc
