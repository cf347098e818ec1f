"""Registration, login, and the refresh-token lifecycle.

The session manager holds no mutable state of its own. Everything it knows
about users and sessions lives in the credential store, so any number of
requests may run these operations concurrently. The one race that matters,
two refreshes presenting the same token, is settled by the store's atomic
``rotate_refresh_token``.
"""

import hashlib
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from socialnet.errors import ConflictError, ForbiddenError, UnauthorizedError
from socialnet.models.auth import LoginResult, TokenPair
from socialnet.models.user import RefreshToken, User, UserRecord
from socialnet.services.password_hasher import PasswordHasher
from socialnet.services.token_codec import TokenCodec
from socialnet.services.user_service import UserService
from socialnet.stores.base import CredentialStore

logger = structlog.get_logger(__name__)


class CredentialCheck(str, Enum):
    """Why a credential check passed or failed. Internal only."""

    VALID = "valid"
    UNKNOWN_EMAIL = "unknown_email"
    INACTIVE = "inactive"
    WRONG_PASSWORD = "wrong_password"


def hash_refresh_token(token: str) -> str:
    """SHA-256 digest under which a refresh token is stored and looked up."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class SessionManager:
    """Core authentication service."""

    def __init__(
        self,
        store: CredentialStore,
        users: UserService,
        hasher: PasswordHasher,
        codec: TokenCodec,
        refresh_lifetime_seconds: int,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.users = users
        self.hasher = hasher
        self.codec = codec
        self.refresh_lifetime = timedelta(seconds=refresh_lifetime_seconds)
        self._now = clock

    async def register(
        self,
        email: str,
        username: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> User:
        """Create an account if neither the email nor the username is taken.

        Returns:
            Public profile of the new user

        Raises:
            ConflictError: Naming "email" if the email is taken (checked
                first), otherwise "username"
        """
        email = normalize_email(email)
        existing = await self.store.find_user_by_email_or_username(email, username)
        if existing is not None:
            field = "email" if existing.email == email else "username"
            logger.info("registration_conflict", field=field)
            raise ConflictError(field)

        try:
            user = await self.users.create_user(
                email=email,
                username=username,
                password=password,
                first_name=first_name,
                last_name=last_name,
                display_name=display_name,
            )
        except ConflictError as e:
            logger.info("registration_conflict", field=e.field, stage="insert")
            raise

        logger.info("user_registered", user_id=str(user.id), username=user.username)
        return user

    async def _check_credentials(
        self, email: str, password: str
    ) -> tuple[CredentialCheck, Optional[UserRecord]]:
        record = await self.store.find_user_by_email(email)
        if record is None:
            return CredentialCheck.UNKNOWN_EMAIL, None
        if not record.is_active:
            return CredentialCheck.INACTIVE, record
        if not await self.hasher.verify(password, record.password_hash):
            return CredentialCheck.WRONG_PASSWORD, record
        return CredentialCheck.VALID, record

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Validate an email/password pair.

        Unknown email, disabled account and wrong password all return None,
        so callers cannot tell them apart. On success the user's
        last_active_at is stamped.
        """
        outcome, record = await self._check_credentials(normalize_email(email), password)
        if outcome is not CredentialCheck.VALID:
            logger.info(
                "credentials_rejected",
                reason=outcome.value,
                user_id=str(record.id) if record else None,
            )
            return None

        now = self._now()
        await self.store.touch_last_active(record.id, now)
        return record.model_copy(update={"last_active_at": now}).to_public()

    def _new_refresh_record(self, user_id: UUID, refresh_token: str) -> RefreshToken:
        # Store-level expiry, checked independently of the JWT's own exp claim
        now = self._now()
        return RefreshToken(
            id=uuid4(),
            user_id=user_id,
            token_hash=hash_refresh_token(refresh_token),
            expires_at=now + self.refresh_lifetime,
            created_at=now,
        )

    async def login(self, email: str, password: str) -> LoginResult:
        """Authenticate and open a new session chain.

        Raises:
            UnauthorizedError: For any credential failure
        """
        user = await self.authenticate(email, password)
        if user is None:
            raise UnauthorizedError("Invalid credentials")

        pair = self.codec.issue_token_pair(str(user.id))
        record = self._new_refresh_record(user.id, pair.refresh_token)
        await self.store.create_refresh_token(record)

        logger.info(
            "refresh_token_created",
            user_id=str(user.id),
            token_id=str(record.id),
            expires_at=record.expires_at.isoformat(),
        )
        logger.info("login_succeeded", user_id=str(user.id))

        return LoginResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=user,
        )

    async def refresh(self, user_id: UUID, presented_refresh_token: str) -> TokenPair:
        """Exchange a live refresh token for a new pair, revoking the old one.

        The presented token must belong to user_id, be unrevoked and not yet
        expired in the store, and the user must still be active. Each token
        can be exchanged once.

        Raises:
            ForbiddenError: Unknown, expired, revoked, foreign, disabled
                account, or lost a concurrent rotation
        """
        record = await self.store.find_live_refresh_token(
            user_id, hash_refresh_token(presented_refresh_token), self._now()
        )
        if record is None:
            logger.warning("refresh_token_rejected", user_id=str(user_id), reason="no_live_record")
            raise ForbiddenError("Invalid refresh token")

        user = await self.store.get_user_by_id(user_id)
        if user is None or not user.is_active:
            logger.warning(
                "refresh_token_rejected",
                user_id=str(user_id),
                token_id=str(record.id),
                reason="inactive_user" if user else "unknown_user",
            )
            raise ForbiddenError("Invalid refresh token")

        pair = self.codec.issue_token_pair(str(user_id))
        new_record = self._new_refresh_record(user_id, pair.refresh_token)

        if not await self.store.rotate_refresh_token(record.id, new_record):
            logger.warning(
                "refresh_token_rejected",
                user_id=str(user_id),
                token_id=str(record.id),
                reason="already_rotated",
            )
            raise ForbiddenError("Invalid refresh token")

        logger.info(
            "refresh_token_rotated",
            user_id=str(user_id),
            old_token_id=str(record.id),
            new_token_id=str(new_record.id),
        )
        return pair

    async def revoke(self, presented_refresh_token: str) -> None:
        """Revoke every live record for this token. Unknown tokens are ignored."""
        count = await self.store.revoke_refresh_tokens(
            hash_refresh_token(presented_refresh_token)
        )
        logger.info("refresh_tokens_revoked", count=count)
