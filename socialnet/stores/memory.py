"""In-memory credential store for development and tests."""

import asyncio
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from socialnet.errors import ConflictError
from socialnet.models.user import RefreshToken, UserRecord


class MemoryCredentialStore:
    """Credential store backed by dicts. Every access holds one asyncio.Lock,
    which is what makes refresh rotation a compare-and-swap here."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users: dict[UUID, UserRecord] = {}
        self._tokens: dict[UUID, RefreshToken] = {}

    def _match_email(self, email: str) -> Optional[UserRecord]:
        email = email.strip().lower()
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    def _match_username(self, username: str) -> Optional[UserRecord]:
        username = username.lower()
        for user in self._users.values():
            if user.username.lower() == username:
                return user
        return None

    async def find_user_by_email_or_username(
        self, email: str, username: str
    ) -> Optional[UserRecord]:
        async with self._lock:
            user = self._match_email(email) or self._match_username(username)
            return user.model_copy() if user else None

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        async with self._lock:
            user = self._match_email(email)
            return user.model_copy() if user else None

    async def get_user_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        async with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    async def create_user(
        self,
        email: str,
        username: str,
        password_hash: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> UserRecord:
        async with self._lock:
            if self._match_email(email):
                raise ConflictError("email")
            if self._match_username(username):
                raise ConflictError("username")

            now = datetime.now(timezone.utc)
            user = UserRecord(
                id=uuid4(),
                email=email.strip().lower(),
                username=username,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                display_name=display_name,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            return user.model_copy()

    async def set_active(self, user_id: UUID, is_active: bool) -> None:
        """Enable or disable an account."""
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise ValueError("User not found")
            user.is_active = is_active
            user.updated_at = datetime.now(timezone.utc)

    async def touch_last_active(self, user_id: UUID, when: datetime) -> None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is not None:
                user.last_active_at = when

    async def create_refresh_token(self, token: RefreshToken) -> None:
        async with self._lock:
            self._tokens[token.id] = token.model_copy()

    async def find_live_refresh_token(
        self, user_id: UUID, token_hash: str, now: datetime
    ) -> Optional[RefreshToken]:
        async with self._lock:
            for token in self._tokens.values():
                if (
                    token.user_id == user_id
                    and token.token_hash == token_hash
                    and token.expires_at > now
                    and not token.is_revoked
                ):
                    return token.model_copy()
            return None

    async def rotate_refresh_token(self, old_id: UUID, new_token: RefreshToken) -> bool:
        async with self._lock:
            old = self._tokens.get(old_id)
            if old is None or old.is_revoked:
                return False
            old.is_revoked = True
            old.revoked_at = datetime.now(timezone.utc)
            self._tokens[new_token.id] = new_token.model_copy()
            return True

    async def revoke_refresh_tokens(self, token_hash: str) -> int:
        async with self._lock:
            now = datetime.now(timezone.utc)
            count = 0
            for token in self._tokens.values():
                if token.token_hash == token_hash and not token.is_revoked:
                    token.is_revoked = True
                    token.revoked_at = now
                    count += 1
            return count

    async def list_refresh_tokens(self, user_id: UUID) -> list[RefreshToken]:
        """All records for a user, revoked ones included, oldest first."""
        async with self._lock:
            tokens = [t.model_copy() for t in self._tokens.values() if t.user_id == user_id]
        return sorted(tokens, key=lambda t: t.created_at)
