"""Credential store interface."""

from datetime import datetime
from typing import Optional, Protocol
from uuid import UUID

from socialnet.models.user import RefreshToken, UserRecord


class CredentialStore(Protocol):
    """Persistence for users and refresh-token records.

    Implementations must make ``rotate_refresh_token`` atomic: the revoke is
    a compare-and-swap on ``is_revoked`` and the insert only happens if that
    swap succeeded.
    """

    async def find_user_by_email_or_username(
        self, email: str, username: str
    ) -> Optional[UserRecord]:
        """Return a user whose email or username matches.

        An email match wins over a username match held by another user.
        """
        ...

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    async def get_user_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        ...

    async def create_user(
        self,
        email: str,
        username: str,
        password_hash: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> UserRecord:
        """Insert a user. Raises ConflictError on a uniqueness violation."""
        ...

    async def touch_last_active(self, user_id: UUID, when: datetime) -> None:
        ...

    async def create_refresh_token(self, token: RefreshToken) -> None:
        ...

    async def find_live_refresh_token(
        self, user_id: UUID, token_hash: str, now: datetime
    ) -> Optional[RefreshToken]:
        """Return the record owned by user_id with this digest that is
        unrevoked and expires strictly after now."""
        ...

    async def rotate_refresh_token(self, old_id: UUID, new_token: RefreshToken) -> bool:
        """Revoke old_id and insert new_token as one step.

        Returns:
            False (and inserts nothing) if old_id was already revoked
        """
        ...

    async def revoke_refresh_tokens(self, token_hash: str) -> int:
        """Revoke every unrevoked record with this digest; return the count."""
        ...
