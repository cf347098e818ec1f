"""User creation and profile lookups."""

from typing import Optional
from uuid import UUID

import structlog

from socialnet.models.user import User
from socialnet.services.password_hasher import PasswordHasher
from socialnet.stores.base import CredentialStore

logger = structlog.get_logger(__name__)


class UserService:
    """Service for creating users and reading public profiles."""

    def __init__(self, store: CredentialStore, hasher: PasswordHasher):
        self.store = store
        self.hasher = hasher

    async def create_user(
        self,
        email: str,
        username: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> User:
        """Create a new user with a hashed password.

        Args:
            email: Unique email address
            username: Unique username
            password: Plain-text password (will be hashed)
            first_name: Optional given name
            last_name: Optional family name
            display_name: Optional display name, defaults to the username

        Returns:
            Public profile of the created user

        Raises:
            ConflictError: If the store rejects the email or username as taken
        """
        password_hash = await self.hasher.hash(password)
        record = await self.store.create_user(
            email=email,
            username=username,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            display_name=display_name or username,
        )

        logger.info("user_created", user_id=str(record.id), username=record.username)
        return record.to_public()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user's public profile by id, or None if not found."""
        record = await self.store.get_user_by_id(user_id)
        return record.to_public() if record else None
