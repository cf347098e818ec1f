"""User and refresh-token models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that serialises to camelCase and accepts either casing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(CamelModel):
    """Public profile of a registered user. Never carries the password hash."""

    id: UUID
    email: str
    username: str
    display_name: Optional[str] = None
    profile_image: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool = True
    last_active_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserRecord(User):
    """User row as held by the credential store, password hash included."""

    password_hash: str

    def to_public(self) -> User:
        """Strip the password hash."""
        return User(**self.model_dump(exclude={"password_hash"}))


class RefreshToken(BaseModel):
    """A stored refresh token. Only the SHA-256 digest of the token is kept."""

    id: UUID
    user_id: UUID
    token_hash: str
    expires_at: datetime
    is_revoked: bool = False
    revoked_at: Optional[datetime] = None
    created_at: datetime
