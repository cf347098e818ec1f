"""PostgreSQL credential store using asyncpg."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
import structlog

from socialnet.database import get_pool
from socialnet.errors import ConflictError
from socialnet.models.user import RefreshToken, UserRecord

logger = structlog.get_logger(__name__)

USER_COLUMNS = """
    id, email, username, password_hash, first_name, last_name, display_name, profile_image,
    is_active, last_active_at, created_at, updated_at
"""

TOKEN_COLUMNS = "id, user_id, token_hash, expires_at, is_revoked, revoked_at, created_at"


def _user_from_row(row) -> UserRecord:
    return UserRecord(
        id=row["id"],
        email=row["email"],
        username=row["username"],
        password_hash=row["password_hash"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        display_name=row["display_name"],
        profile_image=row["profile_image"],
        is_active=row["is_active"],
        last_active_at=row["last_active_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _token_from_row(row) -> RefreshToken:
    return RefreshToken(
        id=row["id"],
        user_id=row["user_id"],
        token_hash=row["token_hash"],
        expires_at=row["expires_at"],
        is_revoked=row["is_revoked"],
        revoked_at=row["revoked_at"],
        created_at=row["created_at"],
    )


def _affected_rows(status: str) -> int:
    """Parse the row count out of an asyncpg status string like 'UPDATE 3'."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


class PostgresCredentialStore:
    """Credential store backed by the users and refresh_tokens tables."""

    async def find_user_by_email_or_username(
        self, email: str, username: str
    ) -> Optional[UserRecord]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE email = LOWER(TRIM($1)) OR LOWER(username) = LOWER($2)
                ORDER BY (email = LOWER(TRIM($1))) DESC
                LIMIT 1
                """,
                email,
                username,
            )

        return _user_from_row(row) if row else None

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE email = LOWER(TRIM($1))",
                email,
            )

        return _user_from_row(row) if row else None

    async def get_user_by_id(self, user_id: UUID) -> Optional[UserRecord]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = $1",
                user_id,
            )

        return _user_from_row(row) if row else None

    async def create_user(
        self,
        email: str,
        username: str,
        password_hash: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> UserRecord:
        user_id = uuid4()
        now = datetime.now(timezone.utc)

        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO users (
                        id, email, username, password_hash, first_name, last_name,
                        display_name, is_active, created_at, updated_at
                    )
                    VALUES ($1, LOWER(TRIM($2)), $3, $4, $5, $6, $7, TRUE, $8, $9)
                    RETURNING {USER_COLUMNS}
                    """,
                    user_id,
                    email,
                    username,
                    password_hash,
                    first_name,
                    last_name,
                    display_name,
                    now,
                    now,
                )
        except asyncpg.UniqueViolationError as e:
            # Lost a race against a concurrent registration
            field = "email" if "email" in (e.constraint_name or "") else "username"
            raise ConflictError(field) from e

        return _user_from_row(row)

    async def touch_last_active(self, user_id: UUID, when: datetime) -> None:
        pool = await get_pool()

        async with pool.acquire() as conn:
            await conn.execute(
                "UPDATE users SET last_active_at = $1 WHERE id = $2",
                when,
                user_id,
            )

    async def create_refresh_token(self, token: RefreshToken) -> None:
        pool = await get_pool()

        async with pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO refresh_tokens (id, user_id, token_hash, expires_at, is_revoked, created_at)
                VALUES ($1, $2, $3, $4, FALSE, $5)
                """,
                token.id,
                token.user_id,
                token.token_hash,
                token.expires_at,
                token.created_at,
            )

    async def find_live_refresh_token(
        self, user_id: UUID, token_hash: str, now: datetime
    ) -> Optional[RefreshToken]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {TOKEN_COLUMNS}
                FROM refresh_tokens
                WHERE user_id = $1
                  AND token_hash = $2
                  AND expires_at > $3
                  AND is_revoked = FALSE
                """,
                user_id,
                token_hash,
                now,
            )

        return _token_from_row(row) if row else None

    async def rotate_refresh_token(self, old_id: UUID, new_token: RefreshToken) -> bool:
        now = datetime.now(timezone.utc)

        pool = await get_pool()

        async with pool.acquire() as conn:
            async with conn.transaction():
                status = await conn.execute(
                    """
                    UPDATE refresh_tokens
                    SET is_revoked = TRUE, revoked_at = $1
                    WHERE id = $2 AND is_revoked = FALSE
                    """,
                    now,
                    old_id,
                )
                if _affected_rows(status) != 1:
                    return False

                await conn.execute(
                    """
                    INSERT INTO refresh_tokens (id, user_id, token_hash, expires_at, is_revoked, created_at)
                    VALUES ($1, $2, $3, $4, FALSE, $5)
                    """,
                    new_token.id,
                    new_token.user_id,
                    new_token.token_hash,
                    new_token.expires_at,
                    new_token.created_at,
                )

        return True

    async def revoke_refresh_tokens(self, token_hash: str) -> int:
        now = datetime.now(timezone.utc)

        pool = await get_pool()

        async with pool.acquire() as conn:
            status = await conn.execute(
                """
                UPDATE refresh_tokens
                SET is_revoked = TRUE, revoked_at = $1
                WHERE token_hash = $2 AND is_revoked = FALSE
                """,
                now,
                token_hash,
            )

        return _affected_rows(status)
