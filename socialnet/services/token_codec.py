"""Signing and verification of access and refresh JWTs."""

from datetime import datetime, timedelta, timezone
from typing import Literal
from uuid import uuid4

import jwt
import structlog

from socialnet.config import Settings
from socialnet.errors import InvalidTokenError
from socialnet.models.auth import TokenPair

logger = structlog.get_logger(__name__)

TokenKind = Literal["access", "refresh"]


class TokenCodec:
    """Issues and verifies the two token kinds.

    Access and refresh tokens are signed with different secrets and carry a
    ``type`` claim, so one can never be presented in place of the other.
    Nothing is persisted here.
    """

    def __init__(self, settings: Settings):
        self.algorithm = settings.jwt_algorithm
        self._secrets = {
            "access": settings.jwt_access_secret,
            "refresh": settings.jwt_refresh_secret,
        }
        self.lifetimes = {
            "access": settings.jwt_access_expiration,
            "refresh": settings.jwt_refresh_expiration,
        }

    def _sign(self, subject_id: str, kind: TokenKind) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject_id,
            "type": kind,
            "iat": now,
            "exp": now + timedelta(seconds=self.lifetimes[kind]),
            # keeps tokens issued in the same second distinct
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self.algorithm)

    def issue_token_pair(self, subject_id: str) -> TokenPair:
        """Sign a new access token and refresh token for a subject.

        Args:
            subject_id: User id placed in the ``sub`` claim

        Returns:
            TokenPair of independently signed tokens
        """
        pair = TokenPair(
            access_token=self._sign(subject_id, "access"),
            refresh_token=self._sign(subject_id, "refresh"),
        )
        logger.debug(
            "token_pair_issued",
            subject_id=subject_id,
            access_expires_seconds=self.lifetimes["access"],
            refresh_expires_seconds=self.lifetimes["refresh"],
        )
        return pair

    def verify(self, token: str, kind: TokenKind) -> str:
        """Validate a token of the given kind and return its subject.

        Raises:
            InvalidTokenError: Bad signature, expired, malformed, wrong kind,
                or no subject
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError(f"{kind.capitalize()} token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid {kind} token: {e}")

        if payload.get("type") != kind:
            raise InvalidTokenError(f"Invalid {kind} token: wrong token type")

        subject_id = payload.get("sub")
        if not subject_id:
            raise InvalidTokenError(f"Invalid {kind} token: missing subject")
        return subject_id
