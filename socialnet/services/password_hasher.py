"""bcrypt password hashing, run off the event loop."""

import asyncio

import bcrypt


class PasswordHasher:
    """One-way password hashing and verification.

    bcrypt is deliberately slow, so both operations run in a worker thread
    and the caller only awaits the result.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def _verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError:
            # Malformed stored hash or an over-long password
            return False

    async def hash(self, password: str) -> str:
        """Hash a password with a fresh salt.

        Args:
            password: Plain-text password

        Returns:
            Bcrypt hash string
        """
        return await asyncio.to_thread(self._hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored bcrypt hash.

        Returns:
            True if the password matches, False otherwise (including for
            hashes bcrypt cannot parse)
        """
        return await asyncio.to_thread(self._verify, password, password_hash)
