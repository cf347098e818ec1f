"""Unit tests for the bcrypt PasswordHasher."""

import pytest

from socialnet.services.password_hasher import PasswordHasher


class TestPasswordHashing:
    """Tests for hash / verify."""

    async def test_hash_returns_bcrypt_string(self, hasher):
        hashed = await hasher.hash("my-secret-pw")
        assert hashed.startswith("$2b$") or hashed.startswith("$2a$")
        assert len(hashed) == 60

    async def test_hash_uses_configured_rounds(self):
        hashed = await PasswordHasher(rounds=5).hash("pw-123456")
        assert hashed.split("$")[2] == "05"

    async def test_different_salts(self, hasher):
        h1 = await hasher.hash("same-password")
        h2 = await hasher.hash("same-password")
        assert h1 != h2, "Each call should produce a unique salt"

    async def test_verify_correct(self, hasher):
        hashed = await hasher.hash("correct-horse-battery")
        assert await hasher.verify("correct-horse-battery", hashed) is True

    async def test_verify_wrong(self, hasher):
        hashed = await hasher.hash("right-password")
        assert await hasher.verify("wrong-password", hashed) is False

    @pytest.mark.parametrize("bad_hash", ["", "not-a-bcrypt-hash", "$2b$04$short"])
    async def test_verify_malformed_hash_is_false(self, hasher, bad_hash):
        assert await hasher.verify("anything", bad_hash) is False
