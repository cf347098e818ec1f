"""Unit tests for MemoryCredentialStore."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from socialnet.errors import ConflictError
from socialnet.models.user import RefreshToken


def _token(user_id, token_hash="a" * 64, expires_in=3600, created_at=None):
    now = created_at or datetime.now(timezone.utc)
    return RefreshToken(
        id=uuid4(),
        user_id=user_id,
        token_hash=token_hash,
        expires_at=now + timedelta(seconds=expires_in),
        created_at=now,
    )


async def _user(store, email="a@x.com", username="alice"):
    return await store.create_user(email=email, username=username, password_hash="$2b$hash")


class TestUsers:
    """Tests for user persistence."""

    async def test_create_lowercases_email(self, store):
        user = await _user(store, email="Mixed@X.com")
        assert user.email == "mixed@x.com"
        assert (await store.find_user_by_email("MIXED@x.com")).id == user.id

    async def test_email_lookup_trims_whitespace(self, store):
        user = await _user(store, email=" Alice@X.com ")
        assert user.email == "alice@x.com"
        assert (await store.find_user_by_email("  alice@x.com")).id == user.id

    async def test_create_rejects_duplicate_email(self, store):
        await _user(store)
        with pytest.raises(ConflictError) as exc_info:
            await _user(store, username="other")
        assert exc_info.value.field == "email"

    async def test_create_rejects_duplicate_username(self, store):
        await _user(store)
        with pytest.raises(ConflictError) as exc_info:
            await _user(store, email="b@x.com", username="Alice")
        assert exc_info.value.field == "username"

    async def test_disjunctive_lookup_prefers_email(self, store):
        alice = await _user(store)
        bob = await _user(store, email="b@x.com", username="bob")

        assert (await store.find_user_by_email_or_username("b@x.com", "alice")).id == bob.id
        assert (await store.find_user_by_email_or_username("c@x.com", "alice")).id == alice.id
        assert await store.find_user_by_email_or_username("c@x.com", "carol") is None

    async def test_returned_records_are_copies(self, store):
        user = await _user(store)
        user.is_active = False

        assert (await store.get_user_by_id(user.id)).is_active is True

    async def test_touch_last_active(self, store):
        user = await _user(store)
        when = datetime(2026, 1, 1, tzinfo=timezone.utc)

        await store.touch_last_active(user.id, when)

        assert (await store.get_user_by_id(user.id)).last_active_at == when

    async def test_set_active_unknown_user_raises(self, store):
        with pytest.raises(ValueError):
            await store.set_active(uuid4(), False)


class TestRefreshTokens:
    """Tests for refresh-token records."""

    async def test_find_live_matches_all_predicates(self, store):
        user_id = uuid4()
        token = _token(user_id)
        await store.create_refresh_token(token)
        now = datetime.now(timezone.utc)

        assert (await store.find_live_refresh_token(user_id, token.token_hash, now)).id == token.id
        assert await store.find_live_refresh_token(uuid4(), token.token_hash, now) is None
        assert await store.find_live_refresh_token(user_id, "b" * 64, now) is None
        assert await store.find_live_refresh_token(user_id, token.token_hash, token.expires_at) is None

    async def test_rotate_revokes_and_inserts(self, store):
        user_id = uuid4()
        old = _token(user_id)
        new = _token(user_id, token_hash="c" * 64)
        await store.create_refresh_token(old)

        assert await store.rotate_refresh_token(old.id, new) is True

        records = {r.id: r for r in await store.list_refresh_tokens(user_id)}
        assert records[old.id].is_revoked is True
        assert records[new.id].is_revoked is False

    async def test_rotate_already_revoked_inserts_nothing(self, store):
        user_id = uuid4()
        old = _token(user_id)
        await store.create_refresh_token(old)
        await store.revoke_refresh_tokens(old.token_hash)

        assert await store.rotate_refresh_token(old.id, _token(user_id, token_hash="c" * 64)) is False
        assert len(await store.list_refresh_tokens(user_id)) == 1

    async def test_rotate_unknown_record(self, store):
        assert await store.rotate_refresh_token(uuid4(), _token(uuid4())) is False

    async def test_revoke_counts_only_live_records(self, store):
        user_id = uuid4()
        token = _token(user_id)
        await store.create_refresh_token(token)

        assert await store.revoke_refresh_tokens(token.token_hash) == 1
        assert await store.revoke_refresh_tokens(token.token_hash) == 0
        assert await store.revoke_refresh_tokens("unknown") == 0
