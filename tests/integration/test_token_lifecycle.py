"""Tests for login, refresh-token rotation and the expiry sweeps."""

import asyncio
from datetime import timedelta

import pytest
from sqlmodel import select

from src.gatehouse.core.exceptions import (
    BadPasswordError,
    InvalidCredentialsError,
    InvalidTokenError,
    RefreshTokenExpiredError,
    RefreshTokenNotFoundError,
    UnknownEmailError,
    UserDisabledError,
    UserNotFoundError,
)
from src.gatehouse.core.security import create_access_token, hash_token
from src.gatehouse.models import RefreshToken, utc_now
from tests.factories import DEFAULT_TEST_PASSWORD, RefreshTokenFactory
from tests.helpers import create_user

pytestmark = pytest.mark.integration

PASSWORD = "P@ssw0rd1"


async def _stored_token(db_session, token: str) -> RefreshToken | None:
    result = await db_session.execute(
        select(RefreshToken).where(RefreshToken.token_hash == hash_token(token))
    )
    row = result.scalar_one_or_none()
    # Release the SQLite write lock so services can proceed
    await db_session.commit()
    return row


async def _stored_hashes(db_session) -> list[str]:
    hashes = (await db_session.execute(select(RefreshToken.token_hash))).scalars().all()
    await db_session.commit()
    return sorted(hashes)


class TestLogin:
    async def test_end_to_end(self, registration_service, auth_service):
        registered = await registration_service.register("a@x.com", PASSWORD)
        assert registered.access_token != registered.refresh_token

        with pytest.raises(BadPasswordError):
            await auth_service.login("a@x.com", "wrong")

        first = await auth_service.login("a@x.com", PASSWORD)
        second = await auth_service.login("a@x.com", PASSWORD)
        assert first.refresh_token != second.refresh_token

        claims = await auth_service.verify_access_token(first.access_token)
        assert claims.sub == "a@x.com"
        assert claims.is_admin

    async def test_each_login_adds_refresh_token(self, auth_service, db_session):
        user = await create_user(db_session)

        await auth_service.login(user.email, DEFAULT_TEST_PASSWORD)
        await auth_service.login(user.email, DEFAULT_TEST_PASSWORD)

        rows = (await db_session.execute(select(RefreshToken))).scalars().all()
        assert len(rows) == 2

    async def test_unknown_email_looks_like_bad_password(self, auth_service, db_session):
        user = await create_user(db_session)

        with pytest.raises(UnknownEmailError) as unknown:
            await auth_service.login("nobody@x.com", DEFAULT_TEST_PASSWORD)
        with pytest.raises(BadPasswordError) as bad_password:
            await auth_service.login(user.email, "wrong")

        assert isinstance(unknown.value, InvalidCredentialsError)
        assert unknown.value.kind == bad_password.value.kind
        assert unknown.value.message == bad_password.value.message

    async def test_disabled_checked_before_password(self, auth_service, db_session):
        user = await create_user(db_session, active=False)

        with pytest.raises(UserDisabledError):
            await auth_service.login(user.email, "wrong")
        with pytest.raises(UserDisabledError):
            await auth_service.login(user.email, DEFAULT_TEST_PASSWORD)

    async def test_account_without_password_cannot_log_in(self, auth_service, db_session):
        user = await create_user(db_session, password_encrypted="")

        for password in ("", DEFAULT_TEST_PASSWORD):
            with pytest.raises(BadPasswordError):
                await auth_service.login(user.email, password)

    async def test_unencodable_password_is_a_bad_password(self, auth_service, db_session):
        user = await create_user(db_session)

        with pytest.raises(BadPasswordError):
            await auth_service.login(user.email, "\ud800")
        with pytest.raises(UnknownEmailError):
            await auth_service.login("nobody@x.com", "\ud800")


class TestRefresh:
    async def test_rotation_preserves_expiry(self, auth_service, db_session):
        user = await create_user(db_session)
        tokens = await auth_service.login(user.email, DEFAULT_TEST_PASSWORD)
        original = await _stored_token(db_session, tokens.refresh_token)

        result = await auth_service.refresh(tokens.refresh_token)

        assert result.refresh_token != tokens.refresh_token
        assert result.refresh_expires_at == original.expires_at

        rotated = await _stored_token(db_session, result.refresh_token)
        assert rotated.id == original.id
        assert rotated.expires_at == original.expires_at
        assert await _stored_token(db_session, tokens.refresh_token) is None

    async def test_old_token_unusable_after_rotation(self, auth_service, db_session):
        user = await create_user(db_session)
        tokens = await auth_service.login(user.email, DEFAULT_TEST_PASSWORD)

        result = await auth_service.refresh(tokens.refresh_token)

        with pytest.raises(RefreshTokenNotFoundError):
            await auth_service.refresh(tokens.refresh_token)
        # The new token keeps working
        await auth_service.refresh(result.refresh_token)

    async def test_unknown_token(self, auth_service, db_session):
        user = await create_user(db_session)
        await auth_service.login(user.email, DEFAULT_TEST_PASSWORD)
        before = await _stored_hashes(db_session)

        with pytest.raises(RefreshTokenNotFoundError):
            await auth_service.refresh("no-such-token")

        assert await _stored_hashes(db_session) == before

    async def test_expired_token(self, auth_service, db_session):
        user = await create_user(db_session)
        db_session.add(RefreshTokenFactory.expired(user_id=user.id, token_hash=hash_token("stale")))
        await db_session.commit()

        with pytest.raises(RefreshTokenExpiredError):
            await auth_service.refresh("stale")

        # The expired row is left for the sweep and nothing new is minted
        assert await _stored_hashes(db_session) == [hash_token("stale")]

    async def test_disabled_user(self, auth_service, db_session):
        user = await create_user(db_session, active=False)
        db_session.add(RefreshTokenFactory.build(user_id=user.id, token_hash=hash_token("t")))
        await db_session.commit()

        with pytest.raises(UserDisabledError):
            await auth_service.refresh("t")

    async def test_access_token_reflects_current_role(
        self, auth_service, registration_service, licensed, db_session
    ):
        user = await create_user(db_session)
        tokens = await auth_service.login(user.email, DEFAULT_TEST_PASSWORD)
        assert not (await auth_service.verify_access_token(tokens.access_token)).is_admin

        await registration_service.update_role(user.id, True)
        result = await auth_service.refresh(tokens.refresh_token)

        assert (await auth_service.verify_access_token(result.access_token)).is_admin

    async def test_concurrent_refresh_has_one_winner(self, auth_service, db_session):
        user = await create_user(db_session)
        tokens = await auth_service.login(user.email, DEFAULT_TEST_PASSWORD)

        results = await asyncio.gather(
            auth_service.refresh(tokens.refresh_token),
            auth_service.refresh(tokens.refresh_token),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], RefreshTokenNotFoundError)

        # Exactly one token row remains and it is the winner's
        rows = (await db_session.execute(select(RefreshToken))).scalars().all()
        assert [r.token_hash for r in rows] == [hash_token(winners[0].refresh_token)]


class TestAccountLookups:
    async def test_get_user_by_email(self, auth_service, db_session):
        user = await create_user(db_session)

        found = await auth_service.get_user_by_email(user.email)
        assert found.id == user.id
        assert not hasattr(found, "password_encrypted")

        with pytest.raises(UserNotFoundError):
            await auth_service.get_user_by_email("nobody@x.com")

    async def test_reset_user_auth_token(self, auth_service, db_session):
        user = await create_user(db_session)
        old_token = user.auth_token

        await auth_service.reset_user_auth_token(user.email)

        assert (await auth_service.get_user_by_email(user.email)).auth_token != old_token
        with pytest.raises(UserNotFoundError):
            await auth_service.reset_user_auth_token("nobody@x.com")

    async def test_verify_access_token_rejects_expired(self, auth_service):
        token = create_access_token("a@x.com", False, expires_delta=timedelta(seconds=-1))
        with pytest.raises(InvalidTokenError):
            await auth_service.verify_access_token(token)


class TestSweeps:
    async def test_delete_expired_tokens(self, auth_service, db_session):
        user = await create_user(db_session)
        db_session.add(RefreshTokenFactory.expired(user_id=user.id))
        db_session.add(RefreshTokenFactory.expired(user_id=user.id))
        db_session.add(RefreshTokenFactory.build(user_id=user.id))
        await db_session.commit()

        assert await auth_service.delete_expired_tokens() == 2
        assert await auth_service.delete_expired_tokens() == 0

        rows = (await db_session.execute(select(RefreshToken))).scalars().all()
        assert len(rows) == 1
        assert rows[0].expires_at > utc_now()
