"""Test helper functions for common data creation patterns."""

import time
from concurrent.futures import Future

from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from src.gatehouse.core.exceptions import EmailNotConfiguredError
from src.gatehouse.models import Invitation, User
from tests.factories import InvitationFactory, UserFactory

TEST_LICENSE_ISSUER = "license.test.gatehouse.dev"

DAY = 24 * 60 * 60


def sign_license(
    private_key: str,
    seats: int = 10,
    license_type: str = "ENTERPRISE",
    issuer: str = TEST_LICENSE_ISSUER,
    expires_in: int = 30 * DAY,
    algorithm: str = "RS512",
    **overrides,
) -> str:
    """Sign a license certificate the way the license issuer does.

    Args:
        private_key: PEM private key
        seats: Number of seats granted
        license_type: COMMUNITY, TEAM or ENTERPRISE
        issuer: The iss claim
        expires_in: Seconds from now until exp (negative for an expired license)
        **overrides: Claims to replace; a value of None removes the claim
    """
    now = int(time.time())
    claims = {
        "iss": issuer,
        "sub": "billing@example.com",
        "typ": license_type,
        "num": seats,
        "iat": now,
        "exp": now + expires_in,
    }
    for key, value in overrides.items():
        if value is None:
            claims.pop(key, None)
        else:
            claims[key] = value
    return jwt.encode(claims, private_key, algorithm=algorithm)


async def create_user(session: AsyncSession, **user_kwargs) -> User:
    """Insert a user built by UserFactory and commit.

    Args:
        session: Database session
        **user_kwargs: Additional args passed to UserFactory
    """
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.commit()
    return user


async def create_owner(session: AsyncSession, **user_kwargs) -> User:
    return await create_user(session, is_admin=True, is_owner=True, **user_kwargs)


async def create_invitation(session: AsyncSession, email: str, **kwargs) -> Invitation:
    invitation = InvitationFactory.build(email=email, **kwargs)
    session.add(invitation)
    await session.commit()
    return invitation


class RecordingEmailService:
    """Email service double that records messages instead of sending them."""

    def __init__(self, configured: bool = True, fail: bool = False):
        self.configured = configured
        self.fail = fail
        self.invitations: list[tuple[str, str]] = []
        self.password_resets: list[tuple[str, str]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def send_invitation_email(self, to: str, code: str) -> Future[None]:
        return self._record(self.invitations, to, code)

    def send_password_reset_email(self, to: str, code: str) -> Future[None]:
        return self._record(self.password_resets, to, code)

    def _record(self, outbox: list[tuple[str, str]], to: str, code: str) -> Future[None]:
        if not self.configured:
            raise EmailNotConfiguredError()
        if self.fail:
            raise RuntimeError("SMTP connection refused")
        outbox.append((to, code))
        future: Future[None] = Future()
        future.set_result(None)
        return future
