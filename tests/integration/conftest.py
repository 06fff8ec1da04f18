"""Integration test fixtures for database-backed service operations.

Each test gets its own SQLite database file, so services can open as many
sessions as they like and concurrent transactions really contend.
"""

from collections.abc import AsyncGenerator
from datetime import timedelta
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.gatehouse.core.db import create_engine, get_session_factory, init_models
from src.gatehouse.core.security import LicenseValidator
from src.gatehouse.services import (
    AuthService,
    DomainPolicy,
    LicenseService,
    OAuthService,
    RegistrationService,
    SeatUsageCache,
)
from tests.helpers import RecordingEmailService, sign_license


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine with all tables."""
    test_engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'gatehouse.db'}")
    await init_models(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return get_session_factory(engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for arranging and inspecting data.

    The session does NOT auto-commit. Tests must call `await session.commit()`
    before a service can see their changes. SQLite transactions take the write
    lock on BEGIN, so a test that reads through this session and then calls a
    service must commit (or roll back) in between.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def seat_cache(session_factory: async_sessionmaker[AsyncSession]) -> SeatUsageCache:
    return SeatUsageCache(session_factory, ttl=timedelta(seconds=15))


@pytest.fixture
def license_service(
    session_factory: async_sessionmaker[AsyncSession],
    license_validator: LicenseValidator,
    seat_cache: SeatUsageCache,
) -> LicenseService:
    return LicenseService(session_factory, license_validator, seat_cache)


@pytest.fixture
async def licensed(license_service: LicenseService, license_private_key: str) -> LicenseService:
    """Install a valid ten-seat enterprise license."""
    await license_service.update_license(sign_license(license_private_key, seats=10))
    return license_service


@pytest.fixture
def domain_policy() -> DomainPolicy:
    return DomainPolicy(allowed_domains=["example.com"])


@pytest.fixture
def auth_service(
    session_factory: async_sessionmaker[AsyncSession],
    email_service: RecordingEmailService,
) -> AuthService:
    return AuthService(session_factory, email_service)  # type: ignore[arg-type]


@pytest.fixture
def registration_service(
    session_factory: async_sessionmaker[AsyncSession],
    license_service: LicenseService,
    email_service: RecordingEmailService,
    domain_policy: DomainPolicy,
) -> RegistrationService:
    return RegistrationService(
        session_factory,
        license_service,
        email_service,  # type: ignore[arg-type]
        domain_policy,
    )


@pytest.fixture
def oauth_service(
    session_factory: async_sessionmaker[AsyncSession],
    domain_policy: DomainPolicy,
) -> OAuthService:
    return OAuthService(session_factory, domain_policy=domain_policy)
