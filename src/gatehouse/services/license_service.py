"""License service - certificate validation combined with seat accounting."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.gatehouse.core.config import Settings, get_settings
from src.gatehouse.core.exceptions import (
    LicenseCorruptError,
    LicenseExpiredError,
    SeatsExceededError,
)
from src.gatehouse.core.logging import get_logger
from src.gatehouse.core.security import LicenseValidationError, LicenseValidator, load_public_key
from src.gatehouse.repositories import LicenseRepository
from src.gatehouse.schemas.license import LicenseClaims, LicenseInfo, LicenseStatus
from src.gatehouse.services.seat_cache import SeatUsageCache

logger = get_logger(__name__)


def license_status(claims: LicenseClaims, seats_used: int, now: datetime) -> LicenseStatus:
    """Derive the status of a license. Expiry wins over seat overuse."""
    if now > claims.expires_at:
        return LicenseStatus.EXPIRED
    if seats_used > claims.num:
        return LicenseStatus.SEATS_EXCEEDED
    return LicenseStatus.OK


def license_info_from_claims(
    claims: LicenseClaims, seats_used: int, now: datetime | None = None
) -> LicenseInfo:
    return LicenseInfo(
        type=claims.typ,
        status=license_status(claims, seats_used, now or datetime.now(UTC)),
        seats=claims.num,
        seats_used=seats_used,
        issued_at=claims.issued_at,
        expires_at=claims.expires_at,
    )


class LicenseService:
    """Answers "is the license valid and within seats" and accepts new certificates."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        validator: LicenseValidator,
        seat_cache: SeatUsageCache,
        clock: Callable[[], datetime] | None = None,
    ):
        self.session_factory = session_factory
        self.validator = validator
        self.seat_cache = seat_cache
        self._clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def from_settings(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ) -> "LicenseService":
        """Build the service with the shipped public key and configured issuer."""
        settings = settings or get_settings()
        validator = LicenseValidator(
            public_key=load_public_key(settings.license_public_key_path),
            issuer=settings.license_issuer,
        )
        seat_cache = SeatUsageCache(
            session_factory, ttl=timedelta(seconds=settings.seat_cache_ttl_seconds)
        )
        return cls(session_factory, validator, seat_cache)

    async def read_license(self) -> LicenseInfo | None:
        """Read and re-validate the stored license.

        Returns None if no license has been installed.

        Raises:
            LicenseCorruptError: If the stored certificate no longer validates.
        """
        async with self.session_factory() as session:
            certificate = await LicenseRepository(session).read_certificate()
        if certificate is None:
            return None

        try:
            claims = self.validator.validate(certificate)
        except LicenseValidationError as e:
            logger.error("Stored license is corrupt", reason=e.kind.value)
            raise LicenseCorruptError("License is corrupt", reason=e.kind.value) from e

        seats_used = await self.seat_cache.read(force_refresh=False)
        return license_info_from_claims(claims, seats_used, self._clock())

    async def is_license_valid(self) -> bool:
        """True only for an installed, valid license within its seats."""
        try:
            info = await self.read_license()
        except LicenseCorruptError:
            return False
        return info is not None and info.is_valid

    async def update_license(self, certificate: str) -> LicenseInfo:
        """Validate and install a new license certificate.

        Only a license whose status is OK is persisted; otherwise the previous
        license stays in effect.

        Raises:
            LicenseCorruptError: Signature, issuer or claims are invalid.
            LicenseExpiredError: The license has expired.
            SeatsExceededError: More accounts are active than the license grants.
        """
        try:
            claims = self.validator.validate(certificate)
        except LicenseValidationError as e:
            raise LicenseCorruptError(reason=e.kind.value) from e

        seats_used = await self.seat_cache.read(force_refresh=True)
        info = license_info_from_claims(claims, seats_used, self._clock())

        if info.status == LicenseStatus.EXPIRED:
            raise LicenseExpiredError()
        if info.status == LicenseStatus.SEATS_EXCEEDED:
            raise SeatsExceededError()

        async with self.session_factory() as session:
            try:
                await LicenseRepository(session).update_certificate(certificate)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info(
            "License updated",
            license_type=info.type.value,
            seats=info.seats,
            seats_used=info.seats_used,
            expires_at=info.expires_at.isoformat(),
        )
        return info
