"""Time-bounded cache of the number of active accounts (license seats in use)."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.gatehouse.core.logging import get_logger
from src.gatehouse.repositories import UserRepository

logger = get_logger(__name__)

DEFAULT_SEAT_CACHE_TTL = timedelta(seconds=15)


@dataclass(frozen=True)
class SeatUsageSnapshot:
    computed_at: datetime
    count: int


class SeatUsageCache:
    """Read-mostly cache of the active account count.

    Readers take the current snapshot reference without locking. Refreshers
    count outside the lock, then publish under it. A snapshot computed earlier
    never replaces one computed later.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ttl: timedelta = DEFAULT_SEAT_CACHE_TTL,
        clock: Callable[[], datetime] | None = None,
    ):
        self.session_factory = session_factory
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(UTC))
        self._snapshot: SeatUsageSnapshot | None = None
        self._write_lock = asyncio.Lock()

    @property
    def snapshot(self) -> SeatUsageSnapshot | None:
        return self._snapshot

    async def read(self, force_refresh: bool = False) -> int:
        """Return the number of active accounts.

        Args:
            force_refresh: Always recount instead of using a fresh cached value.
        """
        snapshot = self._snapshot
        now = self._clock()
        if not force_refresh and snapshot is not None and now - snapshot.computed_at < self.ttl:
            return snapshot.count
        return await self.refresh()

    async def refresh(self) -> int:
        """Recount active accounts and publish the result."""
        computed_at = self._clock()
        async with self.session_factory() as session:
            count = await UserRepository(session).count_active()

        await self._publish(SeatUsageSnapshot(computed_at=computed_at, count=count))
        logger.debug("Seat usage refreshed", seats_used=count)
        return count

    async def _publish(self, snapshot: SeatUsageSnapshot) -> bool:
        async with self._write_lock:
            current = self._snapshot
            if current is not None and current.computed_at > snapshot.computed_at:
                return False
            self._snapshot = snapshot
            return True
