"""Repository for PasswordReset entity."""

from datetime import datetime

from sqlalchemy import delete
from sqlmodel import select

from src.gatehouse.core.security import generate_code
from src.gatehouse.models import PasswordReset
from src.gatehouse.repositories.base import BaseRepository


class PasswordResetRepository(BaseRepository[PasswordReset]):
    """Repository for PasswordReset entity."""

    model = PasswordReset

    async def get_by_user_id(self, user_id: int) -> PasswordReset | None:
        result = await self.session.execute(
            select(PasswordReset).where(PasswordReset.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_code(self, code: str) -> PasswordReset | None:
        result = await self.session.execute(
            select(PasswordReset).where(PasswordReset.code == code)
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: int) -> PasswordReset:
        """Create a reset request, replacing any previous one for the user."""
        await self.delete_by_user_id(user_id)
        reset = PasswordReset(user_id=user_id, code=generate_code())
        self.add(reset)
        await self.session.flush()
        return reset

    async def delete_by_user_id(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(PasswordReset).where(PasswordReset.user_id == user_id)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def delete_created_before(self, cutoff: datetime) -> int:
        """Delete requests created before cutoff.

        Idempotent: DELETE operations are inherently idempotent.

        Returns:
            Number of requests deleted
        """
        result = await self.session.execute(
            delete(PasswordReset).where(PasswordReset.created_at < cutoff)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
