"""Repository for RefreshToken entity."""

from datetime import datetime

from sqlalchemy import delete, update
from sqlmodel import select

from src.gatehouse.models import RefreshToken, utc_now
from src.gatehouse.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Repository for RefreshToken entity."""

    model = RefreshToken

    async def create(self, user_id: int, token_hash: str, expires_at: datetime) -> RefreshToken:
        token = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        self.add(token)
        await self.session.flush()
        return token

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Get refresh token by its hash."""
        result = await self.session.execute(
            select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def replace_hash(self, old_hash: str, new_hash: str) -> bool:
        """Swap the stored hash for a new one, only if the old hash is still current.

        The row (and its expires_at) is kept. Returns False when another caller
        already rotated or deleted the token.
        """
        result = await self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.token_hash == old_hash)  # type: ignore[arg-type]
            .values(token_hash=new_hash)
        )
        return (result.rowcount or 0) == 1  # type: ignore[attr-defined]

    async def delete_for_user(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(RefreshToken).where(RefreshToken.user_id == user_id)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def delete_expired(self) -> int:
        """Delete tokens past their expiry.

        Idempotent: DELETE operations are inherently idempotent.

        Returns:
            Number of tokens deleted
        """
        result = await self.session.execute(
            delete(RefreshToken).where(RefreshToken.expires_at < utc_now())  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
