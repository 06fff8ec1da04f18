"""Repository for Invitation entity."""

from sqlalchemy import delete
from sqlmodel import select

from src.gatehouse.core.security import generate_code
from src.gatehouse.models import Invitation
from src.gatehouse.repositories.base import BaseRepository
from src.gatehouse.schemas.pagination import Page, PageRequest


class InvitationRepository(BaseRepository[Invitation]):
    """Repository for Invitation entity."""

    model = Invitation

    async def create(self, email: str) -> Invitation:
        invitation = Invitation(email=email, code=generate_code())
        self.add(invitation)
        await self.session.flush()
        return invitation

    async def get_by_code(self, code: str) -> Invitation | None:
        result = await self.session.execute(select(Invitation).where(Invitation.code == code))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Invitation | None:
        """Get the earliest-created pending invitation for an email."""
        result = await self.session.execute(
            select(Invitation)
            .where(Invitation.email == email)
            .order_by(Invitation.created_at, Invitation.id)  # type: ignore[arg-type]
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def delete_by_id(self, invitation_id: int) -> bool:
        """Delete (consume) an invitation. Returns False if it was already gone."""
        result = await self.session.execute(
            delete(Invitation).where(Invitation.id == invitation_id)  # type: ignore[arg-type]
        )
        return (result.rowcount or 0) == 1  # type: ignore[attr-defined]

    async def list_paginated(self, page: PageRequest) -> Page[Invitation]:
        return await self.paginate(select(Invitation), page)
