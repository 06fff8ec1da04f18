"""Repository for User entity."""

from sqlalchemy import func, update
from sqlmodel import select

from src.gatehouse.core.security import generate_auth_token
from src.gatehouse.models import User, utc_now
from src.gatehouse.repositories.base import BaseRepository
from src.gatehouse.schemas.pagination import Page, PageRequest


class UserRepository(BaseRepository[User]):
    """Repository for User entity."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email address (exact, case-sensitive match)."""
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check if a user with the given email exists."""
        user = await self.get_by_email(email)
        return user is not None

    async def admin_exists(self) -> bool:
        result = await self.session.execute(
            select(User.id).where(User.is_admin == True).limit(1)  # noqa: E712
        )
        return result.scalar_one_or_none() is not None

    async def count_active(self) -> int:
        """Number of active accounts (license seats in use)."""
        result = await self.session.execute(
            select(func.count()).select_from(User).where(User.active == True)  # noqa: E712
        )
        return result.scalar_one()

    async def create(
        self,
        email: str,
        password_encrypted: str,
        is_admin: bool,
        is_owner: bool = False,
    ) -> User:
        """Insert a new user and flush to obtain its id."""
        user = User(
            email=email,
            password_encrypted=password_encrypted,
            is_admin=is_admin,
            is_owner=is_owner,
        )
        self.add(user)
        await self.session.flush()
        return user

    async def update_role(self, user: User, is_admin: bool) -> User:
        user.is_admin = is_admin
        user.updated_at = utc_now()
        self.add(user)
        await self.session.flush()
        return user

    async def update_active(self, user: User, active: bool) -> User:
        user.active = active
        user.updated_at = utc_now()
        self.add(user)
        await self.session.flush()
        return user

    async def update_password(self, user_id: int, password_encrypted: str) -> int:
        """Store a new password hash. Returns the number of rows updated."""
        result = await self.session.execute(
            update(User)
            .where(User.id == user_id)  # type: ignore[arg-type]
            .values(password_encrypted=password_encrypted, updated_at=utc_now())
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def reset_auth_token_by_email(self, email: str) -> int:
        """Rotate the auth token of the account. Returns the number of rows updated."""
        result = await self.session.execute(
            update(User)
            .where(User.email == email)  # type: ignore[arg-type]
            .values(auth_token=generate_auth_token(), updated_at=utc_now())
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def list_paginated(self, page: PageRequest) -> Page[User]:
        return await self.paginate(select(User), page)
