"""Authentication-related models - tokens, invitations and password resets."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.gatehouse.models.base import utc_now


class RefreshToken(SQLModel, table=True):
    """Refresh token storage. Only the SHA256 hash of the token is kept."""

    __tablename__ = "refresh_tokens"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    token_hash: str = Field(max_length=255, unique=True, index=True)
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) > self.expires_at


class Invitation(SQLModel, table=True):
    """Single-use registration permit for one email address."""

    __tablename__ = "invitations"

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, index=True)
    code: str = Field(max_length=64, unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now)


class PasswordReset(SQLModel, table=True):
    """Pending password reset. At most one per user."""

    __tablename__ = "password_resets"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True)
    code: str = Field(max_length=64, unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
