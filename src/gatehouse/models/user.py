"""Account model."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.gatehouse.core.security import generate_auth_token
from src.gatehouse.models.base import utc_now


class User(SQLModel, table=True):
    """Account record.

    ``password_encrypted`` is an empty string for accounts created through
    OAuth; such accounts can never log in with a password.
    """

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    password_encrypted: str = Field(default="", max_length=255)
    is_admin: bool = Field(default=False, index=True)
    is_owner: bool = Field(default=False)
    active: bool = Field(default=True, index=True)
    auth_token: str = Field(default_factory=generate_auth_token, max_length=64, unique=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
