"""Server-wide settings persisted in the database."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.gatehouse.models.base import utc_now

LICENSE_ROW_ID = 1


class EnterpriseLicense(SQLModel, table=True):
    """The currently accepted license certificate (single row)."""

    __tablename__ = "enterprise_licenses"

    id: int = Field(default=LICENSE_ROW_ID, primary_key=True)
    certificate: str
    updated_at: datetime = Field(default_factory=utc_now)


class OAuthCredential(SQLModel, table=True):
    """Client credentials for one OAuth provider."""

    __tablename__ = "oauth_credentials"

    id: int | None = Field(default=None, primary_key=True)
    provider: str = Field(max_length=20, unique=True)
    client_id: str = Field(max_length=255)
    client_secret: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
