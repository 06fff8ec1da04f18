from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class AccessTokenClaims(BaseModel):
    """Claims carried by a signed access token."""

    sub: str  # Account email
    is_admin: bool
    iat: int
    exp: int


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshResult(BaseModel):
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    token_type: str = "bearer"


class OAuthProvider(str, Enum):
    GITHUB = "github"
    GOOGLE = "google"


class OAuthCredentialRead(BaseModel):
    provider: OAuthProvider
    client_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
