from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class LicenseType(str, Enum):
    COMMUNITY = "COMMUNITY"
    TEAM = "TEAM"
    ENTERPRISE = "ENTERPRISE"


class LicenseStatus(str, Enum):
    OK = "OK"
    EXPIRED = "EXPIRED"
    SEATS_EXCEEDED = "SEATS_EXCEEDED"


class LicenseClaims(BaseModel):
    """Decoded payload of a license certificate."""

    exp: int
    iat: int
    iss: str
    sub: str  # License grantee email address
    typ: LicenseType
    num: int = Field(ge=0)  # Number of seats

    @property
    def issued_at(self) -> datetime:
        return datetime.fromtimestamp(self.iat, UTC)

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, UTC)


class LicenseInfo(BaseModel):
    type: LicenseType
    status: LicenseStatus
    seats: int
    seats_used: int
    issued_at: datetime
    expires_at: datetime

    @property
    def is_valid(self) -> bool:
        return self.status == LicenseStatus.OK
