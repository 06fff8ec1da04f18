from src.gatehouse.schemas.auth import (
    AccessTokenClaims,
    OAuthCredentialRead,
    OAuthProvider,
    RefreshResult,
    TokenPair,
)
from src.gatehouse.schemas.invite import InvitationRead
from src.gatehouse.schemas.license import LicenseClaims, LicenseInfo, LicenseStatus, LicenseType
from src.gatehouse.schemas.pagination import Page, PageRequest, decode_cursor, encode_cursor
from src.gatehouse.schemas.user import UserRead

__all__ = [
    "AccessTokenClaims",
    "InvitationRead",
    "LicenseClaims",
    "LicenseInfo",
    "LicenseStatus",
    "LicenseType",
    "OAuthCredentialRead",
    "OAuthProvider",
    "Page",
    "PageRequest",
    "RefreshResult",
    "TokenPair",
    "UserRead",
    "decode_cursor",
    "encode_cursor",
]
