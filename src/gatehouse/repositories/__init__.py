"""Repository layer - data access abstraction."""

from src.gatehouse.repositories.base import BaseRepository
from src.gatehouse.repositories.invitation import InvitationRepository
from src.gatehouse.repositories.password_reset import PasswordResetRepository
from src.gatehouse.repositories.settings import LicenseRepository, OAuthCredentialRepository
from src.gatehouse.repositories.token import RefreshTokenRepository
from src.gatehouse.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "InvitationRepository",
    "LicenseRepository",
    "OAuthCredentialRepository",
    "PasswordResetRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
