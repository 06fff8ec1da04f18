from src.gatehouse.services.auth_service import AuthService
from src.gatehouse.services.domain_policy import DomainPolicy
from src.gatehouse.services.license_service import LicenseService, license_status
from src.gatehouse.services.oauth_service import OAuthClient, OAuthService
from src.gatehouse.services.registration_service import RegistrationService
from src.gatehouse.services.seat_cache import SeatUsageCache, SeatUsageSnapshot
from src.gatehouse.services.token_issuer import issue_token_pair

__all__ = [
    "AuthService",
    "DomainPolicy",
    "LicenseService",
    "OAuthClient",
    "OAuthService",
    "RegistrationService",
    "SeatUsageCache",
    "SeatUsageSnapshot",
    "issue_token_pair",
    "license_status",
]
