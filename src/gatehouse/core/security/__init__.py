"""Security utilities - crypto and license certificates.

Re-exports all security-related functions for convenience.
"""

from src.gatehouse.core.security.crypto import (
    NO_PASSWORD,
    create_access_token,
    decode_access_token,
    dummy_password_hash,
    generate_auth_token,
    generate_code,
    generate_refresh_token,
    hash_password,
    hash_token,
    verify_password,
)
from src.gatehouse.core.security.license import (
    LICENSE_ALGORITHM,
    LicenseErrorKind,
    LicenseValidationError,
    LicenseValidator,
    load_public_key,
)

__all__ = [
    # Crypto
    "NO_PASSWORD",
    "create_access_token",
    "decode_access_token",
    "dummy_password_hash",
    "generate_auth_token",
    "generate_code",
    "generate_refresh_token",
    "hash_password",
    "hash_token",
    "verify_password",
    # License
    "LICENSE_ALGORITHM",
    "LicenseErrorKind",
    "LicenseValidationError",
    "LicenseValidator",
    "load_public_key",
]
