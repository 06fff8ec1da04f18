"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

# Settings are read at import time (the password hasher is built on import)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
os.environ.setdefault("RESEND_API_KEY", "")
# Cheap Argon2 parameters keep the suite fast
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_TIME_COST", "1")

# ruff: noqa: E402 - Imports must be after env var setup
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from src.gatehouse.core.config import get_settings
from src.gatehouse.core.security import LicenseValidator
from tests.helpers import TEST_LICENSE_ISSUER, RecordingEmailService

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


# --- License keys ---


def _generate_key_pair() -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
    return private_pem, public_pem


@pytest.fixture(scope="session")
def license_key_pair() -> tuple[str, str]:
    """RSA key pair (private PEM, public PEM) standing in for the license issuer's key."""
    return _generate_key_pair()


@pytest.fixture(scope="session")
def other_key_pair() -> tuple[str, str]:
    """A second key pair, for certificates signed by the wrong key."""
    return _generate_key_pair()


@pytest.fixture(scope="session")
def license_private_key(license_key_pair: tuple[str, str]) -> str:
    return license_key_pair[0]


@pytest.fixture
def license_validator(license_key_pair: tuple[str, str]) -> LicenseValidator:
    return LicenseValidator(public_key=license_key_pair[1], issuer=TEST_LICENSE_ISSUER)


@pytest.fixture
def email_service() -> RecordingEmailService:
    return RecordingEmailService()
