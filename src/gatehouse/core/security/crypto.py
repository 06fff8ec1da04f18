"""Cryptographic utilities - password hashing, JWT access tokens, and refresh tokens."""

import secrets
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from hashlib import sha256

import argon2
from jose import JWTError, jwt
from pydantic import ValidationError

from src.gatehouse.core.config import get_settings
from src.gatehouse.core.exceptions import HashingError, InvalidTokenError, TokenEncodingError
from src.gatehouse.schemas.auth import AccessTokenClaims

# Accounts provisioned through OAuth carry this instead of a password hash.
NO_PASSWORD = ""


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def _create_password_hasher() -> argon2.PasswordHasher:
    """Create password hasher with settings from config."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
        type=argon2.Type.ID,
    )


_password_hasher = _create_password_hasher()


def hash_password(password: str) -> str:
    """Hash password using Argon2id."""
    try:
        return _password_hasher.hash(password)
    except (argon2.exceptions.HashingError, UnicodeEncodeError) as e:
        raise HashingError() from e


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash verified against when the account does not exist, so both paths cost the same."""
    return _password_hasher.hash(secrets.token_urlsafe(16))


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash. Returns False on any error.

    An empty hash never verifies: it marks an account without a local password.
    It still costs one verification so such accounts answer as slowly as others.
    """
    if not hashed:
        _verify(password, dummy_password_hash())
        return False
    return _verify(password, hashed)


def _verify(password: str, hashed: str) -> bool:
    try:
        return _password_hasher.verify(hashed, password)
    except argon2.exceptions.VerificationError:
        return False
    # Non-ASCII hashes and unencodable passwords surface as ValueError
    except (argon2.exceptions.InvalidHashError, ValueError):
        return False


def create_access_token(
    email: str,
    is_admin: bool,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT access token for the given identity."""
    settings = get_settings()

    issued_at = datetime.now(UTC)
    if expires_delta:
        expire = issued_at + expires_delta
    else:
        expire = issued_at + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": email,
        "is_admin": is_admin,
        "iat": issued_at,
        "exp": expire,
    }
    try:
        return jwt.encode(  # type: ignore[no-any-return]
            to_encode,
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
    except JWTError as e:
        raise TokenEncodingError() from e


def decode_access_token(token: str) -> AccessTokenClaims:
    """Decode and validate an access token.

    Raises:
        InvalidTokenError: On bad signature, malformed token, missing claims or expiry.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require_exp": True, "require_iat": True, "require_sub": True},
        )
        return AccessTokenClaims.model_validate(payload)
    except (JWTError, ValidationError) as e:
        raise InvalidTokenError() from e


def generate_refresh_token() -> str:
    """Generate an opaque refresh token string (256 bits of entropy)."""
    return secrets.token_urlsafe(32)


def generate_code() -> str:
    """Generate a random code for invitations and password resets."""
    return secrets.token_urlsafe(24)


def generate_auth_token() -> str:
    """Generate a per-account auth token."""
    return f"auth_{secrets.token_hex(16)}"
