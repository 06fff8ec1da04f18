from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LICENSE_KEY_PATH = Path(__file__).resolve().parent.parent / "keys" / "license.key.pub"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Gatehouse"
    debug: bool = False

    # Security
    log_user_emails: bool = False  # Set to False in production for GDPR compliance

    # Database
    database_url: str = "sqlite+aiosqlite:///./gatehouse.db"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_echo: bool = False

    # Auth
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7
    argon2_time_cost: int = 2
    argon2_memory_cost: int = 19456
    argon2_parallelism: int = 1

    # Password reset
    password_reset_expire_minutes: int = 15
    password_reset_cooldown_minutes: int = 5

    # License
    license_public_key_path: Path = DEFAULT_LICENSE_KEY_PATH
    license_issuer: str = "license.gatehouse.dev"
    seat_cache_ttl_seconds: int = 15

    # Self-signup
    allowed_register_domains: list[str] = []
    allow_unlisted_signup: bool = False

    # Email (Resend)
    resend_api_key: str | None = None  # If not set, email transport is "not configured"
    email_from: str = "noreply@example.com"
    app_url: str = "http://localhost:8080"  # Frontend URL for invitation/reset links

    # OAuth
    external_url: str = "http://localhost:8080"

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("allowed_register_domains")
    @classmethod
    def normalize_domains(cls, v: list[str]) -> list[str]:
        """Strip whitespace and a leading '@' so '@example.com' and 'example.com' match."""
        domains = []
        for domain in v:
            domain = domain.strip().lstrip("@").lower()
            if domain:
                domains.append(domain)
        return domains

    @field_validator("external_url", "app_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
