"""Authentication service - login, refresh-token rotation, password resets."""

from concurrent.futures import Future
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.gatehouse.core.config import get_settings
from src.gatehouse.core.exceptions import (
    BadPasswordError,
    EmailNotConfiguredError,
    PasswordResetRateLimitedError,
    RefreshTokenExpiredError,
    RefreshTokenNotFoundError,
    ResetCodeInvalidError,
    UnknownEmailError,
    UserDisabledError,
    UserNotFoundError,
)
from src.gatehouse.core.logging import bind_user_context, get_logger, loggable_email
from src.gatehouse.core.notifications import EmailService
from src.gatehouse.core.security import (
    create_access_token,
    decode_access_token,
    dummy_password_hash,
    generate_refresh_token,
    hash_password,
    hash_token,
    verify_password,
)
from src.gatehouse.models import utc_now
from src.gatehouse.repositories import (
    PasswordResetRepository,
    RefreshTokenRepository,
    UserRepository,
)
from src.gatehouse.schemas.auth import AccessTokenClaims, RefreshResult, TokenPair
from src.gatehouse.schemas.user import UserRead
from src.gatehouse.services.token_issuer import issue_token_pair

logger = get_logger(__name__)


class AuthService:
    """Authentication service - token issuance and rotation, password resets.

    Each public method is one unit of work with its own session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        email_service: EmailService,
    ):
        self.session_factory = session_factory
        self.email_service = email_service

    async def login(self, email: str, password: str) -> TokenPair:
        """Authenticate with email and password and return a new token pair.

        Disabled accounts are rejected before the password is checked.

        Raises:
            UnknownEmailError: No account with this email.
            UserDisabledError: The account is deactivated.
            BadPasswordError: The password does not match.
        """
        async with self.session_factory() as session:
            try:
                user = await UserRepository(session).get_by_email(email)

                if user is None:
                    # Same hashing cost as a real check
                    verify_password(password, dummy_password_hash())
                    raise UnknownEmailError()

                if not user.active:
                    raise UserDisabledError()

                if not verify_password(password, user.password_encrypted):
                    raise BadPasswordError()

                tokens = await issue_token_pair(session, user)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        bind_user_context(user.id, user.email)  # type: ignore[arg-type]
        logger.info("User logged in", user_id=user.id)
        return tokens

    async def refresh(self, refresh_token: str) -> RefreshResult:
        """Rotate a refresh token and mint a new access token.

        The new refresh token keeps the original expiry. The swap only succeeds
        if the presented token is still current, so of two concurrent calls
        with the same token exactly one wins; the other sees an unknown token.

        Raises:
            RefreshTokenNotFoundError: Unknown token, or lost a concurrent rotation.
            RefreshTokenExpiredError: Token is past its expiry.
            UserDisabledError: The owning account is deactivated.
        """
        token_hash = hash_token(refresh_token)

        async with self.session_factory() as session:
            try:
                token_repo = RefreshTokenRepository(session)
                db_token = await token_repo.get_by_hash(token_hash)
                if db_token is None:
                    raise RefreshTokenNotFoundError()

                if db_token.is_expired():
                    raise RefreshTokenExpiredError()
                expires_at = db_token.expires_at

                user = await UserRepository(session).get_by_id(db_token.user_id)
                if user is None:
                    raise RefreshTokenNotFoundError()
                if not user.active:
                    raise UserDisabledError()

                new_refresh_token = generate_refresh_token()
                if not await token_repo.replace_hash(token_hash, hash_token(new_refresh_token)):
                    raise RefreshTokenNotFoundError()

                # Claims reflect the account as it is now, not as it was at login
                access_token = create_access_token(user.email, user.is_admin)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        return RefreshResult(
            access_token=access_token,
            refresh_token=new_refresh_token,
            refresh_expires_at=expires_at,
        )

    async def verify_access_token(self, access_token: str) -> AccessTokenClaims:
        """Validate an access token without touching the database."""
        return decode_access_token(access_token)

    async def get_user_by_email(self, email: str) -> UserRead:
        async with self.session_factory() as session:
            user = await UserRepository(session).get_by_email(email)
        if user is None:
            raise UserNotFoundError()
        return UserRead.model_validate(user)

    async def reset_user_auth_token(self, email: str) -> None:
        """Rotate the per-account auth token."""
        async with self.session_factory() as session:
            try:
                if not await UserRepository(session).reset_auth_token_by_email(email):
                    raise UserNotFoundError()
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("Auth token reset", email=loggable_email(email))

    async def request_password_reset(self, email: str) -> Future[None] | None:
        """Create a password reset code and email it.

        Returns the delivery handle, or None when nothing was sent. Unknown and
        inactive accounts get None as well, so callers cannot probe for emails.

        Raises:
            PasswordResetRateLimitedError: A reset was requested within the cooldown.
        """
        settings = get_settings()
        cooldown = timedelta(minutes=settings.password_reset_cooldown_minutes)

        async with self.session_factory() as session:
            try:
                user = await UserRepository(session).get_by_email(email)
                if user is None or not user.active:
                    return None

                reset_repo = PasswordResetRepository(session)
                existing = await reset_repo.get_by_user_id(user.id)  # type: ignore[arg-type]
                if existing is not None and utc_now() - existing.created_at < cooldown:
                    raise PasswordResetRateLimitedError()

                reset = await reset_repo.create(user.id)  # type: ignore[arg-type]
                code = reset.code
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("Password reset requested", user_id=user.id)
        try:
            return self.email_service.send_password_reset_email(user.email, code)
        except EmailNotConfiguredError:
            logger.warning("Email not configured - password reset email not sent", user_id=user.id)
            return None

    async def reset_password(self, code: str, password: str) -> None:
        """Set a new password using a reset code.

        The code is single use. All refresh tokens of the account are revoked.

        Raises:
            ResetCodeInvalidError: Unknown or expired code.
        """
        settings = get_settings()
        expire_after = timedelta(minutes=settings.password_reset_expire_minutes)

        async with self.session_factory() as session:
            try:
                reset_repo = PasswordResetRepository(session)
                reset = await reset_repo.get_by_code(code) if code else None
                if reset is None or utc_now() - reset.created_at > expire_after:
                    raise ResetCodeInvalidError()

                user_id = reset.user_id
                await reset_repo.delete_by_user_id(user_id)
                await UserRepository(session).update_password(user_id, hash_password(password))
                await RefreshTokenRepository(session).delete_for_user(user_id)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("Password reset completed", user_id=user_id)

    async def delete_expired_tokens(self) -> int:
        """Delete expired refresh tokens. Safe to run repeatedly."""
        async with self.session_factory() as session:
            count = await RefreshTokenRepository(session).delete_expired()
            await session.commit()
        logger.info("Deleted expired refresh tokens", count=count)
        return count

    async def delete_expired_password_resets(self) -> int:
        """Delete password resets past their expiry. Safe to run repeatedly."""
        settings = get_settings()
        cutoff = utc_now() - timedelta(minutes=settings.password_reset_expire_minutes)
        async with self.session_factory() as session:
            count = await PasswordResetRepository(session).delete_created_before(cutoff)
            await session.commit()
        logger.info("Deleted expired password resets", count=count)
        return count
