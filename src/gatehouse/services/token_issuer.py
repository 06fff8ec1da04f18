"""Issues the access/refresh token pair handed out at login, registration and OAuth."""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.gatehouse.core.config import get_settings
from src.gatehouse.core.security import create_access_token, generate_refresh_token, hash_token
from src.gatehouse.models import User, utc_now
from src.gatehouse.repositories import RefreshTokenRepository
from src.gatehouse.schemas.auth import TokenPair


async def issue_token_pair(session: AsyncSession, user: User) -> TokenPair:
    """Store a new refresh token for the user and mint an access token.

    The refresh token row is added to the session but not committed.
    """
    settings = get_settings()
    refresh_token = generate_refresh_token()
    expires_at = utc_now() + timedelta(days=settings.refresh_token_expire_days)

    await RefreshTokenRepository(session).create(
        user.id,  # type: ignore[arg-type]
        hash_token(refresh_token),
        expires_at,
    )

    access_token = create_access_token(user.email, user.is_admin)
    return TokenPair(access_token=access_token, refresh_token=refresh_token)
