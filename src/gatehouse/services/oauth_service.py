"""OAuth service - provisions local accounts for identities verified by an OAuth provider."""

from collections.abc import Mapping
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.gatehouse.core.config import get_settings
from src.gatehouse.core.exceptions import (
    ClientSecretRequiredError,
    OAuthCredentialNotFoundError,
    OAuthUserDisabledError,
    UserNotInvitedError,
)
from src.gatehouse.core.logging import get_logger, loggable_email
from src.gatehouse.core.security import NO_PASSWORD
from src.gatehouse.models import User
from src.gatehouse.repositories import (
    InvitationRepository,
    OAuthCredentialRepository,
    UserRepository,
)
from src.gatehouse.schemas.auth import OAuthCredentialRead, OAuthProvider, TokenPair
from src.gatehouse.services.domain_policy import DomainPolicy
from src.gatehouse.services.token_issuer import issue_token_pair

logger = get_logger(__name__)


class OAuthClient(Protocol):
    """Exchanges an authorization code for the user's verified email."""

    async def fetch_user_email(self, code: str, client_id: str, client_secret: str) -> str: ...


class OAuthService:
    """OAuth login and provider credential management."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clients: Mapping[OAuthProvider, OAuthClient] | None = None,
        domain_policy: DomainPolicy | None = None,
    ):
        self.session_factory = session_factory
        self.clients = dict(clients or {})
        self.domain_policy = domain_policy or DomainPolicy.from_settings()

    async def oauth(self, code: str, provider: OAuthProvider) -> TokenPair:
        """Log in with an OAuth authorization code.

        Raises:
            OAuthCredentialNotFoundError: Provider has no credential or no client.
            OAuthUserDisabledError: The matching account is deactivated.
            UserNotInvitedError: New email, no invitation and domain not allowed.
        """
        client = self.clients.get(provider)
        async with self.session_factory() as session:
            credential = await OAuthCredentialRepository(session).get_by_provider(provider.value)
        if client is None or credential is None:
            raise OAuthCredentialNotFoundError()

        email = await client.fetch_user_email(code, credential.client_id, credential.client_secret)

        async with self.session_factory() as session:
            try:
                user = await self._get_or_create_user(session, email)
                tokens = await issue_token_pair(session, user)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("User logged in via OAuth", user_id=user.id, provider=provider.value)
        return tokens

    async def get_or_create_oauth_user(self, email: str) -> tuple[int, bool]:
        """Resolve a verified email to a local account, creating it if allowed.

        Returns (user_id, is_admin).
        """
        async with self.session_factory() as session:
            try:
                user = await self._get_or_create_user(session, email)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        return user.id, user.is_admin  # type: ignore[return-value]

    async def _get_or_create_user(self, session: AsyncSession, email: str) -> User:
        """Existing account, else self-signup by domain, else the earliest invitation."""
        user_repo = UserRepository(session)

        user = await user_repo.get_by_email(email)
        if user is not None:
            if not user.active:
                raise OAuthUserDisabledError()
            return user

        if self.domain_policy.can_register_without_invitation(email):
            # No local password: password login for this account always fails
            user = await user_repo.create(email=email, password_encrypted=NO_PASSWORD, is_admin=False)
            logger.info("OAuth user created", user_id=user.id, email=loggable_email(email))
            return user

        invitation_repo = InvitationRepository(session)
        invitation = await invitation_repo.get_by_email(email)
        if invitation is None:
            raise UserNotInvitedError()

        user = await user_repo.create(email=email, password_encrypted=NO_PASSWORD, is_admin=False)
        if not await invitation_repo.delete_by_id(invitation.id):  # type: ignore[arg-type]
            raise UserNotInvitedError()

        logger.info(
            "OAuth user created from invitation",
            user_id=user.id,
            invitation_id=invitation.id,
            email=loggable_email(email),
        )
        return user

    async def read_oauth_credential(self, provider: OAuthProvider) -> OAuthCredentialRead | None:
        async with self.session_factory() as session:
            credential = await OAuthCredentialRepository(session).get_by_provider(provider.value)
        return OAuthCredentialRead.model_validate(credential) if credential else None

    async def update_oauth_credential(
        self,
        provider: OAuthProvider,
        client_id: str,
        client_secret: str | None = None,
    ) -> OAuthCredentialRead:
        """Create or update a provider's credential.

        Omitting the secret keeps the stored one.

        Raises:
            ClientSecretRequiredError: Creating a credential without a secret.
        """
        async with self.session_factory() as session:
            try:
                repo = OAuthCredentialRepository(session)
                if client_secret is None and await repo.get_by_provider(provider.value) is None:
                    raise ClientSecretRequiredError()
                credential = await repo.upsert(provider.value, client_id, client_secret)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("OAuth credential updated", provider=provider.value)
        return OAuthCredentialRead.model_validate(credential)

    async def delete_oauth_credential(self, provider: OAuthProvider) -> None:
        async with self.session_factory() as session:
            try:
                await OAuthCredentialRepository(session).delete_by_provider(provider.value)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("OAuth credential deleted", provider=provider.value)

    def oauth_callback_url(self, provider: OAuthProvider) -> str:
        """Redirect URL to register with the provider."""
        return f"{get_settings().external_url}/oauth/callback/{provider.value}"
