"""Registration service - invitation-gated signup and account administration.

The first account created while no admin exists becomes the owner: admin, and
permanently so. Every later signup needs an invitation issued for its exact
email address.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.gatehouse.core.exceptions import (
    DomainNotAllowedError,
    EmailNotConfiguredError,
    EmailTakenError,
    InvitationInvalidError,
    LicenseInvalidError,
    NotFoundError,
    OwnerImmutableError,
    UserNotFoundError,
)
from src.gatehouse.core.logging import get_logger, loggable_email
from src.gatehouse.core.notifications import EmailService
from src.gatehouse.core.security import hash_password
from src.gatehouse.repositories import InvitationRepository, UserRepository
from src.gatehouse.schemas.auth import TokenPair
from src.gatehouse.schemas.invite import InvitationRead
from src.gatehouse.schemas.pagination import Page, PageRequest
from src.gatehouse.schemas.user import UserRead
from src.gatehouse.services.domain_policy import DomainPolicy
from src.gatehouse.services.license_service import LicenseService
from src.gatehouse.services.token_issuer import issue_token_pair

logger = get_logger(__name__)


class RegistrationService:
    """Service for account registration, invitations and role management."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        license_service: LicenseService,
        email_service: EmailService,
        domain_policy: DomainPolicy | None = None,
    ):
        self.session_factory = session_factory
        self.license_service = license_service
        self.email_service = email_service
        self.domain_policy = domain_policy or DomainPolicy.from_settings()

    async def is_admin_initialized(self) -> bool:
        """True once at least one admin account exists."""
        async with self.session_factory() as session:
            return await UserRepository(session).admin_exists()

    def allow_self_signup(self) -> bool:
        """Whether the login page should offer signup by emailed invitation."""
        policy = self.domain_policy
        return self.email_service.is_configured and (
            bool(policy.allowed_domains) or policy.allow_unlisted
        )

    async def register(
        self,
        email: str,
        password: str,
        invitation_code: str | None = None,
    ) -> TokenPair:
        """Create an account and return its first token pair.

        1. No admin yet: the invitation is ignored, the account becomes admin and owner
        2. Otherwise the code must name an invitation for exactly this email
        3. The email must be free (checked before hashing)
        4. Account insert and invitation delete commit together

        Raises:
            InvitationInvalidError: Code missing, unknown, for another email, or
                consumed concurrently.
            EmailTakenError: An account with this email exists.
            HashingError: Password hashing failed.
        """
        async with self.session_factory() as session:
            try:
                user_repo = UserRepository(session)
                invitation_repo = InvitationRepository(session)

                admin_initialized = await user_repo.admin_exists()

                invitation = None
                if admin_initialized:
                    if invitation_code:
                        invitation = await invitation_repo.get_by_code(invitation_code)
                    if invitation is None or invitation.email != email:
                        raise InvitationInvalidError()

                if await user_repo.exists_by_email(email):
                    raise EmailTakenError()

                user = await user_repo.create(
                    email=email,
                    password_encrypted=hash_password(password),
                    is_admin=not admin_initialized,
                    is_owner=not admin_initialized,
                )

                if invitation is not None and not await invitation_repo.delete_by_id(
                    invitation.id  # type: ignore[arg-type]
                ):
                    raise InvitationInvalidError()

                tokens = await issue_token_pair(session, user)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info(
            "User registered",
            user_id=user.id,
            is_owner=user.is_owner,
            email=loggable_email(email),
        )
        return tokens

    async def create_invitation(self, email: str) -> InvitationRead:
        """Create an invitation and email it when possible.

        Raises:
            LicenseInvalidError: No valid license is installed.
        """
        if not await self.license_service.is_license_valid():
            raise LicenseInvalidError()

        async with self.session_factory() as session:
            try:
                invitation = await InvitationRepository(session).create(email)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("Invitation created", invitation_id=invitation.id, email=loggable_email(email))

        # Delivery problems never fail the invitation itself
        try:
            self.email_service.send_invitation_email(email, invitation.code)
        except EmailNotConfiguredError:
            logger.info("Email not configured - invitation email not sent", invitation_id=invitation.id)
        except Exception as e:
            logger.error(
                "Failed to send invitation email",
                invitation_id=invitation.id,
                error=str(e),
            )

        return InvitationRead.model_validate(invitation)

    async def request_invitation_email(self, email: str) -> InvitationRead:
        """Self-service invitation for emails the domain policy accepts.

        Raises:
            DomainNotAllowedError: The email's domain is not allowed to self-register.
            LicenseInvalidError: No valid license is installed.
        """
        if not self.domain_policy.can_register_without_invitation(email):
            raise DomainNotAllowedError()
        return await self.create_invitation(email)

    async def delete_invitation(self, invitation_id: int) -> int:
        """Delete a pending invitation and return its id.

        Raises:
            NotFoundError: No such invitation.
        """
        async with self.session_factory() as session:
            try:
                if not await InvitationRepository(session).delete_by_id(invitation_id):
                    raise NotFoundError("Invitation not found")
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("Invitation deleted", invitation_id=invitation_id)
        return invitation_id

    async def list_invitations(self, page: PageRequest) -> Page[InvitationRead]:
        async with self.session_factory() as session:
            result = await InvitationRepository(session).list_paginated(page)
        return Page(
            items=[InvitationRead.model_validate(i) for i in result.items],
            start_cursor=result.start_cursor,
            end_cursor=result.end_cursor,
            has_next_page=result.has_next_page,
            has_previous_page=result.has_previous_page,
        )

    async def list_users(self, page: PageRequest) -> Page[UserRead]:
        async with self.session_factory() as session:
            result = await UserRepository(session).list_paginated(page)
        return Page(
            items=[UserRead.model_validate(u) for u in result.items],
            start_cursor=result.start_cursor,
            end_cursor=result.end_cursor,
            has_next_page=result.has_next_page,
            has_previous_page=result.has_previous_page,
        )

    async def update_role(self, user_id: int, is_admin: bool) -> UserRead:
        """Grant or revoke admin rights.

        Raises:
            LicenseInvalidError: No valid license is installed.
            UserNotFoundError: No such account.
            OwnerImmutableError: Attempt to demote the owner.
        """
        if not await self.license_service.is_license_valid():
            raise LicenseInvalidError()

        async with self.session_factory() as session:
            try:
                user_repo = UserRepository(session)
                user = await user_repo.get_by_id(user_id)
                if user is None:
                    raise UserNotFoundError()
                if user.is_owner and not is_admin:
                    raise OwnerImmutableError()

                user = await user_repo.update_role(user, is_admin)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("User role updated", user_id=user_id, is_admin=is_admin)
        return UserRead.model_validate(user)

    async def update_active(self, user_id: int, active: bool) -> UserRead:
        """Activate or deactivate an account.

        Raises:
            UserNotFoundError: No such account.
            OwnerImmutableError: Attempt to deactivate the owner.
        """
        async with self.session_factory() as session:
            try:
                user_repo = UserRepository(session)
                user = await user_repo.get_by_id(user_id)
                if user is None:
                    raise UserNotFoundError()
                if user.is_owner and not active:
                    raise OwnerImmutableError()

                user = await user_repo.update_active(user, active)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info("User active status updated", user_id=user_id, active=active)
        return UserRead.model_validate(user)
