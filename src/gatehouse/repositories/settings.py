"""Repositories for server-wide settings: license and OAuth credentials."""

from sqlalchemy import delete
from sqlmodel import select

from src.gatehouse.models import LICENSE_ROW_ID, EnterpriseLicense, OAuthCredential, utc_now
from src.gatehouse.repositories.base import BaseRepository


class LicenseRepository(BaseRepository[EnterpriseLicense]):
    """Stores the single accepted license certificate."""

    model = EnterpriseLicense

    async def read_certificate(self) -> str | None:
        row = await self.get_by_id(LICENSE_ROW_ID)
        return row.certificate if row else None

    async def update_certificate(self, certificate: str) -> None:
        row = await self.get_by_id(LICENSE_ROW_ID)
        if row is None:
            row = EnterpriseLicense(id=LICENSE_ROW_ID, certificate=certificate)
        else:
            row.certificate = certificate
            row.updated_at = utc_now()
        self.add(row)
        await self.session.flush()


class OAuthCredentialRepository(BaseRepository[OAuthCredential]):
    """OAuth client credentials, one row per provider."""

    model = OAuthCredential

    async def get_by_provider(self, provider: str) -> OAuthCredential | None:
        result = await self.session.execute(
            select(OAuthCredential).where(OAuthCredential.provider == provider)
        )
        return result.scalar_one_or_none()

    async def delete_by_provider(self, provider: str) -> int:
        result = await self.session.execute(
            delete(OAuthCredential).where(OAuthCredential.provider == provider)  # type: ignore[arg-type]
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def upsert(self, provider: str, client_id: str, client_secret: str | None) -> OAuthCredential:
        """Create or update the provider's credential.

        A None secret keeps the stored one. Callers must supply a secret on create.
        """
        credential = await self.get_by_provider(provider)
        if credential is None:
            credential = OAuthCredential(
                provider=provider,
                client_id=client_id,
                client_secret=client_secret or "",
            )
        else:
            credential.client_id = client_id
            if client_secret is not None:
                credential.client_secret = client_secret
            credential.updated_at = utc_now()
        self.add(credential)
        await self.session.flush()
        return credential
