"""License certificate validation.

Certificates are RS512-signed JWTs issued outside this service. Only the
public half of the signing key is ever available here.
"""

from enum import Enum
from pathlib import Path

from jose import jws
from jose.exceptions import JWSError
from pydantic import ValidationError

from src.gatehouse.schemas.license import LicenseClaims

LICENSE_ALGORITHM = "RS512"


class LicenseErrorKind(str, Enum):
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    INVALID_ISSUER = "invalid_issuer"
    MISSING_REQUIRED_CLAIM = "missing_required_claim"
    CORRUPT_TIMESTAMP = "corrupt_timestamp"


class LicenseValidationError(Exception):
    def __init__(self, kind: LicenseErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


def load_public_key(path: Path) -> str:
    """Read a PEM-encoded public key from disk."""
    return path.read_text()


class LicenseValidator:
    """Verifies license certificates against a fixed public key and issuer."""

    def __init__(self, public_key: str, issuer: str):
        self.public_key = public_key
        self.issuer = issuer

    def validate(self, certificate: str) -> LicenseClaims:
        """Verify the certificate signature and decode its claims.

        Expiry is deliberately not checked here; an expired license still
        decodes and is reported through its status.

        Raises:
            LicenseValidationError: With the kind of failure.
        """
        try:
            header = jws.get_unverified_header(certificate)
        except JWSError as e:
            raise LicenseValidationError(LicenseErrorKind.MALFORMED, str(e)) from e

        if header.get("alg") != LICENSE_ALGORITHM:
            raise LicenseValidationError(
                LicenseErrorKind.INVALID_SIGNATURE, f"unexpected algorithm {header.get('alg')}"
            )

        try:
            payload = jws.verify(certificate, self.public_key, algorithms=[LICENSE_ALGORITHM])
        except JWSError as e:
            raise LicenseValidationError(LicenseErrorKind.INVALID_SIGNATURE, str(e)) from e

        # Missing fields and JSON errors are all reported as a missing claim
        try:
            claims = LicenseClaims.model_validate_json(payload)
        except ValidationError as e:
            raise LicenseValidationError(
                LicenseErrorKind.MISSING_REQUIRED_CLAIM, str(e.errors()[0]["loc"])
            ) from e

        if claims.iss != self.issuer:
            raise LicenseValidationError(LicenseErrorKind.INVALID_ISSUER, claims.iss)

        try:
            claims.issued_at
            claims.expires_at
        except (OverflowError, OSError, ValueError) as e:
            raise LicenseValidationError(LicenseErrorKind.CORRUPT_TIMESTAMP, str(e)) from e

        return claims
