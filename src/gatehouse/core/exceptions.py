"""Domain error hierarchy.

Every error raised by the services derives from ``GatehouseError`` and carries
an ``ErrorKind``. Transports match on the class (or on ``kind``) and map it to
their own response; ``kind.status_code`` is a hint for HTTP transports.
"""

from enum import Enum
from http import HTTPStatus


class ErrorKind(str, Enum):
    """Externally observable error categories."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"
    FORBIDDEN = "forbidden"
    DISABLED = "disabled"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.CONFLICT: HTTPStatus.CONFLICT,
    ErrorKind.INVALID_INPUT: HTTPStatus.BAD_REQUEST,
    ErrorKind.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ErrorKind.DISABLED: HTTPStatus.FORBIDDEN,
    ErrorKind.RATE_LIMITED: HTTPStatus.TOO_MANY_REQUESTS,
    ErrorKind.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR,
}


class GatehouseError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Unknown error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Not found ---


class NotFoundError(GatehouseError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    default_message = "User not found"


class RefreshTokenNotFoundError(NotFoundError):
    default_message = "Invalid refresh token"


class OAuthCredentialNotFoundError(NotFoundError):
    default_message = "OAuth provider is not configured"


# --- Conflict ---


class EmailTakenError(GatehouseError):
    kind = ErrorKind.CONFLICT
    default_message = "Email is already registered"


# --- Invalid input ---


class InvalidInputError(GatehouseError):
    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid input"


class InvitationInvalidError(InvalidInputError):
    default_message = "Invitation code is not valid"


class InvalidCredentialsError(InvalidInputError):
    """Login failure. Subclasses share one message so callers cannot tell them apart."""

    default_message = "Invalid email or password"


class UnknownEmailError(InvalidCredentialsError):
    pass


class BadPasswordError(InvalidCredentialsError):
    pass


class RefreshTokenExpiredError(InvalidInputError):
    default_message = "Expired refresh token"


class ResetCodeInvalidError(InvalidInputError):
    default_message = "Invalid code"


class InvalidTokenError(InvalidInputError):
    default_message = "Invalid or expired token"


class LicenseCorruptError(InvalidInputError):
    default_message = "License is not valid"

    def __init__(self, message: str | None = None, reason: str | None = None):
        super().__init__(message)
        self.reason = reason


class InvalidCursorError(InvalidInputError):
    default_message = "Invalid cursor"


class ClientSecretRequiredError(InvalidInputError):
    default_message = "Client secret is required when creating an OAuth credential"


# --- Forbidden ---


class ForbiddenError(GatehouseError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class OwnerImmutableError(ForbiddenError):
    default_message = "The owner's admin and active status cannot be changed"


class DomainNotAllowedError(ForbiddenError):
    default_message = (
        "Your email does not belong to any known authentication domains. "
        "Please contact the administrator for assistance."
    )


class LicenseInvalidError(ForbiddenError):
    default_message = "This feature requires enterprise license"


class LicenseExpiredError(ForbiddenError):
    default_message = "License is expired"


class SeatsExceededError(ForbiddenError):
    default_message = "License doesn't contain sufficient number of seats"


class UserNotInvitedError(ForbiddenError):
    default_message = "User is not invited, please contact the administrator"


# --- Disabled ---


class UserDisabledError(GatehouseError):
    kind = ErrorKind.DISABLED
    default_message = "User is disabled"


class OAuthUserDisabledError(UserDisabledError):
    pass


# --- Rate limited ---


class PasswordResetRateLimitedError(GatehouseError):
    kind = ErrorKind.RATE_LIMITED
    default_message = "A password reset has been requested recently, please try again later"


# --- Internal ---


class InternalError(GatehouseError):
    kind = ErrorKind.INTERNAL
    default_message = "Unknown error"


class HashingError(InternalError):
    pass


class TokenEncodingError(InternalError):
    pass


class EmailNotConfiguredError(InternalError):
    default_message = "Email transport is not configured"
