"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import UserFactory, InvitationFactory, ...
"""

from tests.factories.auth import (
    InvitationFactory,
    PasswordResetFactory,
    RefreshTokenFactory,
)
from tests.factories.base import BaseFactory, utc_now
from tests.factories.user import DEFAULT_TEST_PASSWORD, UserFactory

__all__ = [
    # Base
    "BaseFactory",
    "utc_now",
    # User
    "UserFactory",
    "DEFAULT_TEST_PASSWORD",
    # Auth
    "InvitationFactory",
    "PasswordResetFactory",
    "RefreshTokenFactory",
]
