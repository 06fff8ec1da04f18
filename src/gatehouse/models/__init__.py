"""Model exports.

Import from here: `from src.gatehouse.models import User, Invitation`
"""

from src.gatehouse.models.auth import Invitation, PasswordReset, RefreshToken
from src.gatehouse.models.base import utc_now
from src.gatehouse.models.settings import LICENSE_ROW_ID, EnterpriseLicense, OAuthCredential
from src.gatehouse.models.user import User

__all__ = [
    "LICENSE_ROW_ID",
    "EnterpriseLicense",
    "Invitation",
    "OAuthCredential",
    "PasswordReset",
    "RefreshToken",
    "User",
    "utc_now",
]
