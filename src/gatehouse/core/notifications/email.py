"""Email client using Resend API."""

import html
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import resend

from src.gatehouse.core.config import Settings, get_settings
from src.gatehouse.core.exceptions import EmailNotConfiguredError
from src.gatehouse.core.logging import get_logger, loggable_email

logger = get_logger(__name__)

# Thread pool for email sending; callers get the Future as a delivery handle
_email_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="email_sender")

# Shared email styles
_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_LINK_STYLE = "color: #2563eb; word-break: break-all;"
_MUTED_STYLE = "color: #666; font-size: 14px;"


class EmailService:
    """Outbound email delivery.

    ``send_*`` methods return a Future that resolves once Resend accepted the
    message. They raise EmailNotConfiguredError when no API key is set.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        executor: ThreadPoolExecutor | None = None,
    ):
        self.settings = settings or get_settings()
        self.executor = executor or _email_executor

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.resend_api_key)

    def send_invitation_email(self, to: str, code: str) -> Future[None]:
        """Send an invitation link carrying the invitation code.

        Args:
            to: Recipient email address
            code: Invitation code (included in the signup URL)
        """
        signup_url = f"{self.settings.app_url}/auth/signup?invitationCode={code}"
        return self._submit(
            to=to,
            subject=f"You've been invited to join {self.settings.app_name}",
            body=_get_invitation_email_html(self.settings.app_name, signup_url),
            email_type="invitation",
        )

    def send_password_reset_email(self, to: str, code: str) -> Future[None]:
        """Send a password reset link.

        Args:
            to: Recipient email address
            code: Password reset code (included in the reset URL)
        """
        reset_url = f"{self.settings.app_url}/auth/reset-password?code={code}"
        return self._submit(
            to=to,
            subject="Reset your password",
            body=_get_password_reset_email_html(
                reset_url, self.settings.password_reset_expire_minutes
            ),
            email_type="password_reset",
        )

    def _submit(self, to: str, subject: str, body: str, email_type: str) -> Future[None]:
        if not self.is_configured:
            raise EmailNotConfiguredError()

        params: dict[str, Any] = {
            "from": self.settings.email_from,
            "to": [to],
            "subject": subject,
            "html": body,
        }
        api_key = self.settings.resend_api_key

        def _send() -> None:
            resend.api_key = api_key
            resend.Emails.send(params)  # type: ignore[arg-type]

        future = self.executor.submit(_send)
        future.add_done_callback(lambda f: _log_delivery(f, to, email_type))
        return future


def _log_delivery(future: Future[None], to: str, email_type: str) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error(
            "Failed to send email",
            email_type=email_type,
            to=loggable_email(to),
            error=str(exc),
        )
    else:
        logger.info("Email sent", email_type=email_type, to=loggable_email(to))


def _get_invitation_email_html(app_name: str, signup_url: str) -> str:
    """Generate HTML content for invitation email."""
    safe_app_name = html.escape(app_name)
    safe_url = html.escape(signup_url, quote=True)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #2563eb; margin-bottom: 24px;">You're invited!</h1>
    <p>You have been invited to create an account on <strong>{safe_app_name}</strong>.</p>
    <p style="margin: 32px 0;">
        <a href="{safe_url}" style="{_BUTTON_STYLE}">Create Account</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{safe_url}" style="{_LINK_STYLE}">{safe_url}</a>
    </p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        The invitation can only be used with this email address.
    </p>
</body>
</html>"""


def _get_password_reset_email_html(reset_url: str, expire_minutes: int) -> str:
    """Generate HTML content for password reset email."""
    safe_url = html.escape(reset_url, quote=True)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #2563eb; margin-bottom: 24px;">Reset your password</h1>
    <p>We received a request to reset the password for your account.</p>
    <p style="margin: 32px 0;">
        <a href="{safe_url}" style="{_BUTTON_STYLE}">Reset Password</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{safe_url}" style="{_LINK_STYLE}">{safe_url}</a>
    </p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This link will expire in {expire_minutes} minutes. If you didn't request a reset,
        you can safely ignore this email.
    </p>
</body>
</html>"""
