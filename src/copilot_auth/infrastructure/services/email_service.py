"""Email service for authentication notifications.

Renders the built-in templates and hands the result to the configured
provider. Delivery is attempted once; the auth service treats every send as
fire-and-forget and absorbs failures.
"""

from typing import Protocol

from copilot_auth.core.config import Settings
from copilot_auth.core.logging import get_logger
from copilot_auth.infrastructure.services.email import templates
from copilot_auth.infrastructure.services.email.console_provider import ConsoleEmailProvider
from copilot_auth.infrastructure.services.email.email_provider import EmailProvider, OutgoingEmail
from copilot_auth.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from copilot_auth.infrastructure.services.email.template_renderer import TemplateRenderer

logger = get_logger(__name__)


class EmailSender(Protocol):
    """Outbound email operations used by the auth flows."""

    async def send_verification_email(self, email: str, raw_token: str) -> None: ...

    async def send_password_reset_email(self, email: str, raw_token: str) -> None: ...

    async def send_password_changed_email(self, email: str) -> None: ...


def build_email_provider(settings: Settings) -> EmailProvider:
    """Select the email provider configured in settings."""
    if settings.email_provider == "smtp":
        return SMTPProvider(SMTPSettings.from_settings(settings))
    return ConsoleEmailProvider()


class EmailService:
    """Sends verification, reset and password-changed emails."""

    def __init__(self, settings: Settings, provider: EmailProvider | None = None) -> None:
        """Initialize the email service.

        Args:
            settings: Application settings (sender identity, link base URL,
                token lifetimes).
            provider: Delivery provider. Defaults to the one selected by
                ``settings.email_provider``.
        """
        self.settings = settings
        self.provider = provider or build_email_provider(settings)
        self._renderer = TemplateRenderer()

    def _link(self, path: str, token: str) -> str:
        return f"{self.settings.app_url.rstrip('/')}/{path}?token={token}"

    async def _send(self, to: str, template: templates.EmailTemplate, variables: dict[str, str]) -> None:
        subject, html_body, text_body = self._renderer.render(
            template, {"app_name": self.settings.app_name, **variables}
        )
        message = OutgoingEmail(
            to=to,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            sender=f"{self.settings.email_from_name} <{self.settings.email_from_address}>",
        )
        if not await self.provider.send(message):
            raise RuntimeError(f"Email provider did not accept message: {subject}")

    async def send_verification_email(self, email: str, raw_token: str) -> None:
        """Send the email verification link.

        Args:
            email: Recipient address.
            raw_token: The plaintext verification token.
        """
        await self._send(
            email,
            templates.EMAIL_VERIFICATION,
            {
                "verification_url": self._link("verify-email", raw_token),
                "expires_in_hours": str(self.settings.verification_token_expiry // 3600),
            },
        )
        logger.info("Verification email sent", email=email)

    async def send_password_reset_email(self, email: str, raw_token: str) -> None:
        """Send the password reset link.

        Args:
            email: Recipient address.
            raw_token: The plaintext reset token.
        """
        await self._send(
            email,
            templates.PASSWORD_RESET,
            {
                "reset_url": self._link("reset-password", raw_token),
                "expires_in_minutes": str(self.settings.password_reset_token_expiry // 60),
            },
        )
        logger.info("Password reset email sent", email=email)

    async def send_password_changed_email(self, email: str) -> None:
        await self._send(email, templates.PASSWORD_CHANGED, {"email": email})
        logger.info("Password changed email sent", email=email)
