"""SMTP delivery through aiosmtplib."""

from email.message import EmailMessage

import aiosmtplib
from pydantic import BaseModel

from copilot_auth.core.config import Settings
from copilot_auth.core.logging import get_logger
from copilot_auth.infrastructure.services.email.email_provider import EmailProvider, OutgoingEmail

logger = get_logger(__name__)


class SMTPSettings(BaseModel):
    """Connection options for :class:`SMTPProvider`.

    ``use_ssl`` opens an implicitly encrypted connection (usually port 465);
    ``use_tls`` upgrades a plain connection with STARTTLS.
    """

    host: str
    port: int = 587
    username: str | None = None
    password: str | None = None
    use_tls: bool = True
    use_ssl: bool = False
    timeout: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> "SMTPSettings":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            use_ssl=settings.smtp_use_ssl,
            timeout=settings.smtp_timeout,
        )


def build_mime_message(message: OutgoingEmail) -> EmailMessage:
    """Build a multipart/alternative message with text first, HTML second."""
    mime = EmailMessage()
    mime["Subject"] = message.subject
    mime["From"] = message.sender
    mime["To"] = message.to
    mime.set_content(message.text_body)
    mime.add_alternative(message.html_body, subtype="html")
    return mime


class SMTPProvider(EmailProvider):
    """Sends each message over a fresh SMTP connection.

    One attempt is made per message. Failures are logged and re-raised; the
    caller decides whether they matter.
    """

    def __init__(self, settings: SMTPSettings) -> None:
        self.settings = settings

    async def send(self, message: OutgoingEmail) -> bool:
        """Deliver a message.

        Raises:
            aiosmtplib.SMTPException: If connecting, authenticating or
                sending fails.
        """
        options = self.settings
        try:
            async with aiosmtplib.SMTP(
                hostname=options.host,
                port=options.port,
                use_tls=options.use_ssl,
                start_tls=options.use_tls and not options.use_ssl,
                timeout=options.timeout,
            ) as smtp:
                if options.username and options.password:
                    await smtp.login(options.username, options.password)
                await smtp.send_message(build_mime_message(message))
        except aiosmtplib.SMTPException as e:
            logger.error("SMTP delivery failed", host=options.host, to=message.to, error=str(e))
            raise
        return True
