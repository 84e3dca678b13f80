"""Email delivery providers and template rendering."""

from copilot_auth.infrastructure.services.email.console_provider import ConsoleEmailProvider
from copilot_auth.infrastructure.services.email.email_provider import EmailProvider, OutgoingEmail
from copilot_auth.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from copilot_auth.infrastructure.services.email.template_renderer import TemplateRenderer

__all__ = [
    "ConsoleEmailProvider",
    "EmailProvider",
    "OutgoingEmail",
    "SMTPProvider",
    "SMTPSettings",
    "TemplateRenderer",
]
