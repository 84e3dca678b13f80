"""Console email provider for development.

Writes outgoing messages to the structured log instead of delivering them.
"""

from copilot_auth.core.logging import get_logger
from copilot_auth.infrastructure.services.email.email_provider import EmailProvider, OutgoingEmail

logger = get_logger(__name__)


class ConsoleEmailProvider(EmailProvider):
    """Logs emails instead of sending them."""

    async def send(self, message: OutgoingEmail) -> bool:
        logger.info(
            "Email (console provider)",
            to=message.to,
            subject=message.subject,
            sender=message.sender,
            body=message.text_body,
        )
        return True
