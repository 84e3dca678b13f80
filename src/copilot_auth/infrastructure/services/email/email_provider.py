"""Delivery interface shared by the email providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class OutgoingEmail:
    """A fully rendered message ready for delivery.

    Attributes:
        to: Recipient address.
        subject: Subject line.
        html_body: HTML alternative.
        text_body: Plain text alternative.
        sender: ``From`` header, e.g. ``Copilot <no-reply@example.com>``.
    """

    to: str
    subject: str
    html_body: str
    text_body: str
    sender: str


class EmailProvider(ABC):
    """Delivers rendered messages."""

    @abstractmethod
    async def send(self, message: OutgoingEmail) -> bool:
        """Deliver one message.

        Returns:
            True if the provider accepted the message.
        """
