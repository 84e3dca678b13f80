"""Infrastructure services: token generation, email and breach lookups."""

from copilot_auth.infrastructure.services.breach_checker import BreachChecker, PwnedPasswordsClient
from copilot_auth.infrastructure.services.email_service import (
    EmailSender,
    EmailService,
    build_email_provider,
)
from copilot_auth.infrastructure.services.token_service import TokenService, token_service

__all__ = [
    "BreachChecker",
    "EmailSender",
    "EmailService",
    "PwnedPasswordsClient",
    "TokenService",
    "build_email_provider",
    "token_service",
]
