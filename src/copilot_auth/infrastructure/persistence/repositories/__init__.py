"""SQLAlchemy implementations of the auth store interfaces."""

from copilot_auth.infrastructure.persistence.repositories.audit_log_repository import (
    AuditLogRepository,
)
from copilot_auth.infrastructure.persistence.repositories.email_verification_repository import (
    EmailVerificationRepository,
)
from copilot_auth.infrastructure.persistence.repositories.password_reset_repository import (
    PasswordResetRepository,
)
from copilot_auth.infrastructure.persistence.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from copilot_auth.infrastructure.persistence.repositories.user_repository import UserRepository

__all__ = [
    "AuditLogRepository",
    "EmailVerificationRepository",
    "PasswordResetRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
