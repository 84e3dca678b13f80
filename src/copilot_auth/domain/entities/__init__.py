"""Domain entities for the auth subsystem."""

from copilot_auth.domain.entities.audit_log import AuditLogEntry
from copilot_auth.domain.entities.client_info import ClientInfo
from copilot_auth.domain.entities.email_verification import EmailVerificationToken
from copilot_auth.domain.entities.password_reset import PasswordResetToken
from copilot_auth.domain.entities.refresh_token import RefreshToken
from copilot_auth.domain.entities.user import (
    OrganizationMembership,
    OrgRole,
    PlatformRole,
    User,
    UserStatus,
    normalize_email,
)

__all__ = [
    "AuditLogEntry",
    "ClientInfo",
    "EmailVerificationToken",
    "OrganizationMembership",
    "OrgRole",
    "PasswordResetToken",
    "PlatformRole",
    "RefreshToken",
    "User",
    "UserStatus",
    "normalize_email",
]
