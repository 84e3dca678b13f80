"""Domain services for the auth subsystem."""

from copilot_auth.domain.services.audit_log_service import AuditAction, AuditLogService
from copilot_auth.domain.services.auth_service import AuthService, AuthTokens
from copilot_auth.domain.services.password_validator import (
    PasswordValidationError,
    PasswordValidator,
)

__all__ = [
    "AuditAction",
    "AuditLogService",
    "AuthService",
    "AuthTokens",
    "PasswordValidationError",
    "PasswordValidator",
]
