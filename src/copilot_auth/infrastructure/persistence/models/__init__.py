"""SQLAlchemy models for the auth service tables.

All models inherit from the Base class defined in database.py.
"""

from copilot_auth.infrastructure.persistence.models.audit_log import AuditLogModel
from copilot_auth.infrastructure.persistence.models.email_verification import (
    EmailVerificationTokenModel,
)
from copilot_auth.infrastructure.persistence.models.organization_membership import (
    OrganizationMembershipModel,
)
from copilot_auth.infrastructure.persistence.models.password_reset import PasswordResetTokenModel
from copilot_auth.infrastructure.persistence.models.refresh_token import RefreshTokenModel
from copilot_auth.infrastructure.persistence.models.user import UserModel

__all__ = [
    "AuditLogModel",
    "EmailVerificationTokenModel",
    "OrganizationMembershipModel",
    "PasswordResetTokenModel",
    "RefreshTokenModel",
    "UserModel",
]
