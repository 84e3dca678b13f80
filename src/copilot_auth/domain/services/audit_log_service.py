"""Best-effort security audit logging.

Audit writes must never fail the operation they describe. The service is
only called at points where no business change is pending on the session,
so its own commit or rollback cannot affect that operation.
"""

from enum import Enum
from typing import Any

from copilot_auth.core.logging import get_logger
from copilot_auth.domain.entities import AuditLogEntry, ClientInfo
from copilot_auth.domain.repositories import AuditLogRepositoryProtocol, UnitOfWork

logger = get_logger(__name__)


class AuditAction(str, Enum):
    """Audit event names, ``auth.<operation>.<outcome>``."""

    REGISTER_SUCCESS = "auth.register.success"
    REGISTER_EMAIL_EXISTS = "auth.register.email_exists"

    LOGIN_SUCCESS = "auth.login.success"
    LOGIN_USER_NOT_FOUND = "auth.login.user_not_found"
    LOGIN_NO_PASSWORD = "auth.login.no_password"
    LOGIN_INVALID_PASSWORD = "auth.login.invalid_password"
    LOGIN_SUSPENDED = "auth.login.suspended"
    LOGIN_DELETED = "auth.login.deleted"
    LOGIN_NOT_VERIFIED = "auth.login.not_verified"

    REFRESH_SUCCESS = "auth.refresh.success"
    REFRESH_TOKEN_NOT_FOUND = "auth.refresh.token_not_found"
    REFRESH_REVOKED_TOKEN_USED = "auth.refresh.revoked_token_used"
    REFRESH_EXPIRED = "auth.refresh.expired"

    LOGOUT_SUCCESS = "auth.logout.success"
    LOGOUT_ALL_SUCCESS = "auth.logout_all.success"
    SESSION_REVOKED = "auth.session.revoked"

    VERIFY_EMAIL_SUCCESS = "auth.verify_email.success"
    VERIFY_EMAIL_INVALID_TOKEN = "auth.verify_email.invalid_token"
    VERIFY_EMAIL_EXPIRED = "auth.verify_email.expired"
    VERIFY_EMAIL_ALREADY_VERIFIED = "auth.verify_email.already_verified"
    RESEND_VERIFICATION_SUCCESS = "auth.resend_verification.success"

    PASSWORD_RESET_REQUESTED = "auth.password_reset.requested"
    PASSWORD_RESET_EMAIL_NOT_FOUND = "auth.password_reset.email_not_found"
    PASSWORD_RESET_DELETED_ACCOUNT = "auth.password_reset.deleted_account"
    PASSWORD_RESET_INVALID_TOKEN = "auth.password_reset.invalid_token"
    PASSWORD_RESET_EXPIRED = "auth.password_reset.expired"
    PASSWORD_RESET_WEAK_PASSWORD = "auth.password_reset.weak_password"
    PASSWORD_RESET_SUCCESS = "auth.password_reset.success"


class AuditLogService:
    """Appends audit entries and absorbs any failure to do so."""

    def __init__(self, session: UnitOfWork, audit_repo: AuditLogRepositoryProtocol) -> None:
        """Initialize the audit log service.

        Args:
            session: Transaction boundary for the audit write.
            audit_repo: Repository the entries are appended to.
        """
        self.session = session
        self.audit_repo = audit_repo

    async def log(
        self,
        action: AuditAction | str,
        user_id: str | None = None,
        client: ClientInfo | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """Record a security event.

        Args:
            action: Event name.
            user_id: Subject of the event, if known.
            client: Caller's IP address and user agent.
            metadata: Extra details. Must not contain secrets.

        Returns:
            True if the entry was stored, False if the write failed.
        """
        action_name = action.value if isinstance(action, AuditAction) else action
        entry = AuditLogEntry(
            action=action_name,
            user_id=user_id,
            ip_address=client.ip_address if client else None,
            user_agent=client.user_agent if client else None,
            metadata=metadata or {},
        )
        try:
            await self.audit_repo.append(entry)
            await self.session.commit()
        except Exception as e:
            logger.error("Failed to write audit log entry", action=action_name, error=str(e))
            try:
                await self.session.rollback()
            except Exception as rollback_error:
                logger.error(
                    "Rollback after audit failure failed",
                    action=action_name,
                    error=str(rollback_error),
                )
            return False
        return True
