"""Authentication error taxonomy.

Every failure an auth operation can report to a caller is one member of the
closed :class:`AuthErrorCode` enum. Operations raise a single
:class:`AuthError` type carrying the code; the HTTP layer owns the mapping
from code to status.
"""

from collections.abc import Sequence
from enum import Enum


class AuthErrorCode(str, Enum):
    """Stable, client-visible error kinds."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_EXISTS = "EMAIL_EXISTS"
    ACCOUNT_SUSPENDED = "ACCOUNT_SUSPENDED"
    ACCOUNT_DELETED = "ACCOUNT_DELETED"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_REVOKED = "TOKEN_REVOKED"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    VERIFICATION_EXPIRED = "VERIFICATION_EXPIRED"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    RATE_LIMITED = "RATE_LIMITED"


# Generic messages only: nothing here may say which check failed.
AUTH_ERROR_MESSAGES: dict[AuthErrorCode, str] = {
    AuthErrorCode.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorCode.EMAIL_EXISTS: "An account with this email already exists",
    AuthErrorCode.ACCOUNT_SUSPENDED: "This account has been suspended",
    AuthErrorCode.ACCOUNT_DELETED: "This account has been deleted",
    AuthErrorCode.EMAIL_NOT_VERIFIED: "Please verify your email address before logging in",
    AuthErrorCode.INVALID_TOKEN: "Invalid or expired token",
    AuthErrorCode.TOKEN_REVOKED: "Token has been revoked",
    AuthErrorCode.WEAK_PASSWORD: "Password does not meet security requirements",
    AuthErrorCode.VERIFICATION_EXPIRED: "This link has expired. Please request a new one",
    AuthErrorCode.ALREADY_VERIFIED: "Email address is already verified",
    AuthErrorCode.RATE_LIMITED: "Too many requests. Please try again later",
}


class AuthError(Exception):
    """Raised by auth operations for any expected, client-visible failure.

    Attributes:
        code: The error kind.
        message: Generic human-readable message for the kind.
        details: Optional itemized reasons (used for WEAK_PASSWORD).
    """

    def __init__(self, code: AuthErrorCode, details: Sequence[str] = ()) -> None:
        self.code = code
        self.message = AUTH_ERROR_MESSAGES[code]
        self.details = list(details)
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"AuthError(code={self.code.value!r}, details={self.details!r})"
