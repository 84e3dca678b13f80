"""Request and response schemas for the HTTP API."""

from copilot_auth.infrastructure.api.schemas.auth_schemas import (
    AuthResponse,
    EmailRequest,
    ErrorBody,
    ErrorResponse,
    LoginRequest,
    LogoutAllResponse,
    MeResponse,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SessionResponse,
    TokenResponse,
    UserResponse,
    VerifyEmailRequest,
    VerifyEmailResponse,
)

__all__ = [
    "AuthResponse",
    "EmailRequest",
    "ErrorBody",
    "ErrorResponse",
    "LoginRequest",
    "LogoutAllResponse",
    "MeResponse",
    "MessageResponse",
    "RefreshRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "SessionResponse",
    "TokenResponse",
    "UserResponse",
    "VerifyEmailRequest",
    "VerifyEmailResponse",
]
