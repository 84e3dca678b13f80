"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from copilot_auth.domain.entities import PlatformRole, UserStatus


class RegisterRequest(BaseModel):
    """Request body for account registration."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
    name: str | None = Field(None, max_length=255, description="Display name")


class LoginRequest(BaseModel):
    """Request body for email/password login."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class RefreshRequest(BaseModel):
    """Request body for token refresh and logout."""

    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Token from the verification email")


class EmailRequest(BaseModel):
    """Request body carrying only an email address."""

    email: EmailStr = Field(..., description="Account email address")


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Token from the reset email")
    password: str = Field(..., min_length=1, description="New password")


class UserResponse(BaseModel):
    """User information in auth responses. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")
    name: str | None = Field(None, description="Display name")
    platform_role: PlatformRole = Field(..., description="Platform-wide role")
    status: UserStatus = Field(..., description="Account status")
    email_verified: bool = Field(..., description="Whether the email is verified")
    created_at: datetime = Field(..., description="When the user was created")
    last_login_at: datetime | None = Field(None, description="Last successful login")


class TokenResponse(BaseModel):
    """Response for a successful token refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field("Bearer", description="Authorization scheme")
    expires_in: int = Field(..., description="Access token expiration time in seconds")


class AuthResponse(TokenResponse):
    """Response for a successful login."""

    user: UserResponse = Field(..., description="User information")


class MessageResponse(BaseModel):
    message: str


class VerifyEmailResponse(BaseModel):
    message: str
    user: UserResponse


class LogoutAllResponse(BaseModel):
    message: str
    sessions_revoked: int = Field(..., description="Number of sessions revoked")


class MeResponse(BaseModel):
    user: UserResponse


class SessionResponse(BaseModel):
    """An active session (refresh token) of the current user."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Session ID")
    device_info: str | None = Field(None, description="Client description at sign-in")
    ip_address: str | None = Field(None, description="Client IP at sign-in")
    created_at: datetime = Field(..., description="When the session started")
    expires_at: datetime = Field(..., description="When the session expires")


class ErrorBody(BaseModel):
    code: str = Field(..., description="Stable machine-readable error code")
    message: str = Field(..., description="Generic human-readable message")
    details: list[str] | None = Field(None, description="Itemized reasons, when available")


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint."""

    error: ErrorBody
