"""Authentication API routes.

Provides endpoints for registration, login, token refresh, logout, email
verification, password reset and session management.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from copilot_auth.core.logging import get_logger
from copilot_auth.domain.exceptions import AuthError, AuthErrorCode
from copilot_auth.infrastructure.api.dependencies import (
    AuthenticatedUser,
    AuthServiceDep,
    ClientInfoDep,
)
from copilot_auth.infrastructure.api.middleware.rate_limit import (
    GENERAL_POLICY,
    LOGIN_POLICY,
    PASSWORD_RESET_POLICY,
    REFRESH_POLICY,
    REGISTER_POLICY,
    RESEND_VERIFICATION_POLICY,
    VERIFY_EMAIL_POLICY,
    rate_limit,
)
from copilot_auth.infrastructure.api.schemas import (
    AuthResponse,
    EmailRequest,
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

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(rate_limit(GENERAL_POLICY))])

REGISTER_MESSAGE = "Registration successful. Please check your email to verify your account."
RESEND_MESSAGE = "If an unverified account exists for this email, a new verification link has been sent."
FORGOT_PASSWORD_MESSAGE = "If an account exists for this email, a password reset link has been sent."

AUTH_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing or invalid access token"},
}


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(REGISTER_POLICY))],
    responses={
        400: {"model": ErrorResponse, "description": "Validation error or weak password"},
        429: {"model": ErrorResponse, "description": "Too many registrations"},
    },
)
async def register(
    body: RegisterRequest,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> MessageResponse:
    """Register a new account.

    The account starts unverified and a verification link is emailed. An
    already registered email gets exactly the same response as a new one.
    """
    try:
        await auth_service.register(body.email, body.password, name=body.name, client=client)
    except AuthError as e:
        if e.code != AuthErrorCode.EMAIL_EXISTS:
            raise
    return MessageResponse(message=REGISTER_MESSAGE)


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(rate_limit(LOGIN_POLICY))],
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account suspended, deleted or unverified"},
        429: {"model": ErrorResponse, "description": "Too many login attempts"},
    },
)
async def login(
    body: LoginRequest,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> AuthResponse:
    """Authenticate with email and password."""
    tokens = await auth_service.login(body.email, body.password, client=client)
    return AuthResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
        user=UserResponse.model_validate(tokens.user),
    )


@router.post(
    "/refresh",
    response_model=TokenResponse,
    dependencies=[Depends(rate_limit(REFRESH_POLICY))],
    responses={
        401: {"model": ErrorResponse, "description": "Invalid or revoked refresh token"},
        403: {"model": ErrorResponse, "description": "Account suspended or deleted"},
    },
)
async def refresh(
    body: RefreshRequest,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> TokenResponse:
    """Exchange a refresh token for a new token pair.

    Presenting an already revoked refresh token signs the user out of every
    session.
    """
    tokens = await auth_service.refresh(body.refresh_token, client=client)
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    body: RefreshRequest,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> MessageResponse:
    """Revoke the session behind a refresh token. Always succeeds."""
    try:
        await auth_service.logout(body.refresh_token, client=client)
    except Exception as e:
        logger.warning("Logout failed; reporting success", error=str(e))
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=LogoutAllResponse, responses=AUTH_RESPONSES)
async def logout_all(
    current_user: AuthenticatedUser,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> LogoutAllResponse:
    """Revoke every active session of the current user."""
    count = await auth_service.logout_all(current_user.user_id, client=client)
    return LogoutAllResponse(message="Logged out of all sessions", sessions_revoked=count)


@router.post(
    "/verify-email",
    response_model=VerifyEmailResponse,
    dependencies=[Depends(rate_limit(VERIFY_EMAIL_POLICY))],
    responses={
        400: {"model": ErrorResponse, "description": "Link expired or email already verified"},
        401: {"model": ErrorResponse, "description": "Invalid token"},
    },
)
async def verify_email(
    body: VerifyEmailRequest,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> VerifyEmailResponse:
    """Redeem an email verification token."""
    user = await auth_service.verify_email(body.token, client=client)
    return VerifyEmailResponse(
        message="Email verified successfully",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(RESEND_VERIFICATION_POLICY))],
)
async def resend_verification(
    body: EmailRequest,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> MessageResponse:
    """Send a fresh verification link. The response never reveals whether the email exists."""
    await auth_service.resend_verification(body.email, client=client)
    return MessageResponse(message=RESEND_MESSAGE)


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(PASSWORD_RESET_POLICY))],
)
async def forgot_password(
    body: EmailRequest,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> MessageResponse:
    """Send a password reset link. The response never reveals whether the email exists."""
    await auth_service.request_password_reset(body.email, client=client)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(PASSWORD_RESET_POLICY))],
    responses={
        400: {"model": ErrorResponse, "description": "Link expired or weak password"},
        401: {"model": ErrorResponse, "description": "Invalid token"},
    },
)
async def reset_password(
    body: ResetPasswordRequest,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> MessageResponse:
    """Set a new password with a reset token. Signs out every session."""
    await auth_service.reset_password(body.token, body.password, client=client)
    return MessageResponse(message="Password has been reset. Please log in with your new password.")


@router.get("/me", response_model=MeResponse, responses=AUTH_RESPONSES)
async def me(current_user: AuthenticatedUser, auth_service: AuthServiceDep) -> MeResponse:
    """Return the current user's profile."""
    user = await auth_service.get_user(current_user.user_id)
    return MeResponse(user=UserResponse.model_validate(user))


@router.get("/sessions", response_model=list[SessionResponse], responses=AUTH_RESPONSES)
async def list_sessions(
    current_user: AuthenticatedUser,
    auth_service: AuthServiceDep,
) -> list[SessionResponse]:
    """List the current user's active sessions, newest first."""
    sessions = await auth_service.list_sessions(current_user.user_id)
    return [SessionResponse.model_validate(s) for s in sessions]


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**AUTH_RESPONSES, 404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def revoke_session(
    session_id: str,
    current_user: AuthenticatedUser,
    auth_service: AuthServiceDep,
    client: ClientInfoDep,
) -> Response:
    """Revoke one of the current user's sessions."""
    if not await auth_service.revoke_session(current_user.user_id, session_id, client=client):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_FOUND", "message": "Session not found"},
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
