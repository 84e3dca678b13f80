"""FastAPI dependencies for authentication and service wiring.

Provides dependencies for extracting and validating JWT access tokens,
guarding routes by platform or organization role, and building the auth
service from the components held on ``app.state``.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from copilot_auth.core.logging import get_logger
from copilot_auth.domain.entities import ClientInfo, OrgRole, PlatformRole
from copilot_auth.domain.services import AuditLogService, AuthService
from copilot_auth.infrastructure.api.middleware.rate_limit import get_client_ip
from copilot_auth.infrastructure.auth import JWTService
from copilot_auth.infrastructure.persistence.database import get_db_session
from copilot_auth.infrastructure.persistence.repositories import (
    AuditLogRepository,
    EmailVerificationRepository,
    PasswordResetRepository,
    RefreshTokenRepository,
    UserRepository,
)

logger = get_logger(__name__)

MAX_DEVICE_INFO_LENGTH = 200


@dataclass
class CurrentUser:
    """Represents the current authenticated user context.

    Extracted from a valid JWT access token.
    """

    user_id: str
    email: str
    platform_role: str
    organizations: list[dict[str, str]]


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Extract and validate the current user from the Authorization header.

    Args:
        request: The incoming request.
        authorization: The Authorization header value (e.g., "Bearer <token>").

    Returns:
        CurrentUser: The authenticated user's context.

    Raises:
        HTTPException: 401 if the token is missing or invalid.
    """
    if authorization is None:
        logger.info("Authentication failed: missing Authorization header")
        raise _unauthorized("MISSING_TOKEN", "Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Authentication failed: invalid Authorization header format")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired token")

    jwt_service: JWTService = request.app.state.jwt_service
    payload = jwt_service.verify_access_token(parts[1])
    if payload is None:
        logger.info("Authentication failed: invalid access token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired token")

    return CurrentUser(
        user_id=payload.sub,
        email=payload.email,
        platform_role=payload.platform_role,
        organizations=[org.model_dump() for org in payload.organizations],
    )


# Type alias for dependency injection
AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]


def _forbidden(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"code": code, "message": message},
    )


def require_platform_role(*roles: PlatformRole) -> Callable[..., Awaitable[CurrentUser]]:
    """Build a dependency admitting only the given platform roles.

    SUPER_ADMIN is always admitted.

    Args:
        roles: Platform roles allowed through.

    Returns:
        A dependency resolving to the authenticated user.
    """
    allowed = {role.value for role in roles} | {PlatformRole.SUPER_ADMIN.value}

    async def dependency(current_user: AuthenticatedUser) -> CurrentUser:
        if current_user.platform_role not in allowed:
            logger.info(
                "Platform role check failed",
                user_id=current_user.user_id,
                platform_role=current_user.platform_role,
                required=sorted(allowed),
            )
            raise _forbidden("INSUFFICIENT_PERMISSIONS", "You do not have permission to perform this action")
        return current_user

    return dependency


def require_org_role(*roles: OrgRole, param: str = "org_id") -> Callable[..., Awaitable[CurrentUser]]:
    """Build a dependency admitting only the given roles in one organization.

    The organization ID is read from the ``param`` path parameter and
    matched against the memberships carried in the access token. Owners of
    that organization and platform SUPER_ADMINs are always admitted.

    Args:
        roles: Organization roles allowed through.
        param: Name of the path parameter holding the organization ID.

    Returns:
        A dependency resolving to the authenticated user.
    """
    allowed = {role.value for role in roles} | {OrgRole.OWNER.value}

    async def dependency(request: Request, current_user: AuthenticatedUser) -> CurrentUser:
        if current_user.platform_role == PlatformRole.SUPER_ADMIN.value:
            return current_user

        org_id = request.path_params.get(param)
        if not org_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "MISSING_ORG_ID", "message": "Organization ID is required"},
            )

        membership = next((org for org in current_user.organizations if org["id"] == org_id), None)
        if membership is None:
            logger.info("Organization access denied: not a member", user_id=current_user.user_id, org_id=org_id)
            raise _forbidden("NOT_ORG_MEMBER", "You are not a member of this organization")
        if membership["role"] not in allowed:
            logger.info(
                "Organization role check failed",
                user_id=current_user.user_id,
                org_id=org_id,
                org_role=membership["role"],
            )
            raise _forbidden(
                "INSUFFICIENT_ORG_PERMISSIONS",
                "You do not have permission to perform this action in this organization",
            )
        return current_user

    return dependency


# Type aliases for role-guarded routes
PlatformAdminUser = Annotated[CurrentUser, Depends(require_platform_role(PlatformRole.ADMIN))]
SuperAdminUser = Annotated[CurrentUser, Depends(require_platform_role(PlatformRole.SUPER_ADMIN))]
OrgAdminUser = Annotated[CurrentUser, Depends(require_org_role(OrgRole.ADMIN))]
OrgMemberUser = Annotated[CurrentUser, Depends(require_org_role(OrgRole.MEMBER, OrgRole.ADMIN))]


def get_client_info(request: Request) -> ClientInfo:
    """Describe the caller for session records and the audit log.

    The device description is the user agent, truncated, with the
    ``X-Client-Version`` header appended when present.
    """
    user_agent = request.headers.get("user-agent")
    device_info = user_agent[:MAX_DEVICE_INFO_LENGTH] if user_agent else None
    client_version = request.headers.get("x-client-version")
    if client_version:
        device_info = f"{device_info or 'unknown'} | v{client_version}"
    return ClientInfo(
        ip_address=get_client_ip(request),
        user_agent=user_agent,
        device_info=device_info,
    )


ClientInfoDep = Annotated[ClientInfo, Depends(get_client_info)]


def get_auth_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AuthService:
    """Build the auth service for one request.

    Repositories share the request's session; stateless components come
    from ``app.state``.
    """
    state = request.app.state
    return AuthService(
        session=session,
        user_repo=UserRepository(session),
        refresh_token_repo=RefreshTokenRepository(session),
        verification_repo=EmailVerificationRepository(session),
        reset_repo=PasswordResetRepository(session),
        audit_service=AuditLogService(session, AuditLogRepository(session)),
        jwt_service=state.jwt_service,
        password_hasher=state.password_hasher,
        token_hasher=state.token_hasher,
        password_validator=state.password_validator,
        email_sender=state.email_sender,
        settings=state.settings,
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
