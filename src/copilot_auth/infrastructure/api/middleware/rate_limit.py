"""Per-endpoint rate limiting for the auth routes.

Each auth endpoint class has its own fixed window and threshold. Limits are
enforced by a FastAPI dependency that runs before the request body is
validated, so malformed and failed attempts count exactly like successful
ones.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Request, Response

from copilot_auth.core.logging import get_logger
from copilot_auth.domain.entities import normalize_email
from copilot_auth.domain.exceptions import AuthError, AuthErrorCode
from copilot_auth.infrastructure.api.middleware.rate_limit_storage import (
    RateLimitResult,
    RateLimitStorage,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Window and threshold for one class of endpoint.

    Attributes:
        name: Key prefix, e.g. ``login``.
        limit: Maximum requests per window.
        window_seconds: Window length.
        key_by_email: Add the normalized request email to the key.
    """

    name: str
    limit: int
    window_seconds: int
    key_by_email: bool = False


LOGIN_POLICY = RateLimitPolicy("login", limit=5, window_seconds=15 * 60, key_by_email=True)
REGISTER_POLICY = RateLimitPolicy("register", limit=3, window_seconds=60 * 60)
PASSWORD_RESET_POLICY = RateLimitPolicy("password-reset", limit=3, window_seconds=60 * 60)
RESEND_VERIFICATION_POLICY = RateLimitPolicy("resend-verification", limit=3, window_seconds=60 * 60)
VERIFY_EMAIL_POLICY = RateLimitPolicy("verify-email", limit=10, window_seconds=60 * 60)
REFRESH_POLICY = RateLimitPolicy("refresh", limit=10, window_seconds=60)
GENERAL_POLICY = RateLimitPolicy("auth", limit=20, window_seconds=60)


class RateLimitExceeded(AuthError):
    """Raised when a request exceeds its policy; rendered as a 429."""

    def __init__(self, result: RateLimitResult) -> None:
        super().__init__(AuthErrorCode.RATE_LIMITED)
        self.result = result


def get_client_ip(request: Request) -> str:
    """Resolve the client IP.

    Prefers the first ``X-Forwarded-For`` entry, then the socket address.

    Args:
        request: The incoming request.

    Returns:
        The client IP, or ``unknown``.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def _request_email(request: Request) -> str:
    try:
        body = await request.json()
    except ValueError:
        return "unknown"
    email = body.get("email") if isinstance(body, dict) else None
    if not isinstance(email, str) or not email.strip():
        return "unknown"
    return normalize_email(email)


async def build_rate_limit_key(request: Request, policy: RateLimitPolicy) -> str:
    """Build the composite key for a request under a policy."""
    key = f"{policy.name}:{get_client_ip(request)}"
    if policy.key_by_email:
        key = f"{key}:{await _request_email(request)}"
    return key


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Standard ``RateLimit-*`` response headers for a result."""
    return {
        "RateLimit-Limit": str(result.limit),
        "RateLimit-Remaining": str(result.remaining),
        "RateLimit-Reset": str(result.reset_after),
    }


def rate_limit(policy: RateLimitPolicy) -> Callable[[Request, Response], Awaitable[None]]:
    """Create a dependency enforcing a rate limit policy.

    Args:
        policy: The policy to enforce.

    Returns:
        An async FastAPI dependency.

    Example:
        @router.post("/login", dependencies=[Depends(rate_limit(LOGIN_POLICY))])
        async def login(...): ...
    """

    async def dependency(request: Request, response: Response) -> None:
        if not request.app.state.settings.rate_limit_enabled:
            return

        storage: RateLimitStorage = request.app.state.rate_limit_storage
        key = await build_rate_limit_key(request, policy)
        result = storage.hit(key, policy.limit, policy.window_seconds)

        if not result.allowed:
            logger.warning(
                "Rate limit exceeded",
                policy=policy.name,
                path=request.url.path,
                ip=get_client_ip(request),
                retry_after=result.reset_after,
            )
            raise RateLimitExceeded(result)

        for header, value in rate_limit_headers(result).items():
            response.headers[header] = value

    return dependency
