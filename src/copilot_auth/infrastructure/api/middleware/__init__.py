"""Request-level protections for the API."""

from copilot_auth.infrastructure.api.middleware.rate_limit import (
    GENERAL_POLICY,
    LOGIN_POLICY,
    PASSWORD_RESET_POLICY,
    REFRESH_POLICY,
    REGISTER_POLICY,
    RESEND_VERIFICATION_POLICY,
    VERIFY_EMAIL_POLICY,
    RateLimitExceeded,
    RateLimitPolicy,
    get_client_ip,
    rate_limit,
    rate_limit_headers,
)
from copilot_auth.infrastructure.api.middleware.rate_limit_storage import (
    RateLimitResult,
    RateLimitStorage,
)

__all__ = [
    "GENERAL_POLICY",
    "LOGIN_POLICY",
    "PASSWORD_RESET_POLICY",
    "REFRESH_POLICY",
    "REGISTER_POLICY",
    "RESEND_VERIFICATION_POLICY",
    "VERIFY_EMAIL_POLICY",
    "RateLimitExceeded",
    "RateLimitPolicy",
    "RateLimitResult",
    "RateLimitStorage",
    "get_client_ip",
    "rate_limit",
    "rate_limit_headers",
]
