"""Authentication infrastructure components.

This module provides credential hashing, JWT token services, API keys and
the token claim models.
"""

from copilot_auth.infrastructure.auth.api_key_service import APIKeyService, GeneratedApiKey
from copilot_auth.infrastructure.auth.jwt_service import JWTService
from copilot_auth.infrastructure.auth.password_hasher import (
    MAX_PASSWORD_LENGTH,
    CredentialHasher,
    PasswordTooLongError,
)
from copilot_auth.infrastructure.auth.token_types import (
    AccessTokenPayload,
    OrganizationClaim,
    RefreshTokenPayload,
    TokenType,
)

__all__ = [
    "APIKeyService",
    "AccessTokenPayload",
    "CredentialHasher",
    "GeneratedApiKey",
    "JWTService",
    "MAX_PASSWORD_LENGTH",
    "OrganizationClaim",
    "PasswordTooLongError",
    "RefreshTokenPayload",
    "TokenType",
]
