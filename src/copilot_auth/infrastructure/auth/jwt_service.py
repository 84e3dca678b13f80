"""JWT token service.

Signs and verifies access and refresh tokens. The two kinds use distinct
secrets, so compromise of one secret does not allow forging the other kind.
Verification never raises: every failure collapses to ``None`` and only the
failure class is logged.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from pydantic import ValidationError

from copilot_auth.core.config import Settings
from copilot_auth.core.logging import get_logger
from copilot_auth.infrastructure.auth.token_types import (
    AccessTokenPayload,
    RefreshTokenPayload,
    TokenType,
)

logger = get_logger(__name__)


class JWTService:
    """Service for creating and validating JWT tokens.

    Supports both access tokens (short-lived) and refresh tokens (long-lived).
    """

    ALGORITHM = "HS256"
    ISSUER = "livestream-copilot"
    AUDIENCE = "livestream-copilot-api"

    def __init__(self, settings: Settings) -> None:
        """Initialize the JWT service.

        Args:
            settings: Application settings holding the signing secrets and
                token lifetimes.
        """
        self._access_secret = settings.jwt_secret
        self._refresh_secret = settings.jwt_refresh_secret
        self._access_expiry = timedelta(seconds=settings.jwt_access_expiry)
        self._refresh_expiry = timedelta(seconds=settings.jwt_refresh_expiry)

    @property
    def expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return int(self._access_expiry.total_seconds())

    @property
    def refresh_expires_in(self) -> int:
        """Refresh token lifetime in seconds."""
        return int(self._refresh_expiry.total_seconds())

    def _registered_claims(self, expires_delta: timedelta) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        return {
            "iss": self.ISSUER,
            "aud": self.AUDIENCE,
            "iat": now,
            "exp": now + expires_delta,
        }

    def create_access_token(self, payload: AccessTokenPayload) -> str:
        """Create an access token.

        The ``type`` claim is always written as ``access``, whatever the
        caller put in the payload.

        Args:
            payload: Claims to embed.

        Returns:
            Encoded JWT access token.
        """
        claims = payload.model_dump(mode="json")
        claims.update(self._registered_claims(self._access_expiry))
        claims["type"] = TokenType.ACCESS.value
        return jwt.encode(claims, self._access_secret, algorithm=self.ALGORITHM)

    def create_refresh_token(self, user_id: str) -> tuple[str, str]:
        """Create a refresh token with a fresh token ID.

        Args:
            user_id: The user's unique identifier.

        Returns:
            Tuple of (encoded JWT refresh token, jti).
        """
        jti = str(uuid.uuid4())
        claims: dict[str, Any] = {
            "sub": user_id,
            "jti": jti,
            "type": TokenType.REFRESH.value,
        }
        claims.update(self._registered_claims(self._refresh_expiry))
        return jwt.encode(claims, self._refresh_secret, algorithm=self.ALGORITHM), jti

    def _decode(self, token: str, secret: str, expected_type: TokenType) -> dict[str, Any] | None:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.ALGORITHM],
                issuer=self.ISSUER,
                audience=self.AUDIENCE,
                options={"require": ["exp", "iss", "aud", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Token rejected", reason="expired", expected_type=expected_type.value)
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(
                "Token rejected",
                reason=type(e).__name__,
                expected_type=expected_type.value,
            )
            return None

        if claims.get("type") != expected_type.value:
            logger.debug(
                "Token rejected",
                reason="wrong_type",
                expected_type=expected_type.value,
            )
            return None
        return claims

    def verify_access_token(self, token: str) -> AccessTokenPayload | None:
        """Verify an access token.

        Args:
            token: The encoded JWT token.

        Returns:
            The decoded payload, or None if the token is expired, malformed,
            wrongly signed or not an access token.
        """
        claims = self._decode(token, self._access_secret, TokenType.ACCESS)
        if claims is None:
            return None
        try:
            return AccessTokenPayload.model_validate(claims)
        except ValidationError:
            logger.debug("Token rejected", reason="invalid_claims", expected_type="access")
            return None

    def verify_refresh_token(self, token: str) -> RefreshTokenPayload | None:
        """Verify a refresh token.

        Args:
            token: The encoded JWT token.

        Returns:
            The decoded payload, or None if the token is expired, malformed,
            wrongly signed or not a refresh token.
        """
        claims = self._decode(token, self._refresh_secret, TokenType.REFRESH)
        if claims is None:
            return None
        try:
            return RefreshTokenPayload.model_validate(claims)
        except ValidationError:
            logger.debug("Token rejected", reason="invalid_claims", expected_type="refresh")
            return None
