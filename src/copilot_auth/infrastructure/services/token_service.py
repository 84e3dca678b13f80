"""Token generation service.

Provides cryptographically secure random tokens for email verification and
password reset links, plus the hashing and comparison helpers used when
those tokens are stored and redeemed.
"""

import hashlib
import hmac
import secrets
import uuid


class TokenService:
    """Service for generating and hashing secure random tokens."""

    @staticmethod
    def generate_token(length: int = 32) -> str:
        """Generate a cryptographically secure random token.

        Args:
            length: Number of bytes for the token. Default is 32 bytes (64 hex chars).

        Returns:
            Hexadecimal token string.
        """
        return secrets.token_hex(length)

    @staticmethod
    def generate_jti() -> str:
        """Generate a unique token identifier."""
        return str(uuid.uuid4())

    @staticmethod
    def hash_token(token: str) -> str:
        """Hash a token using SHA-256.

        Args:
            token: The raw token string.

        Returns:
            SHA-256 hex digest of the token.
        """
        return hashlib.sha256(token.encode()).hexdigest()

    @staticmethod
    def tokens_match(candidate_hash: str, stored_hash: str) -> bool:
        """Compare two token digests in constant time.

        Digests of different byte length never match; equal-length digests
        are compared without short-circuiting.
        """
        a = candidate_hash.encode()
        b = stored_hash.encode()
        if len(a) != len(b):
            return False
        return hmac.compare_digest(a, b)


# Default token service instance
token_service = TokenService()
