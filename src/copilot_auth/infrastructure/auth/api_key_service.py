"""API key generation and verification.

Keys have the form ``lsc_{live|test}_{43 URL-safe characters}``. The public
prefix (environment plus the first 8 random characters) is stored unhashed
for lookup; the full key is stored as a SHA-256 digest. Keys carry 256 bits
of entropy, so a fast unsalted hash is sufficient.
"""

import hashlib
import hmac
import re
import secrets
from dataclasses import dataclass
from typing import Literal

from copilot_auth.core.config import Settings

API_KEY_PREFIX = "lsc"
API_KEY_PATTERN = re.compile(r"^lsc_(live|test)_[A-Za-z0-9_-]{43}$")

ApiKeyEnvironment = Literal["live", "test"]


@dataclass(frozen=True)
class GeneratedApiKey:
    """A freshly generated API key.

    Attributes:
        key: Full plaintext key. Shown to the user once, never stored.
        key_hash: SHA-256 hex digest for storage.
        prefix: Public lookup prefix.
    """

    key: str
    key_hash: str
    prefix: str


class APIKeyService:
    """Service for generating and checking API keys."""

    def __init__(self, settings: Settings) -> None:
        """Initialize the service.

        Args:
            settings: Application settings; ``api_key_env`` selects the
                environment segment of generated keys.
        """
        self.environment: ApiKeyEnvironment = settings.api_key_env

    def generate_api_key(self) -> GeneratedApiKey:
        """Generate a new API key for the configured environment.

        Returns:
            GeneratedApiKey with the plaintext key, its hash and its prefix.
        """
        random_part = secrets.token_urlsafe(32)
        key = f"{API_KEY_PREFIX}_{self.environment}_{random_part}"
        return GeneratedApiKey(
            key=key,
            key_hash=self.hash_key(key),
            prefix=f"{API_KEY_PREFIX}_{self.environment}_{random_part[:8]}",
        )

    @staticmethod
    def hash_key(key: str) -> str:
        """Compute SHA-256 hash of a key.

        Args:
            key: Plaintext API key.

        Returns:
            SHA-256 hex digest.
        """
        return hashlib.sha256(key.encode()).hexdigest()

    @classmethod
    def verify_api_key(cls, key: str, stored_hash: str) -> bool:
        """Check a presented key against a stored hash in constant time."""
        return hmac.compare_digest(cls.hash_key(key).encode(), stored_hash.encode())

    @staticmethod
    def validate_api_key_format(key: str) -> bool:
        return API_KEY_PATTERN.fullmatch(key) is not None

    @staticmethod
    def get_api_key_environment(key: str) -> ApiKeyEnvironment | None:
        """Return the environment segment of a well-formed key, else None."""
        match = API_KEY_PATTERN.fullmatch(key)
        if match is None:
            return None
        return match.group(1)  # type: ignore[return-value]

    @staticmethod
    def mask_key(key: str) -> str:
        """Mask an API key for display.

        Format: lsc_test_AbCdEfGh...wxyz

        Args:
            key: The full plaintext key.

        Returns:
            Masked key string.
        """
        parts = key.split("_", 2)
        if len(parts) == 3 and len(parts[2]) > 12:
            return f"{parts[0]}_{parts[1]}_{parts[2][:8]}...{parts[2][-4:]}"
        return "****"
