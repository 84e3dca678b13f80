"""Credential hashing using Argon2.

Provides salted, adaptive password hashing and verification using the
Argon2id algorithm. The time cost is the adaptive cost factor: hashes
produced under a lower cost than the configured one are reported as needing
a rehash so they can be upgraded after the next successful login.
"""

import asyncio

import argon2
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from copilot_auth.core.config import Settings

# Inputs longer than this are rejected before hashing to bound CPU cost.
MAX_PASSWORD_LENGTH = 128


class PasswordTooLongError(ValueError):
    """Raised when a password exceeds MAX_PASSWORD_LENGTH."""


class CredentialHasher:
    """Argon2id hasher with a configurable cost.

    The same class hashes user passwords and, with cheaper parameters,
    single-use verification tokens.
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        """Initialize the hasher.

        Args:
            time_cost: Number of iterations (the adaptive cost factor).
            memory_cost: Memory usage in KiB.
            parallelism: Number of parallel lanes.
        """
        self.time_cost = time_cost
        self.memory_cost = memory_cost
        self.parallelism = parallelism
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )
        self._dummy_hash: str | None = None

    @classmethod
    def for_passwords(cls, settings: Settings) -> "CredentialHasher":
        """Build the hasher used for account passwords."""
        return cls(
            time_cost=settings.password_hash_time_cost,
            memory_cost=settings.password_hash_memory_cost,
            parallelism=settings.password_hash_parallelism,
        )

    @classmethod
    def for_tokens(cls, settings: Settings) -> "CredentialHasher":
        """Build the hasher used for email verification tokens.

        Tokens carry 256 bits of entropy, so a cheap configuration suffices;
        the per-row salt is what matters for the candidate scan.
        """
        return cls(
            time_cost=settings.token_hash_time_cost,
            memory_cost=settings.token_hash_memory_cost,
            parallelism=1,
        )

    def hash(self, password: str) -> str:
        """Hash a password using Argon2id.

        Args:
            password: The plaintext password to hash.

        Returns:
            The encoded hash, including algorithm parameters and salt.

        Raises:
            PasswordTooLongError: If the password exceeds MAX_PASSWORD_LENGTH.

        Example:
            >>> hasher = CredentialHasher()
            >>> hasher.hash("Sup3r$ecurePass!").startswith("$argon2id$")
            True
        """
        if len(password) > MAX_PASSWORD_LENGTH:
            raise PasswordTooLongError(
                f"Password must be at most {MAX_PASSWORD_LENGTH} characters"
            )
        return self._hasher.hash(password)

    def verify(self, password: str, hashed: str | None) -> bool:
        """Verify a password against a hash.

        Never raises: empty input, a mismatch and a malformed hash all
        return False so callers cannot tell them apart.

        Args:
            password: The plaintext password to verify.
            hashed: The encoded hash to verify against.

        Returns:
            True if the password matches, False otherwise.
        """
        if not password or not hashed:
            return False
        if len(password) > MAX_PASSWORD_LENGTH:
            return False
        try:
            return self._hasher.verify(hashed, password)
        except (VerificationError, InvalidHashError, UnicodeEncodeError):
            return False

    def needs_rehash(self, hashed: str) -> bool:
        """Check if a hash was produced with weaker parameters than configured.

        Args:
            hashed: The encoded hash to check.

        Returns:
            True if the embedded cost is below the configured cost or the hash
            cannot be parsed, False otherwise.
        """
        try:
            params = argon2.extract_parameters(hashed)
        except InvalidHashError:
            return True
        return params.time_cost < self.time_cost or params.memory_cost < self.memory_cost

    @property
    def dummy_hash(self) -> str:
        """A hash of a random value, verified against when no user exists.

        Keeps the unknown-email login path as slow as the wrong-password one.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self._hasher.hash("dummy-password-for-timing")
        return self._dummy_hash

    async def hash_async(self, password: str) -> str:
        """Hash on a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, hashed: str | None) -> bool:
        """Verify on a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.verify, password, hashed)

    async def verify_dummy_async(self, password: str) -> None:
        """Spend the same effort as a real verification and discard the result."""
        await asyncio.to_thread(self.verify, password, self.dummy_hash)
