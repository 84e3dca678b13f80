"""Breached password lookup using the Pwned Passwords range API.

Uses k-anonymity: only the first five hex characters of the password's SHA-1
digest are sent; the remaining suffix is matched locally against the
returned list.
"""

import hashlib
from typing import Protocol

import httpx

from copilot_auth.core.config import Settings
from copilot_auth.core.logging import get_logger

logger = get_logger(__name__)


class BreachChecker(Protocol):
    """Something that can report how often a password appears in breaches."""

    async def breach_count(self, password: str) -> int: ...


class PwnedPasswordsClient:
    """Async client for the Pwned Passwords range API.

    Errors are raised to the caller; the password validator decides that a
    lookup failure must not block registration.
    """

    def __init__(
        self,
        base_url: str = "https://api.pwnedpasswords.com/range",
        timeout: float = 3.0,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Range endpoint, without the trailing prefix segment.
            timeout: Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "PwnedPasswordsClient":
        return cls(base_url=settings.breach_check_url, timeout=settings.breach_check_timeout)

    async def breach_count(self, password: str) -> int:
        """Return how many times the password appears in known breaches.

        Args:
            password: The plaintext password.

        Returns:
            Number of occurrences, 0 if not found.

        Raises:
            httpx.HTTPError: If the lookup fails or returns an error status.
        """
        digest = hashlib.sha1(password.encode()).hexdigest().upper()
        prefix, suffix = digest[:5], digest[5:]

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.base_url}/{prefix}",
                headers={"Add-Padding": "true"},
            )
            response.raise_for_status()

        for line in response.text.splitlines():
            candidate, _, count = line.strip().partition(":")
            if candidate.upper() == suffix:
                try:
                    return int(count)
                except ValueError:
                    logger.warning("Unparseable breach count in response", prefix=prefix)
                    return 0
        return 0
