"""Email verification entity.

Stores a salted hash of the verification token mailed to a user.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid


@dataclass
class EmailVerificationToken:
    """Email verification token entity.

    Attributes:
        id: Unique identifier (UUID string).
        user_id: ID of the user this token is for.
        email: Email address to be verified.
        token_hash: Salted argon2 hash of the verification token.
        expires_at: When the token expires.
        created_at: When the token was created.
    """

    user_id: str
    email: str
    token_hash: str
    expires_at: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token is past its expiry."""
        return self.expires_at <= (now or datetime.now(timezone.utc))
