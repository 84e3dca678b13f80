"""Password reset entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid


@dataclass
class PasswordResetToken:
    """Password reset token entity.

    Attributes:
        id: Unique identifier (UUID string).
        user_id: ID of the user requesting the reset.
        email: Email address the link was sent to.
        token_hash: SHA-256 hex digest of the reset token.
        expires_at: When the token expires.
        used: Set once the token has changed the password.
        created_at: When the token was created.
    """

    user_id: str
    email: str
    token_hash: str
    expires_at: datetime
    used: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or datetime.now(timezone.utc))
