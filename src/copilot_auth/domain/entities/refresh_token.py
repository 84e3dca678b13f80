"""Refresh token entity.

A row represents one live session grant. Only the SHA-256 hash of the raw
token is stored. ``revoked_at`` is set at most once and never cleared;
expiry is checked at read time rather than stored as a status.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid


@dataclass
class RefreshToken:
    """Stored refresh token (session).

    Attributes:
        id: Unique identifier; equal to the token's ``jti`` claim.
        user_id: Owner of the session.
        token_hash: SHA-256 hex digest of the raw token.
        expires_at: When the session expires.
        device_info: Client description captured at issue time.
        ip_address: Client IP captured at issue time.
        revoked_at: When the session was revoked (null while active).
        created_at: When the session was created.
    """

    user_id: str
    token_hash: str
    expires_at: datetime
    device_info: str | None = None
    ip_address: str | None = None
    revoked_at: datetime | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the session is past its expiry."""
        return self.expires_at <= (now or datetime.now(timezone.utc))
