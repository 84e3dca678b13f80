"""SQLAlchemy model for refresh tokens.

Stores one row per issued refresh token, keyed by the token's jti and
looked up by the SHA-256 hash of the raw token.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from copilot_auth.infrastructure.persistence.database import Base


class RefreshTokenModel(Base):
    """Refresh token (session) model.

    ``revoked_at`` is only ever written by conditional updates that require
    it to be null, so a revocation timestamp never changes once set.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Session ID, equal to the token jti",
    )
    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        comment="SHA-256 hex digest of the raw token",
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    device_info: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    revoked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (Index("ix_refresh_tokens_user_revoked", "user_id", "revoked_at"),)

    def __repr__(self) -> str:
        return f"RefreshTokenModel(id={self.id!r}, user_id={self.user_id!r}, revoked_at={self.revoked_at!r})"
