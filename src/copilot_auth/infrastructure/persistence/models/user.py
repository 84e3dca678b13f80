"""SQLAlchemy model for the users table."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from copilot_auth.infrastructure.persistence.database import Base


class UserModel(Base):
    """User account.

    Emails are stored normalized (trimmed, lower-case) and are globally
    unique.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="User ID (UUID)",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Normalized email address",
    )
    password_hash: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Argon2id password hash (null for accounts without a password)",
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True, comment="Display name")
    platform_role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="USER",
        comment="Platform role: USER, ADMIN, SUPER_ADMIN",
    )
    status: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="PENDING_VERIFICATION",
        comment="Account status: PENDING_VERIFICATION, ACTIVE, SUSPENDED, DELETED",
    )
    email_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether the email address has been verified",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"UserModel(id={self.id!r}, email={self.email!r}, status={self.status!r})"
