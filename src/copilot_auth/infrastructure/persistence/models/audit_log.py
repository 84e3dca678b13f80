"""SQLAlchemy model for the security audit log.

Entries are append-only; the repository exposes no update or delete.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from copilot_auth.infrastructure.persistence.database import Base


class AuditLogModel(Base):
    """Security audit log entry.

    Attributes:
        id: Primary key (auto-incrementing, serves as sequence number).
        action: Event name, e.g. ``auth.login.success``.
        user_id: Subject of the event (nullable for unknown emails).
        ip_address: IP address of the client.
        user_agent: User agent string from the request.
        extra_metadata: Additional event details as JSON.
        created_at: When the event happened (UTC).
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Unique identifier",
    )
    action: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Event name: auth.<operation>.<outcome>",
    )
    user_id: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
        index=True,
        comment="User the event concerns",
    )
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)
    extra_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
        comment="Additional event details",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (Index("ix_audit_logs_user_created", "user_id", "created_at"),)
