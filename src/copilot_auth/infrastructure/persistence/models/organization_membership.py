"""SQLAlchemy model for organization memberships.

Read at token issue time to populate the ``organizations`` claim.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from copilot_auth.infrastructure.persistence.database import Base


class OrganizationMembershipModel(Base):
    """A user's role in one organization."""

    __tablename__ = "organization_members"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    organization_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Organization ID",
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="MEMBER",
        comment="Role within the organization",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

