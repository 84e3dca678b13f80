"""Audit log repository for write-only audit trail operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from copilot_auth.domain.entities import AuditLogEntry
from copilot_auth.infrastructure.persistence.models import AuditLogModel


class AuditLogRepository:
    """Repository for audit log database operations.

    This repository is write-only. UPDATE and DELETE operations are
    intentionally not provided to keep the audit trail append-only.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        """Append an audit log entry.

        Args:
            entry: The entry to store.

        Returns:
            The entry with its assigned ID.
        """
        model = AuditLogModel(
            action=entry.action,
            user_id=entry.user_id,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            extra_metadata=dict(entry.metadata),
            created_at=entry.created_at,
        )
        self.session.add(model)
        await self.session.flush()
        entry.id = model.id
        return entry
