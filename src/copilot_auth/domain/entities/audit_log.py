"""Audit log entity.

Security events are recorded append-only. Actions follow the
``auth.<operation>.<outcome>`` naming scheme.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class AuditLogEntry:
    """Immutable security event record.

    Attributes:
        action: Event name, e.g. ``auth.login.success``.
        user_id: Subject of the event, if known.
        ip_address: Client IP address.
        user_agent: Client user agent string.
        metadata: Additional event details. Never contains secrets.
        created_at: When the event happened (UTC).
        id: Database identifier, assigned on insert.
    """

    action: str
    user_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None
