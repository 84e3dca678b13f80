"""Persistence layer: database engine, models and repositories."""

from copilot_auth.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    get_db_session,
)

__all__ = ["Base", "DatabaseManager", "get_db_session"]
