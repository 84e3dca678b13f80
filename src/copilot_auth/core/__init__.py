"""Core configuration and logging for the Copilot auth service."""

from copilot_auth.core.config import Settings, get_settings
from copilot_auth.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "Settings",
    "bind_correlation_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_settings",
]
