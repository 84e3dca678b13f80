"""Structured logging with correlation IDs.

structlog is configured once per process by :func:`configure_logging`. Every
entry carries the correlation ID bound for the current request, and values
under credential-like keys are masked before rendering.
"""

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor

if TYPE_CHECKING:
    from copilot_auth.core.config import Settings

# Keys whose values must never reach a log sink.
REDACTED_KEYS = frozenset(
    {
        "password",
        "new_password",
        "password_hash",
        "token",
        "raw_token",
        "access_token",
        "refresh_token",
        "api_key",
        "authorization",
        "secret",
    }
)
REDACTED = "[redacted]"

# Third-party loggers that are noisy at INFO.
QUIET_LOGGERS = ("aiosqlite", "httpx", "httpcore", "sqlalchemy.engine")


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential values passed as log keywords."""
    for key in event_dict.keys() & REDACTED_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("logger", getattr(logger, "name", None) or "copilot_auth")
    return event_dict


def rename_event_to_message(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Emit the log line under ``message``, the key log shippers expect."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _renderer_chain(settings: "Settings") -> list[Processor]:
    if not settings.is_production and (settings.is_development or settings.log_format == "console"):
        return [
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        ]
    return [
        rename_event_to_message,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(settings: "Settings | None" = None) -> None:
    """Configure structlog and the stdlib root logger.

    Development (or ``log_format="console"``) uses the human-readable
    console renderer. Production always renders one JSON object per line.

    Args:
        settings: Settings to read the level and format from. Loaded from
            the environment when omitted.
    """
    if settings is None:
        from copilot_auth.core.config import get_settings

        settings = get_settings()

    level = logging.getLevelName(settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        redact_secrets,
        *_renderer_chain(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=settings.is_production,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name, usually ``__name__``.
    """
    return structlog.get_logger(name or "copilot_auth")


def bind_correlation_id(correlation_id: str) -> None:
    """Bind the request's correlation ID to the logging context.

    Called by the request middleware with the ``X-Correlation-ID`` header
    value or a newly generated ID.
    """
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    """Drop everything bound to the current logging context."""
    structlog.contextvars.clear_contextvars()
