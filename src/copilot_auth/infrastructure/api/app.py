"""Application factory for the auth service.

``create_app`` wires settings, stores, hashers and the email sender onto
``app.state`` and installs the routes, the error envelope handlers and the
correlation-ID middleware. Run it with ``uvicorn --factory``.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from copilot_auth.core.config import Settings, get_settings
from copilot_auth.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from copilot_auth.domain.exceptions import AuthError, AuthErrorCode
from copilot_auth.domain.services import PasswordValidator
from copilot_auth.infrastructure.api.middleware import (
    RateLimitExceeded,
    RateLimitStorage,
    rate_limit_headers,
)
from copilot_auth.infrastructure.auth import CredentialHasher, JWTService
from copilot_auth.infrastructure.persistence.database import DatabaseManager
from copilot_auth.infrastructure.services import EmailService, PwnedPasswordsClient

logger = get_logger(__name__)

# The single place where error kinds become HTTP statuses.
AUTH_ERROR_STATUS: dict[AuthErrorCode, int] = {
    AuthErrorCode.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.VERIFICATION_EXPIRED: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.ALREADY_VERIFIED: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.TOKEN_REVOKED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.ACCOUNT_SUSPENDED: status.HTTP_403_FORBIDDEN,
    AuthErrorCode.ACCOUNT_DELETED: status.HTTP_403_FORBIDDEN,
    AuthErrorCode.EMAIL_NOT_VERIFIED: status.HTTP_403_FORBIDDEN,
    AuthErrorCode.EMAIL_EXISTS: status.HTTP_409_CONFLICT,
    AuthErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
}


def error_body(code: str, message: str, details: list[str] | None = None) -> dict[str, Any]:
    """Build the ``{"error": {...}}`` envelope shared by every failure."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and the schema on startup; release the engine on shutdown.

    Tables are created automatically everywhere except production, where
    ``copilot-auth init-db`` is run explicitly.
    """
    settings: Settings = app.state.settings
    db: DatabaseManager = app.state.db_manager

    configure_logging(settings)
    logger.info(
        "Starting Copilot auth service",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    if not settings.is_production:
        try:
            await db.create_tables()
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            raise

    yield

    logger.info("Shutting down Copilot auth service")
    await db.disconnect()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Every stateful component is built here once and kept on ``app.state``;
    request dependencies read them from there.

    Args:
        settings: Settings to use. Loaded from the environment when omitted.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Authentication and session service for Livestream Copilot",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    breach_checker = PwnedPasswordsClient.from_settings(settings) if settings.breach_check_enabled else None

    app.state.settings = settings
    app.state.db_manager = DatabaseManager(settings)
    app.state.jwt_service = JWTService(settings)
    app.state.password_hasher = CredentialHasher.for_passwords(settings)
    app.state.token_hasher = CredentialHasher.for_tokens(settings)
    app.state.password_validator = PasswordValidator(breach_checker=breach_checker)
    app.state.email_sender = EmailService(settings)
    app.state.rate_limit_storage = RateLimitStorage()

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """
    settings: Settings = app.state.settings

    @app.get("/health", tags=["health"])
    async def health_check():
        """Process is up. No dependency checks."""
        return {"status": "healthy", "service": settings.app_name, "version": settings.app_version}

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check endpoint, including database connectivity."""
        db: DatabaseManager = app.state.db_manager
        if await db.check_connection():
            return {
                "status": "ready",
                "service": settings.app_name,
                "version": settings.app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "service": settings.app_name, "database": "disconnected"},
        )

    @app.get("/live", tags=["health"])
    async def liveness_check():
        """Liveness check endpoint."""
        return {"status": "alive", "service": settings.app_name, "version": settings.app_version}


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from copilot_auth.infrastructure.api.routes import auth_router

    settings: Settings = app.state.settings
    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers that render the error envelope.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
        headers = rate_limit_headers(exc.result)
        headers["Retry-After"] = str(exc.result.reset_after)
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=error_body(exc.code.value, exc.message),
            headers=headers,
        )

    @app.exception_handler(AuthError)
    async def auth_exception_handler(request: Request, exc: AuthError):
        headers = None
        status_code = AUTH_ERROR_STATUS[exc.code]
        if status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=status_code,
            content=error_body(exc.code.value, exc.message, exc.details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("VALIDATION_ERROR", "Invalid request", details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = error_body(exc.detail["code"], exc.detail["message"])
        else:
            content = error_body("HTTP_ERROR", str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log every request and bind a correlation ID to its log entries."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info("Request started", method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()
