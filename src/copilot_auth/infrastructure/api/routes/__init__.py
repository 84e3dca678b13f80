"""API route modules."""

from copilot_auth.infrastructure.api.routes.auth_router import router as auth_router

__all__ = ["auth_router"]
