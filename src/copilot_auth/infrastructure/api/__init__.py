"""HTTP API: application factory, routes, schemas and request protections."""

from copilot_auth.infrastructure.api.app import AUTH_ERROR_STATUS, create_app

__all__ = ["AUTH_ERROR_STATUS", "create_app"]
