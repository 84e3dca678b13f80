"""Livestream Copilot authentication and session-token service.

Credential hashing, JWT access/refresh tokens with rotation and reuse
detection, single-use email tokens, rate limiting and audit logging.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
