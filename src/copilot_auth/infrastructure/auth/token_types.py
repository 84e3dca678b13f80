"""Claim sets carried by access and refresh tokens.

The ``type`` discriminator keeps a refresh token from being accepted where an
access token is expected, and vice versa.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class TokenType(str, Enum):
    """Supported signed token kinds."""

    ACCESS = "access"
    REFRESH = "refresh"


class OrganizationClaim(BaseModel):
    """Organization membership embedded in an access token."""

    id: str = Field(..., description="Organization ID")
    role: str = Field(..., description="User's role within the organization")


class AccessTokenPayload(BaseModel):
    """Claims of a short-lived access token."""

    sub: str = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")
    platform_role: str = Field(..., description="Platform-wide role")
    organizations: list[OrganizationClaim] = Field(default_factory=list)
    type: Literal["access"] = "access"


class RefreshTokenPayload(BaseModel):
    """Claims of a long-lived refresh token."""

    sub: str = Field(..., description="User ID")
    jti: str = Field(..., description="Token ID, equal to the stored session ID")
    type: Literal["refresh"] = "refresh"
