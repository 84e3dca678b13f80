"""User entity and account lifecycle enums.

A user is created PENDING_VERIFICATION at registration, becomes ACTIVE once
the email address is proven, and may be moved to SUSPENDED or DELETED by an
administrator.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class UserStatus(str, Enum):
    """Account status."""

    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


class PlatformRole(str, Enum):
    """Platform-wide role, independent of organization membership."""

    USER = "USER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class OrgRole(str, Enum):
    """Role within one organization, lowest privilege first."""

    VIEWER = "VIEWER"
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"
    OWNER = "OWNER"


def normalize_email(email: str) -> str:
    """Case-fold and trim an email address for storage and lookup."""
    return email.strip().lower()


@dataclass
class User:
    """User account.

    Attributes:
        id: Unique identifier (UUID string).
        email: Normalized email address, globally unique.
        password_hash: Credential hash. None for accounts without a password,
            which can never log in with one.
        name: Optional display name.
        platform_role: Platform-wide role.
        status: Account status.
        email_verified: Whether the email address has been proven.
        created_at: Timestamp when the user was created.
        updated_at: Timestamp when the user was last updated.
        last_login_at: Timestamp of last successful login (nullable).
    """

    id: str
    email: str
    password_hash: str | None
    name: str | None = None
    platform_role: PlatformRole = PlatformRole.USER
    status: UserStatus = UserStatus.PENDING_VERIFICATION
    email_verified: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_login_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate user data after initialization."""
        if not self.id:
            raise ValueError("User ID is required")
        if not self.email:
            raise ValueError("Email is required")


@dataclass
class OrganizationMembership:
    """A user's role within one organization."""

    user_id: str
    organization_id: str
    role: str
