"""Store interfaces consumed by the auth service.

These protocols describe the persistence operations the auth flows rely on.
The SQLAlchemy repositories in ``infrastructure.persistence.repositories``
implement them; any other store with the same semantics can be swapped in.

Conditional updates report how many rows they changed. That count is the
authoritative signal of whether *this* call performed the change.
"""

from typing import Protocol

from copilot_auth.domain.entities import (
    AuditLogEntry,
    EmailVerificationToken,
    OrganizationMembership,
    PasswordResetToken,
    RefreshToken,
    User,
)


class UnitOfWork(Protocol):
    """Transaction boundary shared by the repositories of one request."""

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UserRepositoryProtocol(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def create(self, user: User) -> User: ...

    async def update(self, user: User) -> User: ...

    async def get_organizations(self, user_id: str) -> list[OrganizationMembership]: ...


class RefreshTokenRepositoryProtocol(Protocol):
    async def get_by_hash(self, token_hash: str) -> RefreshToken | None: ...

    async def create(self, token: RefreshToken) -> RefreshToken: ...

    async def revoke(self, token_id: str) -> bool: ...

    async def revoke_for_user(self, token_id: str, user_id: str) -> bool: ...

    async def revoke_all_for_user(self, user_id: str) -> int: ...

    async def list_active_for_user(self, user_id: str) -> list[RefreshToken]: ...


class EmailVerificationRepositoryProtocol(Protocol):
    async def list_candidates(self) -> list[EmailVerificationToken]: ...

    async def create(self, token: EmailVerificationToken) -> EmailVerificationToken: ...

    async def delete(self, token_id: str) -> bool: ...

    async def delete_for_user(self, user_id: str) -> int: ...

    async def delete_expired(self) -> int: ...


class PasswordResetRepositoryProtocol(Protocol):
    async def list_unused_candidates(self) -> list[PasswordResetToken]: ...

    async def create(self, token: PasswordResetToken) -> PasswordResetToken: ...

    async def mark_as_used(self, token_id: str) -> bool: ...

    async def delete(self, token_id: str) -> bool: ...

    async def delete_for_user(self, user_id: str) -> int: ...

    async def delete_spent_for_user(self, user_id: str) -> int: ...

    async def delete_expired(self) -> int: ...


class AuditLogRepositoryProtocol(Protocol):
    async def append(self, entry: AuditLogEntry) -> AuditLogEntry: ...
