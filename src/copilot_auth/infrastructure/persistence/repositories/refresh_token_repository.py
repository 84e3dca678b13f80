"""Repository for refresh token operations.

Every revocation is a conditional update on ``revoked_at IS NULL``. The
returned row count tells the caller whether its own call performed the
revocation, which settles concurrent refresh races.
"""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from copilot_auth.domain.entities import RefreshToken
from copilot_auth.infrastructure.persistence.database import as_utc
from copilot_auth.infrastructure.persistence.models import RefreshTokenModel


class RefreshTokenRepository:
    """Repository for refresh token database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    def _to_entity(self, model: RefreshTokenModel) -> RefreshToken:
        return RefreshToken(
            id=model.id,
            user_id=model.user_id,
            token_hash=model.token_hash,
            expires_at=as_utc(model.expires_at),
            device_info=model.device_info,
            ip_address=model.ip_address,
            revoked_at=as_utc(model.revoked_at),
            created_at=as_utc(model.created_at),
        )

    async def create(self, token: RefreshToken) -> RefreshToken:
        """Store a new refresh token.

        Args:
            token: The RefreshToken entity to store.

        Returns:
            The stored entity.
        """
        model = RefreshTokenModel(
            id=token.id,
            user_id=token.user_id,
            token_hash=token.token_hash,
            device_info=token.device_info,
            ip_address=token.ip_address,
            expires_at=token.expires_at,
            revoked_at=token.revoked_at,
            created_at=token.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Look up a refresh token by its hash.

        Args:
            token_hash: SHA-256 hex digest of the raw token.

        Returns:
            The RefreshToken if found, None otherwise.
        """
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.token_hash == token_hash)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def revoke(self, token_id: str) -> bool:
        """Revoke a refresh token by ID if it is still active.

        Args:
            token_id: The token's ID.

        Returns:
            True if this call revoked the token, False if it was already
            revoked or does not exist.
        """
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.id == token_id,
                RefreshTokenModel.revoked_at.is_(None),
            )
            .values(revoked_at=datetime.now(timezone.utc))
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def revoke_for_user(self, token_id: str, user_id: str) -> bool:
        """Revoke one of a user's sessions, ignoring sessions of other users.

        Args:
            token_id: The token's ID.
            user_id: The owner the token must belong to.

        Returns:
            True if this call revoked the token.
        """
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.id == token_id,
                RefreshTokenModel.user_id == user_id,
                RefreshTokenModel.revoked_at.is_(None),
            )
            .values(revoked_at=datetime.now(timezone.utc))
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: str) -> int:
        """Revoke all active refresh tokens for a user.

        Idempotent: a second call finds nothing left to revoke.

        Args:
            user_id: The user's UUID.

        Returns:
            Number of tokens revoked by this call.
        """
        stmt = (
            update(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == user_id,
                RefreshTokenModel.revoked_at.is_(None),
            )
            .values(revoked_at=datetime.now(timezone.utc))
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    async def list_active_for_user(self, user_id: str) -> list[RefreshToken]:
        """List a user's unrevoked, unexpired sessions, newest first.

        Args:
            user_id: The user's UUID.

        Returns:
            Active sessions.
        """
        stmt = (
            select(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == user_id,
                RefreshTokenModel.revoked_at.is_(None),
                RefreshTokenModel.expires_at > datetime.now(timezone.utc),
            )
            .order_by(RefreshTokenModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]
