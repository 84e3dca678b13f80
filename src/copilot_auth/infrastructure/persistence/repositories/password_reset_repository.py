"""Repository for password reset token operations."""

from datetime import datetime, timezone

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from copilot_auth.domain.entities import PasswordResetToken
from copilot_auth.infrastructure.persistence.database import as_utc
from copilot_auth.infrastructure.persistence.models import PasswordResetTokenModel


class PasswordResetRepository:
    """Repository for password reset token database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    def _to_entity(self, model: PasswordResetTokenModel) -> PasswordResetToken:
        """Convert infrastructure model to domain entity."""
        return PasswordResetToken(
            id=model.id,
            user_id=model.user_id,
            email=model.email,
            token_hash=model.token_hash,
            expires_at=as_utc(model.expires_at),
            used=model.used,
            created_at=as_utc(model.created_at),
        )

    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        """Store a new password reset token.

        Args:
            token: The PasswordResetToken entity to store.

        Returns:
            The stored entity.
        """
        model = PasswordResetTokenModel(
            id=token.id,
            user_id=token.user_id,
            email=token.email,
            token_hash=token.token_hash,
            expires_at=token.expires_at,
            used=token.used,
            created_at=token.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def list_unused_candidates(self) -> list[PasswordResetToken]:
        """List every unused reset token, expired ones included.

        Returns:
            All unused reset tokens.
        """
        stmt = select(PasswordResetTokenModel).where(
            PasswordResetTokenModel.used == False  # noqa: E712
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def mark_as_used(self, token_id: str) -> bool:
        """Mark a reset token as used if nobody else has.

        Args:
            token_id: The token's UUID.

        Returns:
            True if this call flipped the flag.
        """
        stmt = (
            update(PasswordResetTokenModel)
            .where(
                PasswordResetTokenModel.id == token_id,
                PasswordResetTokenModel.used == False,  # noqa: E712
            )
            .values(used=True)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete(self, token_id: str) -> bool:
        stmt = delete(PasswordResetTokenModel).where(PasswordResetTokenModel.id == token_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete_for_user(self, user_id: str) -> int:
        """Delete all reset tokens of a user.

        Args:
            user_id: The user's UUID.

        Returns:
            Number of tokens deleted.
        """
        stmt = delete(PasswordResetTokenModel).where(PasswordResetTokenModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.rowcount

    async def delete_spent_for_user(self, user_id: str) -> int:
        """Delete a user's used or expired reset tokens.

        Args:
            user_id: The user's UUID.

        Returns:
            Number of tokens deleted.
        """
        now = datetime.now(timezone.utc)
        stmt = delete(PasswordResetTokenModel).where(
            PasswordResetTokenModel.user_id == user_id,
            or_(
                PasswordResetTokenModel.used == True,  # noqa: E712
                PasswordResetTokenModel.expires_at < now,
            ),
        ).execution_options(synchronize_session=False)
        result = await self._session.execute(stmt)
        return result.rowcount

    async def delete_expired(self) -> int:
        """Delete all expired reset tokens.

        Returns:
            Number of tokens deleted.
        """
        now = datetime.now(timezone.utc)
        stmt = (
            delete(PasswordResetTokenModel)
            .where(PasswordResetTokenModel.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount
