"""Repository for email verification token operations.

Verification tokens are stored with a per-row salted hash, so there is no
lookup by token value; callers fetch the candidate set and compare each
row themselves.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from copilot_auth.domain.entities import EmailVerificationToken
from copilot_auth.infrastructure.persistence.database import as_utc
from copilot_auth.infrastructure.persistence.models import EmailVerificationTokenModel


class EmailVerificationRepository:
    """Repository for email verification token database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    def _to_model(self, entity: EmailVerificationToken) -> EmailVerificationTokenModel:
        """Convert domain entity to infrastructure model."""
        return EmailVerificationTokenModel(
            id=entity.id,
            user_id=entity.user_id,
            email=entity.email,
            token_hash=entity.token_hash,
            expires_at=entity.expires_at,
            created_at=entity.created_at,
        )

    def _to_entity(self, model: EmailVerificationTokenModel) -> EmailVerificationToken:
        """Convert infrastructure model to domain entity."""
        return EmailVerificationToken(
            id=model.id,
            user_id=model.user_id,
            email=model.email,
            token_hash=model.token_hash,
            expires_at=as_utc(model.expires_at),
            created_at=as_utc(model.created_at),
        )

    async def create(self, token: EmailVerificationToken) -> EmailVerificationToken:
        """Store a new email verification token.

        Args:
            token: The EmailVerificationToken entity to store.

        Returns:
            The stored entity.
        """
        model = self._to_model(token)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def list_candidates(self) -> list[EmailVerificationToken]:
        """List every stored verification token, expired ones included.

        Returns:
            All verification tokens.
        """
        result = await self._session.execute(select(EmailVerificationTokenModel))
        return [self._to_entity(m) for m in result.scalars().all()]

    async def delete(self, token_id: str) -> bool:
        """Delete a verification token.

        Args:
            token_id: The token's UUID.

        Returns:
            True if a row was deleted.
        """
        stmt = delete(EmailVerificationTokenModel).where(EmailVerificationTokenModel.id == token_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete_for_user(self, user_id: str) -> int:
        """Delete all verification tokens of a user.

        Args:
            user_id: The user's UUID.

        Returns:
            Number of tokens deleted.
        """
        stmt = delete(EmailVerificationTokenModel).where(
            EmailVerificationTokenModel.user_id == user_id
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    async def delete_expired(self) -> int:
        """Delete all expired verification tokens.

        Returns:
            Number of tokens deleted.
        """
        now = datetime.now(timezone.utc)
        stmt = delete(EmailVerificationTokenModel).where(
            EmailVerificationTokenModel.expires_at < now
        ).execution_options(synchronize_session=False)
        result = await self._session.execute(stmt)
        return result.rowcount
