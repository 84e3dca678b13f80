"""Tests for the verification and reset token repositories."""

from datetime import datetime, timedelta, timezone

import pytest

from copilot_auth.domain.entities import EmailVerificationToken, PasswordResetToken
from copilot_auth.infrastructure.persistence.repositories import (
    EmailVerificationRepository,
    PasswordResetRepository,
)


def expires(seconds: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)


@pytest.mark.asyncio
async def test_verification_candidates_include_expired_rows(db_session, create_user):
    user = await create_user()
    repo = EmailVerificationRepository(db_session)
    live = await repo.create(
        EmailVerificationToken(user_id=user.id, email=user.email, token_hash="h1", expires_at=expires(60))
    )
    expired = await repo.create(
        EmailVerificationToken(user_id=user.id, email=user.email, token_hash="h2", expires_at=expires(-60))
    )
    await db_session.commit()

    candidates = await repo.list_candidates()

    assert {c.id for c in candidates} == {live.id, expired.id}
    assert next(c for c in candidates if c.id == expired.id).is_expired()


@pytest.mark.asyncio
async def test_verification_sweep_deletes_only_expired(db_session, create_user):
    user = await create_user()
    repo = EmailVerificationRepository(db_session)
    live = await repo.create(
        EmailVerificationToken(user_id=user.id, email=user.email, token_hash="h1", expires_at=expires(60))
    )
    await repo.create(
        EmailVerificationToken(user_id=user.id, email=user.email, token_hash="h2", expires_at=expires(-60))
    )
    await db_session.commit()

    assert await repo.delete_expired() == 1
    await db_session.commit()

    assert [c.id for c in await repo.list_candidates()] == [live.id]


@pytest.mark.asyncio
async def test_reset_token_can_be_marked_used_once(db_session, create_user):
    user = await create_user()
    repo = PasswordResetRepository(db_session)
    token = await repo.create(
        PasswordResetToken(user_id=user.id, email=user.email, token_hash="h1", expires_at=expires(60))
    )
    await db_session.commit()

    assert await repo.mark_as_used(token.id) is True
    assert await repo.mark_as_used(token.id) is False
    await db_session.commit()

    assert await repo.list_unused_candidates() == []


@pytest.mark.asyncio
async def test_delete_spent_for_user(db_session, create_user):
    user = await create_user()
    repo = PasswordResetRepository(db_session)
    used = await repo.create(
        PasswordResetToken(user_id=user.id, email=user.email, token_hash="h1", expires_at=expires(60))
    )
    await repo.create(
        PasswordResetToken(user_id=user.id, email=user.email, token_hash="h2", expires_at=expires(-60))
    )
    pending = await repo.create(
        PasswordResetToken(user_id=user.id, email=user.email, token_hash="h3", expires_at=expires(60))
    )
    await repo.mark_as_used(used.id)
    await db_session.commit()

    assert await repo.delete_spent_for_user(user.id) == 2
    await db_session.commit()

    assert [t.id for t in await repo.list_unused_candidates()] == [pending.id]
