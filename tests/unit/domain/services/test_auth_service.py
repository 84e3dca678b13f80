"""Unit tests for AuthService with mocked repositories."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock, call, patch

import pytest

from copilot_auth.domain.entities import (
    ClientInfo,
    EmailVerificationToken,
    PasswordResetToken,
    RefreshToken,
    User,
    UserStatus,
)
from copilot_auth.domain.exceptions import AuthError, AuthErrorCode
from copilot_auth.domain.services import AuditAction, AuthService, PasswordValidationError
from copilot_auth.infrastructure.auth import CredentialHasher, JWTService
from copilot_auth.infrastructure.services import TokenService

PASSWORD = "Correct-Horse-42!"
CLIENT = ClientInfo(ip_address="203.0.113.7", user_agent="pytest", device_info="pytest")


def in_future(seconds: int = 3600) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def mock_user_repo():
    repo = AsyncMock()
    repo.get_organizations.return_value = []
    return repo


@pytest.fixture
def mock_refresh_token_repo():
    return AsyncMock()


@pytest.fixture
def mock_verification_repo():
    return AsyncMock()


@pytest.fixture
def mock_reset_repo():
    return AsyncMock()


@pytest.fixture
def mock_audit():
    return AsyncMock()


@pytest.fixture
def mock_validator():
    validator = AsyncMock()
    validator.validate.return_value = []
    return validator


@pytest.fixture
def mock_email_sender():
    return AsyncMock()


@pytest.fixture
def token_hasher(settings):
    return CredentialHasher.for_tokens(settings)


@pytest.fixture
def jwt_service(settings):
    return JWTService(settings)


@pytest.fixture
def make_service(
    settings,
    mock_session,
    mock_user_repo,
    mock_refresh_token_repo,
    mock_verification_repo,
    mock_reset_repo,
    mock_audit,
    jwt_service,
    password_hasher,
    token_hasher,
    mock_validator,
    mock_email_sender,
):
    def _make(**setting_overrides) -> AuthService:
        return AuthService(
            session=mock_session,
            user_repo=mock_user_repo,
            refresh_token_repo=mock_refresh_token_repo,
            verification_repo=mock_verification_repo,
            reset_repo=mock_reset_repo,
            audit_service=mock_audit,
            jwt_service=jwt_service,
            password_hasher=password_hasher,
            token_hasher=token_hasher,
            password_validator=mock_validator,
            email_sender=mock_email_sender,
            settings=settings.model_copy(update=setting_overrides),
        )

    return _make


@pytest.fixture
def auth_service(make_service):
    return make_service()


@pytest.fixture
def active_user(password_hasher):
    return User(
        id="user-1",
        email="alice@example.com",
        password_hash=password_hasher.hash(PASSWORD),
        status=UserStatus.ACTIVE,
        email_verified=True,
    )


def audited_actions(mock_audit) -> list[str]:
    return [c.args[0] for c in mock_audit.log.call_args_list]


class TestRegister:
    @pytest.mark.asyncio
    async def test_weak_password_is_rejected_before_lookup(
        self, auth_service, mock_validator, mock_user_repo
    ):
        mock_validator.validate.return_value = [
            PasswordValidationError("password", "Password must be at least 12 characters", "password_too_short")
        ]

        with pytest.raises(AuthError) as exc_info:
            await auth_service.register("alice@example.com", "weak")

        assert exc_info.value.code == AuthErrorCode.WEAK_PASSWORD
        assert exc_info.value.details == ["Password must be at least 12 characters"]
        mock_user_repo.get_by_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_email(self, auth_service, mock_user_repo, mock_audit, active_user):
        mock_user_repo.get_by_email.return_value = active_user

        with pytest.raises(AuthError) as exc_info:
            await auth_service.register("Alice@Example.com", PASSWORD)

        assert exc_info.value.code == AuthErrorCode.EMAIL_EXISTS
        mock_user_repo.get_by_email.assert_awaited_once_with("alice@example.com")
        mock_user_repo.create.assert_not_called()
        assert audited_actions(mock_audit) == [AuditAction.REGISTER_EMAIL_EXISTS]

    @pytest.mark.asyncio
    async def test_creates_pending_user_and_sends_verification(
        self,
        auth_service,
        mock_user_repo,
        mock_verification_repo,
        mock_email_sender,
        mock_session,
        token_hasher,
    ):
        mock_user_repo.get_by_email.return_value = None
        mock_user_repo.create.side_effect = lambda user: user

        user = await auth_service.register(" Alice@Example.com ", PASSWORD, name="Alice")

        assert user.email == "alice@example.com"
        assert user.status == UserStatus.PENDING_VERIFICATION
        assert user.email_verified is False
        assert user.password_hash != PASSWORD
        mock_session.commit.assert_awaited()

        stored_token = mock_verification_repo.create.call_args.args[0]
        email, raw_token = mock_email_sender.send_verification_email.call_args.args
        assert email == "alice@example.com"
        assert len(raw_token) == 64
        assert stored_token.token_hash != raw_token
        assert token_hasher.verify(raw_token, stored_token.token_hash)

    @pytest.mark.asyncio
    async def test_email_failure_does_not_fail_registration(
        self, auth_service, mock_user_repo, mock_email_sender
    ):
        mock_user_repo.get_by_email.return_value = None
        mock_user_repo.create.side_effect = lambda user: user
        mock_email_sender.send_verification_email.side_effect = RuntimeError("smtp down")

        user = await auth_service.register("alice@example.com", PASSWORD)

        assert user.email == "alice@example.com"


class TestLogin:
    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service, mock_user_repo, mock_audit):
        mock_user_repo.get_by_email.return_value = None

        with pytest.raises(AuthError) as exc_info:
            await auth_service.login("nobody@example.com", PASSWORD)

        assert exc_info.value.code == AuthErrorCode.INVALID_CREDENTIALS
        assert audited_actions(mock_audit) == [AuditAction.LOGIN_USER_NOT_FOUND]

    @pytest.mark.asyncio
    async def test_wrong_password_is_indistinguishable(self, auth_service, mock_user_repo, active_user):
        mock_user_repo.get_by_email.return_value = active_user

        with pytest.raises(AuthError) as exc_info:
            await auth_service.login("alice@example.com", "Wrong-Password-1!")

        assert exc_info.value.code == AuthErrorCode.INVALID_CREDENTIALS
        assert exc_info.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, verified, code",
        [
            (UserStatus.SUSPENDED, True, AuthErrorCode.ACCOUNT_SUSPENDED),
            (UserStatus.DELETED, True, AuthErrorCode.ACCOUNT_DELETED),
            (UserStatus.PENDING_VERIFICATION, False, AuthErrorCode.EMAIL_NOT_VERIFIED),
            (UserStatus.ACTIVE, False, AuthErrorCode.EMAIL_NOT_VERIFIED),
        ],
    )
    async def test_blocked_statuses(
        self, auth_service, mock_user_repo, mock_refresh_token_repo, active_user, status, verified, code
    ):
        active_user.status = status
        active_user.email_verified = verified
        mock_user_repo.get_by_email.return_value = active_user

        with pytest.raises(AuthError) as exc_info:
            await auth_service.login("alice@example.com", PASSWORD)

        assert exc_info.value.code == code
        mock_refresh_token_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_issues_tokens_and_stores_session(
        self, auth_service, mock_user_repo, mock_refresh_token_repo, jwt_service, active_user
    ):
        mock_user_repo.get_by_email.return_value = active_user

        tokens = await auth_service.login("alice@example.com", PASSWORD, client=CLIENT)

        access = jwt_service.verify_access_token(tokens.access_token)
        refresh = jwt_service.verify_refresh_token(tokens.refresh_token)
        assert access.sub == "user-1"
        assert refresh.sub == "user-1"

        stored = mock_refresh_token_repo.create.call_args.args[0]
        assert stored.id == refresh.jti
        assert stored.token_hash == TokenService.hash_token(tokens.refresh_token)
        assert stored.ip_address == "203.0.113.7"
        assert stored.device_info == "pytest"
        assert active_user.last_login_at is not None

    @pytest.mark.asyncio
    async def test_weak_hash_is_upgraded(self, auth_service, mock_user_repo):
        weak = CredentialHasher(time_cost=1, memory_cost=1024, parallelism=1)
        user = User(
            id="user-1",
            email="alice@example.com",
            password_hash=weak.hash(PASSWORD),
            status=UserStatus.ACTIVE,
            email_verified=True,
        )
        old_hash = user.password_hash
        mock_user_repo.get_by_email.return_value = user

        await auth_service.login("alice@example.com", PASSWORD)

        updated = mock_user_repo.update.call_args.args[0]
        assert updated.password_hash != old_hash
        assert auth_service.password_hasher.needs_rehash(updated.password_hash) is False


class TestRefresh:
    def stored_for(self, jwt_service, user_id: str = "user-1", **kwargs) -> tuple[str, RefreshToken]:
        token, jti = jwt_service.create_refresh_token(user_id)
        stored = RefreshToken(
            id=jti,
            user_id=user_id,
            token_hash=TokenService.hash_token(token),
            expires_at=kwargs.pop("expires_at", in_future()),
            **kwargs,
        )
        return token, stored

    @pytest.mark.asyncio
    async def test_rotation(
        self, auth_service, jwt_service, mock_user_repo, mock_refresh_token_repo, active_user
    ):
        token, stored = self.stored_for(jwt_service)
        mock_refresh_token_repo.get_by_hash.return_value = stored
        mock_refresh_token_repo.revoke.return_value = True
        mock_user_repo.get_by_id.return_value = active_user

        tokens = await auth_service.refresh(token, client=CLIENT)

        assert tokens.refresh_token != token
        mock_refresh_token_repo.revoke.assert_awaited_once_with(stored.id)
        mock_refresh_token_repo.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_without_rotation_keeps_refresh_token(
        self, make_service, jwt_service, mock_user_repo, mock_refresh_token_repo, active_user
    ):
        service = make_service(refresh_token_rotation=False)
        token, stored = self.stored_for(jwt_service)
        mock_refresh_token_repo.get_by_hash.return_value = stored
        mock_user_repo.get_by_id.return_value = active_user

        tokens = await service.refresh(token)

        assert tokens.refresh_token == token
        assert jwt_service.verify_access_token(tokens.access_token).sub == "user-1"
        mock_refresh_token_repo.revoke.assert_not_called()
        mock_refresh_token_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_reused_token_revokes_every_session(
        self, auth_service, jwt_service, mock_refresh_token_repo, mock_audit, mock_session
    ):
        token, stored = self.stored_for(jwt_service, revoked_at=datetime.now(timezone.utc))
        mock_refresh_token_repo.get_by_hash.return_value = stored
        mock_refresh_token_repo.revoke_all_for_user.return_value = 3

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh(token)

        assert exc_info.value.code == AuthErrorCode.TOKEN_REVOKED
        mock_refresh_token_repo.revoke_all_for_user.assert_awaited_once_with("user-1")
        mock_session.commit.assert_awaited()
        assert audited_actions(mock_audit) == [AuditAction.REFRESH_REVOKED_TOKEN_USED]

    @pytest.mark.asyncio
    async def test_lost_revocation_race_is_treated_as_reuse(
        self, auth_service, jwt_service, mock_user_repo, mock_refresh_token_repo, mock_session, active_user
    ):
        token, stored = self.stored_for(jwt_service)
        mock_refresh_token_repo.get_by_hash.return_value = stored
        mock_refresh_token_repo.revoke.return_value = False
        mock_user_repo.get_by_id.return_value = active_user

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh(token)

        assert exc_info.value.code == AuthErrorCode.TOKEN_REVOKED
        mock_session.rollback.assert_awaited()
        mock_refresh_token_repo.revoke_all_for_user.assert_awaited_once_with("user-1")
        mock_refresh_token_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_token(self, auth_service, jwt_service, mock_refresh_token_repo):
        token, _ = self.stored_for(jwt_service)
        mock_refresh_token_repo.get_by_hash.return_value = None

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh(token)

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN

    @pytest.mark.asyncio
    async def test_subject_must_match_stored_owner(self, auth_service, jwt_service, mock_refresh_token_repo):
        token, stored = self.stored_for(jwt_service)
        stored.user_id = "someone-else"
        mock_refresh_token_repo.get_by_hash.return_value = stored

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh(token)

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN
        mock_refresh_token_repo.revoke_all_for_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_expired_row(self, auth_service, jwt_service, mock_refresh_token_repo):
        token, stored = self.stored_for(jwt_service, expires_at=in_future(-60))
        mock_refresh_token_repo.get_by_hash.return_value = stored

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh(token)

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN

    @pytest.mark.asyncio
    async def test_access_token_is_not_accepted(self, auth_service, mock_refresh_token_repo, jwt_service, active_user):
        tokens_access = jwt_service.create_access_token(await auth_service._access_payload(active_user))

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh(tokens_access)

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN
        mock_refresh_token_repo.get_by_hash.assert_not_called()

    @pytest.mark.asyncio
    async def test_suspended_user_cannot_refresh(
        self, auth_service, jwt_service, mock_user_repo, mock_refresh_token_repo, active_user
    ):
        token, stored = self.stored_for(jwt_service)
        active_user.status = UserStatus.SUSPENDED
        mock_refresh_token_repo.get_by_hash.return_value = stored
        mock_user_repo.get_by_id.return_value = active_user

        with pytest.raises(AuthError) as exc_info:
            await auth_service.refresh(token)

        assert exc_info.value.code == AuthErrorCode.ACCOUNT_SUSPENDED
        mock_refresh_token_repo.revoke.assert_not_called()


class TestLogout:
    @pytest.mark.asyncio
    async def test_unknown_token_is_silent(self, auth_service, mock_refresh_token_repo, mock_audit):
        mock_refresh_token_repo.get_by_hash.return_value = None

        await auth_service.logout("not-a-token")

        mock_refresh_token_repo.revoke.assert_not_called()
        mock_audit.log.assert_not_called()

    @pytest.mark.asyncio
    async def test_logout_all_returns_count(self, auth_service, mock_refresh_token_repo):
        mock_refresh_token_repo.revoke_all_for_user.return_value = 2

        assert await auth_service.logout_all("user-1") == 2


class TestVerifyEmail:
    @pytest.mark.asyncio
    async def test_short_token_is_rejected_without_scanning(self, auth_service, mock_verification_repo):
        with pytest.raises(AuthError) as exc_info:
            await auth_service.verify_email("short")

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN
        mock_verification_repo.list_candidates.assert_not_called()

    @pytest.mark.asyncio
    async def test_every_candidate_is_compared(
        self, auth_service, mock_verification_repo, mock_user_repo, token_hasher
    ):
        """The scan does not stop at the first match."""
        raw = TokenService.generate_token()
        candidates = [
            EmailVerificationToken(
                user_id=f"user-{i}",
                email=f"u{i}@example.com",
                token_hash=token_hasher.hash(raw if i == 0 else TokenService.generate_token()),
                expires_at=in_future(),
            )
            for i in range(3)
        ]
        mock_verification_repo.list_candidates.return_value = candidates
        mock_user_repo.get_by_id.return_value = User(
            id="user-0",
            email="u0@example.com",
            password_hash="x",
            status=UserStatus.PENDING_VERIFICATION,
        )
        with patch.object(token_hasher, "verify_async", wraps=token_hasher.verify_async) as spy:
            user = await auth_service.verify_email(raw)

        assert spy.await_count == 3
        assert user.status == UserStatus.ACTIVE
        assert user.email_verified is True
        mock_verification_repo.delete.assert_awaited_once_with(candidates[0].id)

    @pytest.mark.asyncio
    async def test_expired_match(self, auth_service, mock_verification_repo, mock_user_repo, token_hasher):
        raw = TokenService.generate_token()
        expired = EmailVerificationToken(
            user_id="user-0",
            email="u0@example.com",
            token_hash=token_hasher.hash(raw),
            expires_at=in_future(-60),
        )
        mock_verification_repo.list_candidates.return_value = [expired]

        with pytest.raises(AuthError) as exc_info:
            await auth_service.verify_email(raw)

        assert exc_info.value.code == AuthErrorCode.VERIFICATION_EXPIRED
        mock_verification_repo.delete.assert_awaited_once_with(expired.id)
        mock_user_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_lost_redemption_race(
        self, auth_service, mock_verification_repo, mock_user_repo, mock_session, token_hasher
    ):
        """A token deleted by a concurrent request does not verify the user twice."""
        raw = TokenService.generate_token()
        mock_verification_repo.list_candidates.return_value = [
            EmailVerificationToken(
                user_id="user-0",
                email="u0@example.com",
                token_hash=token_hasher.hash(raw),
                expires_at=in_future(),
            )
        ]
        mock_user_repo.get_by_id.return_value = User(
            id="user-0",
            email="u0@example.com",
            password_hash="x",
            status=UserStatus.PENDING_VERIFICATION,
        )
        mock_verification_repo.delete.return_value = False

        with pytest.raises(AuthError) as exc_info:
            await auth_service.verify_email(raw)

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN
        mock_user_repo.update.assert_not_called()
        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_called()


class TestPasswordReset:
    @pytest.fixture
    def reset_token(self, active_user):
        raw = TokenService.generate_token()
        token = PasswordResetToken(
            user_id=active_user.id,
            email=active_user.email,
            token_hash=TokenService.hash_token(raw),
            expires_at=in_future(900),
        )
        return raw, token

    @pytest.mark.asyncio
    async def test_request_replaces_earlier_tokens(
        self, auth_service, mock_user_repo, mock_reset_repo, mock_email_sender, active_user
    ):
        mock_user_repo.get_by_email.return_value = active_user
        calls = Mock()
        calls.attach_mock(mock_reset_repo.delete_for_user, "delete_for_user")
        calls.attach_mock(mock_reset_repo.create, "create")

        await auth_service.request_password_reset("Alice@Example.com ", client=CLIENT)

        assert [c[0] for c in calls.mock_calls] == ["delete_for_user", "create"]
        mock_reset_repo.delete_for_user.assert_awaited_once_with(active_user.id)
        stored = mock_reset_repo.create.call_args.args[0]
        email, raw = mock_email_sender.send_password_reset_email.call_args.args
        assert email == "alice@example.com"
        assert stored.token_hash == TokenService.hash_token(raw)
        assert stored.token_hash != raw

    @pytest.mark.asyncio
    async def test_request_for_unknown_email_is_silent(
        self, auth_service, mock_user_repo, mock_reset_repo, mock_email_sender, mock_audit
    ):
        mock_user_repo.get_by_email.return_value = None

        await auth_service.request_password_reset("ghost@example.com")

        mock_reset_repo.create.assert_not_called()
        mock_email_sender.send_password_reset_email.assert_not_called()
        assert audited_actions(mock_audit) == [AuditAction.PASSWORD_RESET_EMAIL_NOT_FOUND]

    @pytest.mark.asyncio
    async def test_reset_revokes_sessions_in_one_transaction(
        self,
        auth_service,
        mock_user_repo,
        mock_reset_repo,
        mock_refresh_token_repo,
        mock_session,
        mock_email_sender,
        active_user,
        reset_token,
        password_hasher,
    ):
        raw, token = reset_token
        mock_reset_repo.list_unused_candidates.return_value = [token]
        mock_reset_repo.mark_as_used.return_value = True
        mock_user_repo.get_by_id.return_value = active_user
        mock_refresh_token_repo.revoke_all_for_user.return_value = 2
        calls = Mock()
        calls.attach_mock(mock_reset_repo.mark_as_used, "mark_as_used")
        calls.attach_mock(mock_user_repo.update, "update_user")
        calls.attach_mock(mock_refresh_token_repo.revoke_all_for_user, "revoke_all")
        calls.attach_mock(mock_session.commit, "commit")

        await auth_service.reset_password(raw, "Brand-New-Secret-77?", client=CLIENT)

        assert calls.mock_calls[:4] == [
            call.mark_as_used(token.id),
            call.update_user(active_user),
            call.revoke_all(active_user.id),
            call.commit(),
        ]
        assert password_hasher.verify("Brand-New-Secret-77?", active_user.password_hash)
        mock_reset_repo.delete_spent_for_user.assert_awaited_once_with(active_user.id)
        mock_email_sender.send_password_changed_email.assert_awaited_once_with(active_user.email)

    @pytest.mark.asyncio
    async def test_lost_redemption_race(
        self,
        auth_service,
        mock_user_repo,
        mock_reset_repo,
        mock_refresh_token_repo,
        mock_session,
        active_user,
        reset_token,
    ):
        raw, token = reset_token
        mock_reset_repo.list_unused_candidates.return_value = [token]
        mock_reset_repo.mark_as_used.return_value = False
        mock_user_repo.get_by_id.return_value = active_user

        with pytest.raises(AuthError) as exc_info:
            await auth_service.reset_password(raw, "Brand-New-Secret-77?")

        assert exc_info.value.code == AuthErrorCode.INVALID_TOKEN
        mock_user_repo.update.assert_not_called()
        mock_refresh_token_repo.revoke_all_for_user.assert_not_called()
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expired_token_is_deleted(self, auth_service, mock_reset_repo, reset_token):
        raw, token = reset_token
        token.expires_at = in_future(-60)
        mock_reset_repo.list_unused_candidates.return_value = [token]

        with pytest.raises(AuthError) as exc_info:
            await auth_service.reset_password(raw, "Brand-New-Secret-77?")

        assert exc_info.value.code == AuthErrorCode.VERIFICATION_EXPIRED
        mock_reset_repo.delete.assert_awaited_once_with(token.id)
        mock_reset_repo.mark_as_used.assert_not_called()

    @pytest.mark.asyncio
    async def test_weak_password_leaves_token_unused(
        self, auth_service, mock_user_repo, mock_reset_repo, mock_validator, active_user, reset_token
    ):
        raw, token = reset_token
        mock_reset_repo.list_unused_candidates.return_value = [token]
        mock_user_repo.get_by_id.return_value = active_user
        mock_validator.validate.return_value = [
            PasswordValidationError(field="password", message="Too short", code="password_too_short")
        ]

        with pytest.raises(AuthError) as exc_info:
            await auth_service.reset_password(raw, "short")

        assert exc_info.value.code == AuthErrorCode.WEAK_PASSWORD
        assert exc_info.value.details == ["Too short"]
        mock_reset_repo.mark_as_used.assert_not_called()
        mock_validator.validate.assert_awaited_once_with("short", active_user.email)
