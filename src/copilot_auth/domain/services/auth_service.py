"""Authentication service.

Orchestrates registration, login, token refresh, logout, email verification
and password reset on top of the credential hasher, the token codec, the
secure token generator and the store.

Transaction discipline: each operation commits its business changes in one
go, and audit entries are written only after that commit (or before raising,
when nothing is pending), so a failed audit write can never undo or
half-apply an operation.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError

from copilot_auth.core.config import Settings
from copilot_auth.core.logging import get_logger
from copilot_auth.domain.entities import (
    ClientInfo,
    EmailVerificationToken,
    PasswordResetToken,
    RefreshToken,
    User,
    UserStatus,
    normalize_email,
)
from copilot_auth.domain.exceptions import AuthError, AuthErrorCode
from copilot_auth.domain.repositories import (
    EmailVerificationRepositoryProtocol,
    PasswordResetRepositoryProtocol,
    RefreshTokenRepositoryProtocol,
    UnitOfWork,
    UserRepositoryProtocol,
)
from copilot_auth.domain.services.audit_log_service import AuditAction, AuditLogService
from copilot_auth.domain.services.password_validator import PasswordValidator
from copilot_auth.infrastructure.auth.jwt_service import JWTService
from copilot_auth.infrastructure.auth.password_hasher import CredentialHasher
from copilot_auth.infrastructure.auth.token_types import AccessTokenPayload, OrganizationClaim
from copilot_auth.infrastructure.services.email_service import EmailSender
from copilot_auth.infrastructure.services.token_service import TokenService

logger = get_logger(__name__)

# Raw single-use tokens are 64 hex chars; anything much shorter is not ours.
MIN_SINGLE_USE_TOKEN_LENGTH = 32


@dataclass
class AuthTokens:
    """Token pair handed to a client after login or refresh."""

    access_token: str
    refresh_token: str
    expires_in: int
    user: User | None = None


class AuthService:
    """Service for handling authentication business logic."""

    def __init__(
        self,
        session: UnitOfWork,
        user_repo: UserRepositoryProtocol,
        refresh_token_repo: RefreshTokenRepositoryProtocol,
        verification_repo: EmailVerificationRepositoryProtocol,
        reset_repo: PasswordResetRepositoryProtocol,
        audit_service: AuditLogService,
        jwt_service: JWTService,
        password_hasher: CredentialHasher,
        token_hasher: CredentialHasher,
        password_validator: PasswordValidator,
        email_sender: EmailSender,
        settings: Settings,
        token_service: TokenService | None = None,
    ) -> None:
        """Initialize the auth service.

        Args:
            session: Transaction boundary shared by the repositories.
            user_repo: Repository for user operations.
            refresh_token_repo: Repository for refresh token operations.
            verification_repo: Repository for email verification tokens.
            reset_repo: Repository for password reset tokens.
            audit_service: Best-effort audit log writer.
            jwt_service: Access/refresh token codec.
            password_hasher: Hasher for account passwords.
            token_hasher: Salted hasher for email verification tokens.
            password_validator: Password strength policy.
            email_sender: Outbound email collaborator.
            settings: Application settings (token lifetimes, rotation flag).
            token_service: Secure random token generator.
        """
        self.session = session
        self.user_repo = user_repo
        self.refresh_token_repo = refresh_token_repo
        self.verification_repo = verification_repo
        self.reset_repo = reset_repo
        self.audit = audit_service
        self.jwt_service = jwt_service
        self.password_hasher = password_hasher
        self.token_hasher = token_hasher
        self.password_validator = password_validator
        self.email_sender = email_sender
        self.settings = settings
        self.token_service = token_service or TokenService()

    # ------------------------------------------------------------------
    # Registration and login
    # ------------------------------------------------------------------

    async def register(
        self,
        email: str,
        password: str,
        name: str | None = None,
        client: ClientInfo | None = None,
    ) -> User:
        """Create a PENDING_VERIFICATION account and mail a verification link.

        Args:
            email: Email address (normalized before use).
            password: Plaintext password.
            name: Optional display name.
            client: Caller metadata for the audit log.

        Returns:
            The created user.

        Raises:
            AuthError: WEAK_PASSWORD with itemized violations, or
                EMAIL_EXISTS. Callers must answer EMAIL_EXISTS exactly like
                a successful registration.
        """
        email = normalize_email(email)

        errors = await self.password_validator.validate(password, email)
        if errors:
            raise AuthError(AuthErrorCode.WEAK_PASSWORD, [e.message for e in errors])

        existing = await self.user_repo.get_by_email(email)
        if existing is not None:
            await self.audit.log(
                AuditAction.REGISTER_EMAIL_EXISTS,
                user_id=existing.id,
                client=client,
            )
            raise AuthError(AuthErrorCode.EMAIL_EXISTS)

        password_hash = await self.password_hasher.hash_async(password)
        user = User(
            id=self.token_service.generate_jti(),
            email=email,
            password_hash=password_hash,
            name=name,
            status=UserStatus.PENDING_VERIFICATION,
            email_verified=False,
        )

        raw_token = self.token_service.generate_token()
        try:
            user = await self.user_repo.create(user)
            await self.verification_repo.create(
                EmailVerificationToken(
                    user_id=user.id,
                    email=email,
                    token_hash=await self.token_hasher.hash_async(raw_token),
                    expires_at=self._expires_at(self.settings.verification_token_expiry),
                )
            )
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.session.rollback()
            await self.audit.log(AuditAction.REGISTER_EMAIL_EXISTS, client=client)
            raise AuthError(AuthErrorCode.EMAIL_EXISTS)

        logger.info("User registered", user_id=user.id)
        await self.audit.log(AuditAction.REGISTER_SUCCESS, user_id=user.id, client=client)
        await self._send_email("verification", self.email_sender.send_verification_email, email, raw_token)
        return user

    async def login(self, email: str, password: str, client: ClientInfo | None = None) -> AuthTokens:
        """Authenticate with email and password.

        Args:
            email: Email address (normalized before use).
            password: Plaintext password.
            client: Caller metadata stored on the new session.

        Returns:
            Access/refresh token pair and the user.

        Raises:
            AuthError: INVALID_CREDENTIALS for an unknown email or wrong
                password (indistinguishable), ACCOUNT_SUSPENDED,
                ACCOUNT_DELETED or EMAIL_NOT_VERIFIED.
        """
        email = normalize_email(email)
        user = await self.user_repo.get_by_email(email)

        if user is None or user.password_hash is None:
            await self.password_hasher.verify_dummy_async(password)
            action = AuditAction.LOGIN_USER_NOT_FOUND if user is None else AuditAction.LOGIN_NO_PASSWORD
            await self.audit.log(
                action,
                user_id=user.id if user else None,
                client=client,
                metadata={"email": email},
            )
            raise AuthError(AuthErrorCode.INVALID_CREDENTIALS)

        if not await self.password_hasher.verify_async(password, user.password_hash):
            await self.audit.log(AuditAction.LOGIN_INVALID_PASSWORD, user_id=user.id, client=client)
            raise AuthError(AuthErrorCode.INVALID_CREDENTIALS)

        if user.status == UserStatus.SUSPENDED:
            await self.audit.log(AuditAction.LOGIN_SUSPENDED, user_id=user.id, client=client)
            raise AuthError(AuthErrorCode.ACCOUNT_SUSPENDED)
        if user.status == UserStatus.DELETED:
            await self.audit.log(AuditAction.LOGIN_DELETED, user_id=user.id, client=client)
            raise AuthError(AuthErrorCode.ACCOUNT_DELETED)
        if user.status == UserStatus.PENDING_VERIFICATION or not user.email_verified:
            await self.audit.log(AuditAction.LOGIN_NOT_VERIFIED, user_id=user.id, client=client)
            raise AuthError(AuthErrorCode.EMAIL_NOT_VERIFIED)

        if self.password_hasher.needs_rehash(user.password_hash):
            user.password_hash = await self.password_hasher.hash_async(password)
            logger.info("Password hash upgraded", user_id=user.id)
        user.last_login_at = datetime.now(timezone.utc)
        await self.user_repo.update(user)

        tokens = await self._issue_tokens(user, client)
        await self.session.commit()

        logger.info("User logged in", user_id=user.id)
        await self.audit.log(AuditAction.LOGIN_SUCCESS, user_id=user.id, client=client)
        return tokens

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def refresh(self, refresh_token: str, client: ClientInfo | None = None) -> AuthTokens:
        """Exchange a refresh token for a new access token.

        With rotation enabled the presented token is revoked and a new
        refresh token is issued in the same transaction.

        Presenting a revoked token is treated as evidence of theft: every
        active session of the user is revoked before the call is rejected.

        Args:
            refresh_token: The raw refresh token.
            client: Caller metadata.

        Returns:
            New token pair.

        Raises:
            AuthError: INVALID_TOKEN, TOKEN_REVOKED, ACCOUNT_SUSPENDED or
                ACCOUNT_DELETED.
        """
        payload = self.jwt_service.verify_refresh_token(refresh_token)
        if payload is None:
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        stored = await self.refresh_token_repo.get_by_hash(self.token_service.hash_token(refresh_token))
        if stored is None:
            await self.audit.log(
                AuditAction.REFRESH_TOKEN_NOT_FOUND,
                user_id=payload.sub,
                client=client,
            )
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        if stored.user_id != payload.sub:
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        if stored.is_revoked:
            await self._handle_token_reuse(stored, client)

        if stored.is_expired():
            await self.audit.log(AuditAction.REFRESH_EXPIRED, user_id=stored.user_id, client=client)
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        user = await self.user_repo.get_by_id(stored.user_id)
        if user is None:
            raise AuthError(AuthErrorCode.INVALID_TOKEN)
        if user.status == UserStatus.SUSPENDED:
            raise AuthError(AuthErrorCode.ACCOUNT_SUSPENDED)
        if user.status == UserStatus.DELETED:
            raise AuthError(AuthErrorCode.ACCOUNT_DELETED)

        if self.settings.refresh_token_rotation:
            if not await self.refresh_token_repo.revoke(stored.id):
                # A concurrent request revoked it first; this presentation is a reuse
                await self.session.rollback()
                await self._handle_token_reuse(stored, client)
            successor_client = client or ClientInfo(
                ip_address=stored.ip_address,
                device_info=stored.device_info,
            )
            tokens = await self._issue_tokens(user, successor_client)
        else:
            tokens = AuthTokens(
                access_token=self.jwt_service.create_access_token(await self._access_payload(user)),
                refresh_token=refresh_token,
                expires_in=self.jwt_service.expires_in,
            )
        await self.session.commit()

        await self.audit.log(
            AuditAction.REFRESH_SUCCESS,
            user_id=user.id,
            client=client,
            metadata={"rotated": self.settings.refresh_token_rotation},
        )
        return tokens

    async def logout(self, refresh_token: str, client: ClientInfo | None = None) -> None:
        """Revoke the session behind a refresh token.

        Unknown or already revoked tokens are a silent success so logout
        does not reveal which tokens exist.

        Args:
            refresh_token: The raw refresh token.
            client: Caller metadata.
        """
        stored = await self.refresh_token_repo.get_by_hash(self.token_service.hash_token(refresh_token))
        if stored is None or stored.is_revoked:
            return

        revoked = await self.refresh_token_repo.revoke(stored.id)
        await self.session.commit()
        if revoked:
            await self.audit.log(AuditAction.LOGOUT_SUCCESS, user_id=stored.user_id, client=client)

    async def logout_all(self, user_id: str, client: ClientInfo | None = None) -> int:
        """Revoke every active session of a user ("sign out everywhere").

        Args:
            user_id: The user's UUID.
            client: Caller metadata.

        Returns:
            Number of sessions revoked.
        """
        count = await self.refresh_token_repo.revoke_all_for_user(user_id)
        await self.session.commit()
        await self.audit.log(
            AuditAction.LOGOUT_ALL_SUCCESS,
            user_id=user_id,
            client=client,
            metadata={"sessions_revoked": count},
        )
        return count

    async def list_sessions(self, user_id: str) -> list[RefreshToken]:
        """List a user's active sessions, newest first."""
        return await self.refresh_token_repo.list_active_for_user(user_id)

    async def revoke_session(
        self,
        user_id: str,
        session_id: str,
        client: ClientInfo | None = None,
    ) -> bool:
        """Revoke one of the user's own sessions.

        Args:
            user_id: The session owner.
            session_id: The session (refresh token) ID.
            client: Caller metadata.

        Returns:
            True if a session was revoked, False if none matched.
        """
        revoked = await self.refresh_token_repo.revoke_for_user(session_id, user_id)
        await self.session.commit()
        if revoked:
            await self.audit.log(
                AuditAction.SESSION_REVOKED,
                user_id=user_id,
                client=client,
                metadata={"session_id": session_id},
            )
        return revoked

    async def get_user(self, user_id: str) -> User:
        """Load the user behind an access token.

        Raises:
            AuthError: INVALID_TOKEN if the user no longer exists.
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise AuthError(AuthErrorCode.INVALID_TOKEN)
        return user

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    async def verify_email(self, token: str, client: ClientInfo | None = None) -> User:
        """Redeem an email verification token.

        Args:
            token: The raw verification token.
            client: Caller metadata.

        Returns:
            The now ACTIVE, verified user.

        Raises:
            AuthError: INVALID_TOKEN, VERIFICATION_EXPIRED or ALREADY_VERIFIED.
        """
        if len(token) < MIN_SINGLE_USE_TOKEN_LENGTH:
            await self.audit.log(AuditAction.VERIFY_EMAIL_INVALID_TOKEN, client=client)
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        # Deliberate linear scan: every stored token is compared, match or
        # not, so timing does not reveal which tokens exist. Do not replace
        # with an indexed lookup.
        matched: EmailVerificationToken | None = None
        for candidate in await self.verification_repo.list_candidates():
            if await self.token_hasher.verify_async(token, candidate.token_hash) and matched is None:
                matched = candidate

        if matched is None:
            await self.audit.log(AuditAction.VERIFY_EMAIL_INVALID_TOKEN, client=client)
            await self._sweep_expired_verification_tokens()
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        if matched.is_expired():
            await self.verification_repo.delete(matched.id)
            await self.session.commit()
            await self.audit.log(AuditAction.VERIFY_EMAIL_EXPIRED, user_id=matched.user_id, client=client)
            await self._sweep_expired_verification_tokens()
            raise AuthError(AuthErrorCode.VERIFICATION_EXPIRED)

        user = await self.user_repo.get_by_id(matched.user_id)
        if user is None:
            await self.verification_repo.delete(matched.id)
            await self.session.commit()
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        if user.email_verified:
            await self.verification_repo.delete(matched.id)
            await self.session.commit()
            await self.audit.log(
                AuditAction.VERIFY_EMAIL_ALREADY_VERIFIED,
                user_id=user.id,
                client=client,
            )
            raise AuthError(AuthErrorCode.ALREADY_VERIFIED)

        if not await self.verification_repo.delete(matched.id):
            # Redeemed concurrently by another request
            await self.session.rollback()
            await self.audit.log(AuditAction.VERIFY_EMAIL_INVALID_TOKEN, user_id=user.id, client=client)
            raise AuthError(AuthErrorCode.INVALID_TOKEN)
        user.email_verified = True
        if user.status == UserStatus.PENDING_VERIFICATION:
            user.status = UserStatus.ACTIVE
        await self.user_repo.update(user)
        await self.session.commit()

        logger.info("Email verified", user_id=user.id)
        await self.audit.log(AuditAction.VERIFY_EMAIL_SUCCESS, user_id=user.id, client=client)
        await self._sweep_expired_verification_tokens()
        return user

    async def resend_verification(self, email: str, client: ClientInfo | None = None) -> None:
        """Issue a fresh verification link, invalidating earlier ones.

        Unknown and already verified addresses are a silent success.

        Args:
            email: Email address (normalized before use).
            client: Caller metadata.
        """
        email = normalize_email(email)
        user = await self.user_repo.get_by_email(email)
        if user is None or user.email_verified or user.status == UserStatus.DELETED:
            return

        raw_token = self.token_service.generate_token()
        await self.verification_repo.delete_for_user(user.id)
        await self.verification_repo.create(
            EmailVerificationToken(
                user_id=user.id,
                email=email,
                token_hash=await self.token_hasher.hash_async(raw_token),
                expires_at=self._expires_at(self.settings.verification_token_expiry),
            )
        )
        await self.session.commit()

        await self.audit.log(AuditAction.RESEND_VERIFICATION_SUCCESS, user_id=user.id, client=client)
        await self._send_email("verification", self.email_sender.send_verification_email, email, raw_token)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    async def request_password_reset(self, email: str, client: ClientInfo | None = None) -> None:
        """Mail a password reset link, invalidating earlier ones.

        Unknown and deleted accounts are a silent success; the attempt is
        still audited.

        Args:
            email: Email address (normalized before use).
            client: Caller metadata.
        """
        email = normalize_email(email)
        user = await self.user_repo.get_by_email(email)
        if user is None:
            await self.audit.log(
                AuditAction.PASSWORD_RESET_EMAIL_NOT_FOUND,
                client=client,
                metadata={"email": email},
            )
            return
        if user.status == UserStatus.DELETED:
            await self.audit.log(AuditAction.PASSWORD_RESET_DELETED_ACCOUNT, user_id=user.id, client=client)
            return

        raw_token = self.token_service.generate_token()
        await self.reset_repo.delete_for_user(user.id)
        await self.reset_repo.create(
            PasswordResetToken(
                user_id=user.id,
                email=email,
                token_hash=self.token_service.hash_token(raw_token),
                expires_at=self._expires_at(self.settings.password_reset_token_expiry),
            )
        )
        await self.session.commit()

        await self.audit.log(AuditAction.PASSWORD_RESET_REQUESTED, user_id=user.id, client=client)
        await self._send_email("password_reset", self.email_sender.send_password_reset_email, email, raw_token)

    async def reset_password(
        self,
        token: str,
        new_password: str,
        client: ClientInfo | None = None,
    ) -> None:
        """Redeem a reset token and set a new password.

        The token is marked used, the password replaced and every session
        revoked in one transaction.

        Args:
            token: The raw reset token.
            new_password: The new plaintext password.
            client: Caller metadata.

        Raises:
            AuthError: INVALID_TOKEN, VERIFICATION_EXPIRED or WEAK_PASSWORD.
        """
        if len(token) < MIN_SINGLE_USE_TOKEN_LENGTH:
            await self.audit.log(AuditAction.PASSWORD_RESET_INVALID_TOKEN, client=client)
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        # Deliberate linear scan with fixed-time comparison; see verify_email.
        presented_hash = self.token_service.hash_token(token)
        matched: PasswordResetToken | None = None
        for candidate in await self.reset_repo.list_unused_candidates():
            if self.token_service.tokens_match(presented_hash, candidate.token_hash) and matched is None:
                matched = candidate

        if matched is None:
            await self.audit.log(AuditAction.PASSWORD_RESET_INVALID_TOKEN, client=client)
            await self._sweep_expired_reset_tokens()
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        if matched.is_expired():
            await self.reset_repo.delete(matched.id)
            await self.session.commit()
            await self.audit.log(AuditAction.PASSWORD_RESET_EXPIRED, user_id=matched.user_id, client=client)
            await self._sweep_expired_reset_tokens()
            raise AuthError(AuthErrorCode.VERIFICATION_EXPIRED)

        user = await self.user_repo.get_by_id(matched.user_id)
        if user is None or user.status == UserStatus.DELETED:
            raise AuthError(AuthErrorCode.INVALID_TOKEN)

        errors = await self.password_validator.validate(new_password, user.email)
        if errors:
            await self.audit.log(AuditAction.PASSWORD_RESET_WEAK_PASSWORD, user_id=user.id, client=client)
            raise AuthError(AuthErrorCode.WEAK_PASSWORD, [e.message for e in errors])

        new_hash = await self.password_hasher.hash_async(new_password)
        if not await self.reset_repo.mark_as_used(matched.id):
            # Redeemed concurrently by another request
            await self.session.rollback()
            raise AuthError(AuthErrorCode.INVALID_TOKEN)
        user.password_hash = new_hash
        await self.user_repo.update(user)
        revoked = await self.refresh_token_repo.revoke_all_for_user(user.id)
        await self.session.commit()

        logger.info("Password reset", user_id=user.id, sessions_revoked=revoked)
        await self.audit.log(
            AuditAction.PASSWORD_RESET_SUCCESS,
            user_id=user.id,
            client=client,
            metadata={"sessions_revoked": revoked},
        )
        await self._cleanup_reset_tokens(user.id)
        await self._send_email("password_changed", self.email_sender.send_password_changed_email, user.email)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _expires_at(seconds: int) -> datetime:
        return datetime.now(timezone.utc) + timedelta(seconds=seconds)

    async def _access_payload(self, user: User) -> AccessTokenPayload:
        memberships = await self.user_repo.get_organizations(user.id)
        return AccessTokenPayload(
            sub=user.id,
            email=user.email,
            platform_role=user.platform_role.value,
            organizations=[
                OrganizationClaim(id=m.organization_id, role=m.role) for m in memberships
            ],
        )

    async def _issue_tokens(self, user: User, client: ClientInfo | None) -> AuthTokens:
        """Sign a token pair and store the refresh token row (uncommitted)."""
        access_token = self.jwt_service.create_access_token(await self._access_payload(user))
        refresh_token, jti = self.jwt_service.create_refresh_token(user.id)
        await self.refresh_token_repo.create(
            RefreshToken(
                id=jti,
                user_id=user.id,
                token_hash=self.token_service.hash_token(refresh_token),
                expires_at=self._expires_at(self.jwt_service.refresh_expires_in),
                device_info=client.device_info if client else None,
                ip_address=client.ip_address if client else None,
            )
        )
        return AuthTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.jwt_service.expires_in,
            user=user,
        )

    async def _handle_token_reuse(self, stored: RefreshToken, client: ClientInfo | None) -> None:
        """Revoke the whole session family after a revoked token resurfaced."""
        revoked = await self.refresh_token_repo.revoke_all_for_user(stored.user_id)
        await self.session.commit()
        logger.warning(
            "Revoked refresh token reused; all sessions revoked",
            user_id=stored.user_id,
            token_id=stored.id,
            sessions_revoked=revoked,
        )
        await self.audit.log(
            AuditAction.REFRESH_REVOKED_TOKEN_USED,
            user_id=stored.user_id,
            client=client,
            metadata={"token_id": stored.id, "sessions_revoked": revoked},
        )
        raise AuthError(AuthErrorCode.TOKEN_REVOKED)

    async def _sweep_expired_verification_tokens(self) -> None:
        try:
            deleted = await self.verification_repo.delete_expired()
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.warning("Expired verification token sweep failed", error=str(e))
            return
        if deleted:
            logger.debug("Expired verification tokens swept", count=deleted)

    async def _sweep_expired_reset_tokens(self) -> None:
        try:
            deleted = await self.reset_repo.delete_expired()
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.warning("Expired reset token sweep failed", error=str(e))
            return
        if deleted:
            logger.debug("Expired reset tokens swept", count=deleted)

    async def _cleanup_reset_tokens(self, user_id: str) -> None:
        """Drop a user's spent reset tokens and any expired ones."""
        try:
            await self.reset_repo.delete_spent_for_user(user_id)
            await self.reset_repo.delete_expired()
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.warning("Reset token cleanup failed", user_id=user_id, error=str(e))

    async def _send_email(self, kind: str, send: Callable[..., Awaitable[None]], *args: str) -> None:
        """Fire-and-forget email delivery; failures are logged, never raised."""
        try:
            await send(*args)
        except Exception as e:
            logger.error("Failed to send email", kind=kind, error=str(e))
