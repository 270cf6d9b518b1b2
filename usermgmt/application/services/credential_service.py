"""Credential flows over the token lifecycle repositories.

Login issues a session plus a refresh token; refresh rotates the refresh
token (the old one is consumed atomically, so a replayed token loses);
logout ends the session; forgot/reset password issues and redeems a
single-use reset token. Expired and retired rows are only reclaimed by
``cleanup``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta

from usermgmt.application.dtos.token import (
    IssuedCredentials,
    PasswordResetTokenResult,
    RefreshTokenResult,
    SessionResult,
    SweepReport,
)
from usermgmt.application.dtos.user import UserResult
from usermgmt.application.interfaces.repositories import (
    IAuditLogRepository,
    IPasswordResetTokenRepository,
    IRefreshTokenRepository,
    ISessionRepository,
    IUserRepository,
)
from usermgmt.application.interfaces.services import IPasswordHasher
from usermgmt.application.services.audit_recorder import AuditRecorder
from usermgmt.core.config import Settings
from usermgmt.domain.exceptions import AuthenticationException, ResourceNotFoundException
from usermgmt.shared.enums import AuditAction, EntityType
from usermgmt.shared.logging import get_logger
from usermgmt.shared.utils.datetime import utc_in, utc_now
from usermgmt.shared.utils.generators import generate_token

logger = get_logger(__name__)


@dataclass(frozen=True)
class RevokedCredentials:
    """Rows affected by revoking everything a user holds."""

    sessions: int
    refresh_tokens: int
    password_reset_tokens: int


class CredentialService:
    """Login, refresh rotation, logout, password reset, revocation and cleanup."""

    def __init__(
        self,
        *,
        user_repo: IUserRepository,
        session_repo: ISessionRepository,
        refresh_token_repo: IRefreshTokenRepository,
        password_reset_token_repo: IPasswordResetTokenRepository,
        password_hasher: IPasswordHasher,
        settings: Settings,
        audit: AuditRecorder | None = None,
        audit_repo: IAuditLogRepository | None = None,
    ) -> None:
        self._users = user_repo
        self._sessions = session_repo
        self._refresh_tokens = refresh_token_repo
        self._reset_tokens = password_reset_token_repo
        self._hasher = password_hasher
        self._settings = settings
        self._audit = audit
        self._audit_repo = audit_repo

    async def _record(self, action: AuditAction, entity_type: EntityType, entity_id: str, user_id: str) -> None:
        if self._audit is not None:
            await self._audit.record(action, entity_type, entity_id, user_id)

    async def _issue_refresh_token(self, user_id: str) -> RefreshTokenResult:
        return await self._refresh_tokens.issue(
            user_id,
            generate_token(),
            utc_in(days=self._settings.refresh_token_expire_days),
        )

    async def start_session(
        self,
        email: str,
        password: str,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> IssuedCredentials:
        """Authenticate and issue a session and a refresh token.

        Raises:
            AuthenticationException: unknown email, wrong password or inactive account.
        """
        user = await self._users.authenticate(email, password)
        if user is None:
            raise AuthenticationException("Invalid email or password")
        await self._upgrade_hash(user.id, password)
        session = await self._sessions.issue(
            user.id,
            generate_token(),
            utc_in(hours=self._settings.session_expire_hours),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        refresh_token = await self._issue_refresh_token(user.id)
        await self._record(AuditAction.LOGIN, EntityType.SESSION, session.id, user.id)
        return IssuedCredentials(session=session, refresh_token=refresh_token)

    async def _upgrade_hash(self, user_id: str, password: str) -> None:
        """Re-hash a just-verified password when the stored hash uses an outdated cost."""
        stored = await self._users.get_password_hash(user_id)
        if self._hasher.needs_rehash(stored):
            hashed = await asyncio.to_thread(self._hasher.hash_password, password)
            await self._users.update_password(user_id, hashed)
            logger.info("Upgraded password hash cost for user %s", user_id)

    async def validate_session(self, token: str) -> SessionResult:
        """Return the live session for token and record activity on it.

        Raises:
            AuthenticationException: unknown or expired session.
        """
        session = await self._sessions.find_by_token(token)
        if session is None or not session.is_valid_at(utc_now()):
            raise AuthenticationException("Session is invalid or expired")
        return await self._sessions.touch(token)

    async def refresh(self, refresh_token: str) -> RefreshTokenResult:
        """Rotate a refresh token: consume the presented one, issue a new one.

        Raises:
            AuthenticationException: token unknown, revoked, expired, already
                rotated by a concurrent caller, or the account is inactive.
        """
        current = await self._refresh_tokens.find_by_token(refresh_token)
        if current is None or not await self._refresh_tokens.consume(refresh_token):
            raise AuthenticationException("Refresh token is invalid or expired")
        user = await self._users.get_by_id(current.user_id)
        if user is None or not user.is_active:
            raise AuthenticationException("Account is inactive")
        rotated = await self._issue_refresh_token(current.user_id)
        await self._record(
            AuditAction.TOKEN_REFRESHED, EntityType.REFRESH_TOKEN, rotated.id, current.user_id
        )
        return rotated

    async def end_session(self, session_token: str, refresh_token: str | None = None) -> None:
        """Logout: delete the session and revoke the refresh token if given. Idempotent."""
        session = await self._sessions.find_by_token(session_token)
        await self._sessions.retire(session_token)
        if refresh_token is not None:
            try:
                await self._refresh_tokens.retire(refresh_token)
            except ResourceNotFoundException:
                logger.info("Logout with unknown refresh token; nothing to revoke")
        if session is not None:
            await self._record(AuditAction.LOGOUT, EntityType.SESSION, session.id, session.user_id)

    async def request_password_reset(self, email: str) -> PasswordResetTokenResult | None:
        """Issue a reset token for an active account; None when there is none.

        Earlier unused reset tokens of the user are invalidated first so at
        most one reset link is live.
        """
        user = await self._users.get_by_email(email)
        if user is None or not user.is_active:
            logger.info("Password reset requested for unknown or inactive account")
            return None
        await self._reset_tokens.invalidate_all_for_user(user.id)
        issued = await self._reset_tokens.issue(
            user.id,
            generate_token(),
            utc_in(minutes=self._settings.password_reset_expire_minutes),
        )
        await self._record(
            AuditAction.PASSWORD_RESET_REQUESTED, EntityType.PASSWORD_RESET_TOKEN, issued.id, user.id
        )
        return issued

    async def reset_password(self, token: str, new_password: str) -> UserResult:
        """Redeem a reset token and set a new password.

        The token is consumed with a single conditional write: of two
        concurrent redemptions exactly one succeeds. All of the user's
        sessions and refresh tokens are revoked afterwards.

        Raises:
            AuthenticationException: token unknown, expired or already used.
        """
        found = await self._reset_tokens.find_by_token(token)
        if found is None or not await self._reset_tokens.consume(token):
            raise AuthenticationException("Reset token is invalid, expired or already used")
        hashed = await asyncio.to_thread(self._hasher.hash_password, new_password)
        await self._users.update_password(found.user_id, hashed)
        await self.revoke_all_credentials(found.user_id, actor_id=found.user_id)
        await self._record(AuditAction.PASSWORD_RESET, EntityType.USER, found.user_id, found.user_id)
        user = await self._users.get_by_id(found.user_id)
        if user is None:
            raise ResourceNotFoundException(EntityType.USER.value, found.user_id)
        return user

    async def revoke_all_credentials(
        self, user_id: str, *, actor_id: str | None = None
    ) -> RevokedCredentials:
        """Delete every session, revoke every refresh token and invalidate every reset token.

        Recorded as credentials_revoked when an actor is given (or set in the
        actor context).
        """
        revoked = RevokedCredentials(
            sessions=await self._sessions.revoke_all_for_user(user_id),
            refresh_tokens=await self._refresh_tokens.revoke_all_for_user(user_id),
            password_reset_tokens=await self._reset_tokens.invalidate_all_for_user(user_id),
        )
        logger.info(
            "Revoked credentials for user %s: sessions=%d refresh_tokens=%d reset_tokens=%d",
            user_id,
            revoked.sessions,
            revoked.refresh_tokens,
            revoked.password_reset_tokens,
        )
        if self._audit is not None:
            await self._audit.record(
                AuditAction.CREDENTIALS_REVOKED,
                EntityType.USER,
                user_id,
                actor_id,
                new_value=revoked,
            )
        return revoked

    async def cleanup(self) -> SweepReport:
        """Run every sweep; apply audit retention when audit_retention_days is set."""
        audit_deleted = 0
        retention = self._settings.audit_retention_days
        if retention is not None and self._audit_repo is not None:
            cutoff = utc_now() - timedelta(days=retention)
            audit_deleted = await self._audit_repo.delete_older_than(cutoff)
        report = SweepReport(
            expired_sessions=await self._sessions.sweep_expired(),
            expired_refresh_tokens=await self._refresh_tokens.sweep_expired(),
            revoked_refresh_tokens=await self._refresh_tokens.sweep_retired(),
            expired_reset_tokens=await self._reset_tokens.sweep_expired(),
            used_reset_tokens=await self._reset_tokens.sweep_retired(),
            audit_logs=audit_deleted,
        )
        logger.info("Credential cleanup removed %d row(s)", report.total)
        return report
