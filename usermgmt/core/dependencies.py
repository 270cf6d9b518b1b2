"""Composition root: build repositories and services for one AsyncSession.

Callers own the session (and its transaction); everything built here is
request-scoped and holds no state between calls.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.services import (
    AuditRecorder,
    CredentialService,
    RoleService,
    UserService,
)
from usermgmt.core.config import Settings, get_settings
from usermgmt.infrastructure.persistence.repositories import (
    AuditLogRepository,
    PasswordResetTokenRepository,
    RefreshTokenRepository,
    RoleRepository,
    SessionRepository,
    UserRepository,
)
from usermgmt.infrastructure.security.password import (
    get_password_hash,
    needs_rehash,
    verify_password,
)


@dataclass
class PasswordHasher:
    """Bcrypt hashing provided via DI (services never import the security module)."""

    rounds: int = 12

    def hash_password(self, password: str) -> str:
        return get_password_hash(password, rounds=self.rounds)

    def verify_password(self, password: str, hashed: str) -> bool:
        return verify_password(password, hashed)

    def needs_rehash(self, hashed: str) -> bool:
        return needs_rehash(hashed, rounds=self.rounds)


@dataclass
class Services:
    """Repositories and services sharing one session."""

    users: UserRepository
    roles: RoleRepository
    sessions: SessionRepository
    refresh_tokens: RefreshTokenRepository
    password_reset_tokens: PasswordResetTokenRepository
    audit_logs: AuditLogRepository
    audit: AuditRecorder
    credential_service: CredentialService
    user_service: UserService
    role_service: RoleService


def build_services(db: AsyncSession, settings: Settings | None = None) -> Services:
    """Wire every repository and service onto db."""
    settings = settings or get_settings()
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    users = UserRepository(db, bcrypt_rounds=settings.bcrypt_rounds)
    roles = RoleRepository(db)
    sessions = SessionRepository(db)
    refresh_tokens = RefreshTokenRepository(db)
    reset_tokens = PasswordResetTokenRepository(db)
    audit_logs = AuditLogRepository(db)
    audit = AuditRecorder(audit_logs)
    credential_service = CredentialService(
        user_repo=users,
        session_repo=sessions,
        refresh_token_repo=refresh_tokens,
        password_reset_token_repo=reset_tokens,
        password_hasher=hasher,
        settings=settings,
        audit=audit,
        audit_repo=audit_logs,
    )
    return Services(
        users=users,
        roles=roles,
        sessions=sessions,
        refresh_tokens=refresh_tokens,
        password_reset_tokens=reset_tokens,
        audit_logs=audit_logs,
        audit=audit,
        credential_service=credential_service,
        user_service=UserService(
            user_repo=users,
            credentials=credential_service,
            password_hasher=hasher,
            audit=audit,
            audit_repo=audit_logs,
        ),
        role_service=RoleService(roles, audit),
    )
