"""Persistence repositories. Re-exports for dependency injection."""

from usermgmt.infrastructure.persistence.repositories.audit_log_repo import (
    AuditLogRepository,
)
from usermgmt.infrastructure.persistence.repositories.base import BaseRepository
from usermgmt.infrastructure.persistence.repositories.password_reset_token_repo import (
    PasswordResetTokenRepository,
)
from usermgmt.infrastructure.persistence.repositories.refresh_token_repo import (
    RefreshTokenRepository,
)
from usermgmt.infrastructure.persistence.repositories.role_repo import RoleRepository
from usermgmt.infrastructure.persistence.repositories.session_repo import SessionRepository
from usermgmt.infrastructure.persistence.repositories.token_repo import TokenRepository
from usermgmt.infrastructure.persistence.repositories.user_repo import UserRepository

__all__ = [
    "AuditLogRepository",
    "BaseRepository",
    "PasswordResetTokenRepository",
    "RefreshTokenRepository",
    "RoleRepository",
    "SessionRepository",
    "TokenRepository",
    "UserRepository",
]
