"""Application interfaces (ports). Infrastructure implements these."""

from usermgmt.application.interfaces.repositories import (
    IAuditLogRepository,
    IPasswordResetTokenRepository,
    IRefreshTokenRepository,
    IRoleRepository,
    ISessionRepository,
    IUserRepository,
)
from usermgmt.application.interfaces.services import IPasswordHasher

__all__ = [
    "IAuditLogRepository",
    "IPasswordHasher",
    "IPasswordResetTokenRepository",
    "IRefreshTokenRepository",
    "IRoleRepository",
    "ISessionRepository",
    "IUserRepository",
]
