"""Persistence models: ORM entities and mixins."""

from usermgmt.infrastructure.persistence.models.audit_log import AuditLog
from usermgmt.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
    TokenMixin,
)
from usermgmt.infrastructure.persistence.models.password_reset_token import (
    PasswordResetToken,
)
from usermgmt.infrastructure.persistence.models.refresh_token import RefreshToken
from usermgmt.infrastructure.persistence.models.role import Role
from usermgmt.infrastructure.persistence.models.session import UserSession
from usermgmt.infrastructure.persistence.models.user import User

__all__ = [
    "AuditLog",
    "PasswordResetToken",
    "RefreshToken",
    "Role",
    "User",
    "UserSession",
    "CuidMixin",
    "CreatedAtMixin",
    "TimestampMixin",
    "TokenMixin",
]
