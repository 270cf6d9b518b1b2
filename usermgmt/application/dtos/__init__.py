"""Application DTOs: read models and inputs, independent of the ORM."""

from usermgmt.application.dtos.audit_log import (
    AuditLogEntryCreate,
    AuditLogResult,
    AuditLogStatistics,
    GroupCount,
)
from usermgmt.application.dtos.pagination import Page, Pagination
from usermgmt.application.dtos.role import RoleCreate, RoleMember, RoleResult, RoleUpdate
from usermgmt.application.dtos.token import (
    IssuedCredentials,
    PasswordResetTokenResult,
    RefreshTokenResult,
    SessionResult,
    SweepReport,
    TokenResult,
)
from usermgmt.application.dtos.user import UserCreate, UserResult, UserUpdate

__all__ = [
    "AuditLogEntryCreate",
    "AuditLogResult",
    "AuditLogStatistics",
    "GroupCount",
    "IssuedCredentials",
    "Page",
    "Pagination",
    "PasswordResetTokenResult",
    "RefreshTokenResult",
    "RoleCreate",
    "RoleMember",
    "RoleResult",
    "RoleUpdate",
    "SessionResult",
    "SweepReport",
    "TokenResult",
    "UserCreate",
    "UserResult",
    "UserUpdate",
]
