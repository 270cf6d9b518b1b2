"""ORM -> application DTO mappers shared by the repositories.

Timestamps pass through ensure_utc: SQLite returns naive datetimes.
"""

from usermgmt.application.dtos.audit_log import AuditLogResult
from usermgmt.application.dtos.role import RoleMember, RoleResult
from usermgmt.application.dtos.token import (
    PasswordResetTokenResult,
    RefreshTokenResult,
    SessionResult,
)
from usermgmt.application.dtos.user import UserResult
from usermgmt.infrastructure.persistence.models import (
    AuditLog,
    PasswordResetToken,
    RefreshToken,
    Role,
    User,
    UserSession,
)
from usermgmt.shared.utils.datetime import ensure_utc


def role_to_result(r: Role, *, include_users: bool = False) -> RoleResult:
    """Map ORM Role to RoleResult. include_users requires Role.users to be loaded."""
    users = None
    if include_users:
        users = tuple(
            RoleMember(
                id=u.id,
                email=u.email,
                first_name=u.first_name,
                last_name=u.last_name,
                is_active=u.is_active,
            )
            for u in r.users
        )
    return RoleResult(
        id=r.id,
        name=r.name,
        description=r.description,
        permissions=tuple(r.permissions or ()),
        created_at=ensure_utc(r.created_at),
        updated_at=ensure_utc(r.updated_at),
        users=users,
    )


def user_to_result(u: User) -> UserResult:
    """Map ORM User to UserResult (no password)."""
    return UserResult(
        id=u.id,
        email=u.email,
        first_name=u.first_name,
        last_name=u.last_name,
        role_id=u.role_id,
        phone=u.phone,
        avatar=u.avatar,
        is_active=u.is_active,
        created_at=ensure_utc(u.created_at),
        updated_at=ensure_utc(u.updated_at),
        role=role_to_result(u.role) if u.role is not None else None,
    )


def session_to_result(s: UserSession) -> SessionResult:
    return SessionResult(
        id=s.id,
        token=s.token,
        user_id=s.user_id,
        expires_at=ensure_utc(s.expires_at),
        created_at=ensure_utc(s.created_at),
        last_activity_at=ensure_utc(s.last_activity_at),
        ip_address=s.ip_address,
        user_agent=s.user_agent,
    )


def refresh_token_to_result(t: RefreshToken) -> RefreshTokenResult:
    return RefreshTokenResult(
        id=t.id,
        token=t.token,
        user_id=t.user_id,
        expires_at=ensure_utc(t.expires_at),
        created_at=ensure_utc(t.created_at),
        is_revoked=t.is_revoked,
    )


def password_reset_token_to_result(t: PasswordResetToken) -> PasswordResetTokenResult:
    return PasswordResetTokenResult(
        id=t.id,
        token=t.token,
        user_id=t.user_id,
        expires_at=ensure_utc(t.expires_at),
        created_at=ensure_utc(t.created_at),
        is_used=t.is_used,
    )


def audit_log_to_result(row: AuditLog) -> AuditLogResult:
    return AuditLogResult(
        id=row.id,
        action=row.action,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        user_id=row.user_id,
        old_value=row.old_value,
        new_value=row.new_value,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        created_at=ensure_utc(row.created_at),
    )
