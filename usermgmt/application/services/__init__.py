"""Application services: users, roles, credential flows, audit recording."""

from usermgmt.application.services.audit_recorder import AuditRecorder, sanitize_snapshot
from usermgmt.application.services.credential_service import (
    CredentialService,
    RevokedCredentials,
)
from usermgmt.application.services.role_service import RoleService
from usermgmt.application.services.user_service import UserService

__all__ = [
    "AuditRecorder",
    "CredentialService",
    "RevokedCredentials",
    "RoleService",
    "UserService",
    "sanitize_snapshot",
]
