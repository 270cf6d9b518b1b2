"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from usermgmt.application.dtos.audit_log import (
        AuditLogEntryCreate,
        AuditLogResult,
        AuditLogStatistics,
    )
    from usermgmt.application.dtos.pagination import Page
    from usermgmt.application.dtos.role import RoleCreate, RoleResult, RoleUpdate
    from usermgmt.application.dtos.token import (
        PasswordResetTokenResult,
        RefreshTokenResult,
        SessionResult,
    )
    from usermgmt.application.dtos.user import UserCreate, UserResult, UserUpdate


class IUserRepository(Protocol):
    """Protocol for user repository (DIP)."""

    async def get_by_id(self, user_id: str) -> UserResult | None: ...

    async def get_by_email(self, email: str) -> UserResult | None: ...

    async def get_password_hash(self, user_id: str) -> str: ...

    async def authenticate(self, email: str, password: str) -> UserResult | None:
        """Return the active user whose password matches, else None."""

    async def create_user(self, data: UserCreate) -> UserResult: ...

    async def update_user(self, user_id: str, data: UserUpdate) -> UserResult: ...

    async def update_password(self, user_id: str, password_hash: str) -> None: ...

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        *,
        is_active: bool | None = None,
        role_id: str | None = None,
        search: str | None = None,
    ) -> Page[UserResult]: ...

    async def soft_delete(self, user_id: str) -> UserResult: ...

    async def hard_delete(self, user_id: str) -> None: ...

    async def count(self) -> int: ...

    async def count_active(self) -> int: ...


class IRoleRepository(Protocol):
    """Protocol for role repository (DIP)."""

    async def get_by_id(self, role_id: str) -> RoleResult | None: ...

    async def get_by_name(self, name: str) -> RoleResult | None: ...

    async def list_roles(self) -> list[RoleResult]: ...

    async def create_role(self, data: RoleCreate) -> RoleResult: ...

    async def update_role(self, role_id: str, data: RoleUpdate) -> RoleResult: ...

    async def can_delete_role(self, role_id: str) -> bool: ...

    async def delete_role(self, role_id: str) -> None:
        """Delete only when unreferenced; raise RoleInUseException otherwise."""

    async def get_users_by_role(self, role_id: str) -> list[UserResult]: ...


class IAuditLogRepository(Protocol):
    """Protocol for the append-only audit log (DIP)."""

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult: ...

    async def list_by_entity(
        self, entity_type: str, entity_id: str, *, limit: int | None = None
    ) -> list[AuditLogResult]: ...

    async def statistics(self) -> AuditLogStatistics: ...

    async def delete_older_than(self, cutoff: datetime) -> int: ...

    async def delete_all_for_user(self, user_id: str) -> int: ...


class ISessionRepository(Protocol):
    """Protocol for session storage. Sessions end by deletion."""

    async def issue(
        self, user_id: str, token: str, expires_at: datetime, **metadata: Any
    ) -> SessionResult: ...

    async def find_by_token(self, token: str) -> SessionResult | None: ...

    async def touch(self, token: str) -> SessionResult: ...

    async def retire(self, token: str) -> SessionResult | None: ...

    async def revoke_all_for_user(self, user_id: str) -> int: ...

    async def sweep_expired(self) -> int: ...


class IRefreshTokenRepository(Protocol):
    """Protocol for refresh token storage (one-way flag: is_revoked)."""

    async def issue(
        self, user_id: str, token: str, expires_at: datetime, **metadata: Any
    ) -> RefreshTokenResult: ...

    async def find_by_token(self, token: str) -> RefreshTokenResult | None: ...

    async def consume(self, token: str) -> bool:
        """Atomically revoke a valid token; True only for the winning caller."""

    async def retire(self, token: str) -> RefreshTokenResult | None: ...

    async def revoke_all_for_user(self, user_id: str) -> int: ...

    async def sweep_expired(self) -> int: ...

    async def sweep_retired(self) -> int: ...


class IPasswordResetTokenRepository(Protocol):
    """Protocol for password-reset token storage (one-way flag: is_used)."""

    async def issue(
        self, user_id: str, token: str, expires_at: datetime, **metadata: Any
    ) -> PasswordResetTokenResult: ...

    async def find_by_token(self, token: str) -> PasswordResetTokenResult | None: ...

    async def consume(self, token: str) -> bool: ...

    async def invalidate_all_for_user(self, user_id: str) -> int: ...

    async def sweep_expired(self) -> int: ...

    async def sweep_retired(self) -> int: ...
