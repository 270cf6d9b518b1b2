"""DTOs for role use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RoleMember:
    """Minimal user view embedded in a role detail read."""

    id: str
    email: str
    first_name: str
    last_name: str
    is_active: bool


@dataclass(frozen=True)
class RoleResult:
    """Role read-model. users is only populated by the detail lookup (get_by_id)."""

    id: str
    name: str
    description: str | None
    permissions: tuple[str, ...]
    created_at: datetime
    updated_at: datetime
    users: tuple[RoleMember, ...] | None = None

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


@dataclass(frozen=True)
class RoleCreate:
    name: str
    permissions: list[str]
    description: str | None = None


@dataclass(frozen=True)
class RoleUpdate:
    """Partial update; None leaves a field unchanged."""

    name: str | None = None
    description: str | None = None
    permissions: list[str] | None = None
