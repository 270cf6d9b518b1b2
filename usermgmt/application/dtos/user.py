"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from usermgmt.application.dtos.role import RoleResult


@dataclass(frozen=True)
class UserResult:
    """User read-model with its role. Never carries the password hash."""

    id: str
    email: str
    first_name: str
    last_name: str
    role_id: str
    phone: str | None
    avatar: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    role: RoleResult | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class UserCreate:
    """Input for creating a user. password_hash is already hashed."""

    email: str
    password_hash: str
    first_name: str
    last_name: str
    role_id: str
    phone: str | None = None
    avatar: str | None = None


@dataclass(frozen=True)
class UserUpdate:
    """Partial profile update; None leaves a field unchanged."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    role_id: str | None = None
    phone: str | None = None
    avatar: str | None = None
    is_active: bool | None = None

    def changes(self) -> dict[str, Any]:
        """Fields that were given (not None)."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }
