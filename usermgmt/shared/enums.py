"""Shared enumerations.

Cross-cutting enums used by application and infrastructure (audit
actions, entity types, actor type).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Who performed the action being recorded."""

    USER = "user"
    SYSTEM = "system"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action names recorded by the services."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    LOGIN = "login"
    LOGOUT = "logout"
    TOKEN_REFRESHED = "token_refreshed"
    PASSWORD_CHANGED = "password_changed"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET = "password_reset"
    CREDENTIALS_REVOKED = "credentials_revoked"


class EntityType(_ValuesMixin, str, Enum):
    """Entity types referenced by audit log entries and not-found errors."""

    USER = "user"
    ROLE = "role"
    SESSION = "session"
    REFRESH_TOKEN = "refresh_token"
    PASSWORD_RESET_TOKEN = "password_reset_token"
    AUDIT_LOG = "audit_log"
