"""Audit recorder: the write facade services use to append audit log entries.

Snapshots are sanitized before they are stored: secret keys are redacted,
datetimes become ISO strings and dataclass DTOs become dicts. Client
metadata (IP, user agent) and the acting user fall back to the current
actor context when the caller does not pass them.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Any

from usermgmt.application.dtos.audit_log import AuditLogEntryCreate, AuditLogResult
from usermgmt.application.interfaces.repositories import IAuditLogRepository
from usermgmt.shared.context import get_actor_context
from usermgmt.shared.logging import get_logger

logger = get_logger(__name__)

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "password_hash",
        "hashed_password",
        "new_password",
        "secret",
        "token",
        "refresh_token",
        "access_token",
        "api_key",
        "credentials",
    }
)


def sanitize_snapshot(value: Any) -> Any:
    """Return a JSON-safe copy of value with sensitive keys redacted (recursively)."""
    if value is None:
        return None
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_KEYS else sanitize_snapshot(v)
            for key, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [sanitize_snapshot(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class AuditRecorder:
    """Append-only audit writer over an IAuditLogRepository."""

    def __init__(self, audit_repo: IAuditLogRepository) -> None:
        self._audit_repo = audit_repo

    async def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        user_id: str | None = None,
        old_value: Any = None,
        new_value: Any = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditLogResult | None:
        """Append one entry. Returns None (nothing stored) when no acting user is known."""
        ctx = get_actor_context()
        actor_id = user_id or ctx.user_id
        if not actor_id:
            logger.debug(
                "Skipping audit entry %s %s/%s: no acting user", action, entity_type, entity_id
            )
            return None
        entry = AuditLogEntryCreate(
            action=str(getattr(action, "value", action)),
            entity_type=str(getattr(entity_type, "value", entity_type)),
            entity_id=entity_id,
            user_id=actor_id,
            old_value=sanitize_snapshot(old_value),
            new_value=sanitize_snapshot(new_value),
            ip_address=ip_address if ip_address is not None else ctx.ip_address,
            user_agent=user_agent if user_agent is not None else ctx.user_agent,
        )
        return await self._audit_repo.create(entry)
