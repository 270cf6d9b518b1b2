"""DTOs for the audit log."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditLogEntryCreate:
    """Input for appending one audit log record. Append-only; no update."""

    action: str
    entity_type: str
    entity_id: str
    user_id: str
    old_value: Any | None = None
    new_value: Any | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AuditLogResult:
    """Single audit log entry (read-model for list/get)."""

    id: str
    action: str
    entity_type: str
    entity_id: str
    user_id: str
    old_value: Any | None
    new_value: Any | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime


@dataclass(frozen=True)
class GroupCount:
    key: str
    count: int


@dataclass(frozen=True)
class AuditLogStatistics:
    """Totals over the log. Grouped counts are sorted by count, descending."""

    total: int
    by_action: list[GroupCount]
    by_entity_type: list[GroupCount]
    last_24_hours: int
