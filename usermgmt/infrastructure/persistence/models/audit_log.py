"""Audit log ORM model. Append-only record of state-changing actions."""

from typing import Any

from sqlalchemy import JSON, Connection, ForeignKey, Index, String, Text, event
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from usermgmt.infrastructure.persistence.database import Base
from usermgmt.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class AuditLog(CuidMixin, CreatedAtMixin, Base):
    """Who did what, to which entity, with optional before/after snapshots.

    Rows are never updated. They are removed only by the explicit retention
    operations (older-than cutoff, all rows of one user).
    """

    __tablename__ = "audit_logs"

    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column("entityType", String(100), nullable=False)
    entity_id: Mapped[str] = mapped_column("entityId", String(64), nullable=False)
    user_id: Mapped[str] = mapped_column(
        "userId", String(32), ForeignKey("users.id"), nullable=False, index=True
    )
    old_value: Mapped[Any | None] = mapped_column("oldValue", JSON, nullable=True)
    new_value: Mapped[Any | None] = mapped_column("newValue", JSON, nullable=True)
    ip_address: Mapped[str | None] = mapped_column("ipAddress", String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column("userAgent", Text, nullable=True)

    __table_args__ = (Index("ix_audit_logs_entity", "entityType", "entityId"),)


@event.listens_for(AuditLog, "before_update")
def _prevent_audit_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditLog
) -> None:
    """Audit log entries are append-only; updates are forbidden."""
    raise ValueError("Audit log entries are immutable and cannot be updated.")
