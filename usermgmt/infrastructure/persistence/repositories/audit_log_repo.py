"""Audit log repository. Append-only: create, reads, and explicit retention deletes."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.dtos.audit_log import (
    AuditLogEntryCreate,
    AuditLogResult,
    AuditLogStatistics,
    GroupCount,
)
from usermgmt.application.dtos.pagination import Page
from usermgmt.domain.exceptions import ConstraintViolationException
from usermgmt.infrastructure.persistence.models import AuditLog
from usermgmt.infrastructure.persistence.repositories.base import BaseRepository
from usermgmt.infrastructure.persistence.repositories.mappers import audit_log_to_result
from usermgmt.shared.logging import get_logger
from usermgmt.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

_NEWEST_FIRST = (AuditLog.created_at.desc(), AuditLog.id.desc())


class AuditLogRepository(BaseRepository[AuditLog]):
    """Append-only audit log repository. No update; deletes only for retention."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, AuditLog)

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:  # type: ignore[override]
        """Append one audit log entry; return created record.

        Raises:
            ConstraintViolationException: user_id does not reference a user.
        """
        row = AuditLog(
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            user_id=entry.user_id,
            old_value=entry.old_value,
            new_value=entry.new_value,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
        )
        try:
            created = await super().create(row)
        except IntegrityError as exc:
            raise ConstraintViolationException(
                "Audit log user does not exist", details={"user_id": entry.user_id}
            ) from exc
        return audit_log_to_result(created)

    async def get_by_id(self, entry_id: str) -> AuditLogResult | None:  # type: ignore[override]
        row = await super().get_by_id(entry_id)
        return audit_log_to_result(row) if row else None

    async def _list_where(self, *conditions: Any, limit: int | None = None) -> list[AuditLogResult]:
        stmt = select(AuditLog).where(*conditions).order_by(*_NEWEST_FIRST)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return [audit_log_to_result(r) for r in result.scalars().all()]

    async def list_by_user(self, user_id: str, *, limit: int | None = None) -> list[AuditLogResult]:
        """Entries performed by user_id, newest first."""
        return await self._list_where(AuditLog.user_id == user_id, limit=limit)

    async def list_by_entity(
        self, entity_type: str, entity_id: str, *, limit: int | None = None
    ) -> list[AuditLogResult]:
        """History of one entity, newest first."""
        return await self._list_where(
            AuditLog.entity_type == entity_type,
            AuditLog.entity_id == entity_id,
            limit=limit,
        )

    async def list_by_action(self, action: str, *, limit: int | None = None) -> list[AuditLogResult]:
        return await self._list_where(AuditLog.action == action, limit=limit)

    async def list_by_entity_type(
        self, entity_type: str, *, limit: int | None = None
    ) -> list[AuditLogResult]:
        return await self._list_where(AuditLog.entity_type == entity_type, limit=limit)

    async def list(
        self,
        page: int = 1,
        limit: int = 10,
        *,
        user_id: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        action: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> Page[AuditLogResult]:
        """Filtered, paginated entries (newest first). Date bounds are inclusive."""
        conditions = []
        if user_id is not None:
            conditions.append(AuditLog.user_id == user_id)
        if entity_type is not None:
            conditions.append(AuditLog.entity_type == entity_type)
        if entity_id is not None:
            conditions.append(AuditLog.entity_id == entity_id)
        if action is not None:
            conditions.append(AuditLog.action == action)
        if date_from is not None:
            conditions.append(AuditLog.created_at >= ensure_utc(date_from))
        if date_to is not None:
            conditions.append(AuditLog.created_at <= ensure_utc(date_to))

        stmt = select(AuditLog).where(*conditions).order_by(*_NEWEST_FIRST)
        rows, total = await self._fetch_page(stmt, page, limit)
        return Page.build(
            [audit_log_to_result(r) for r in rows], page=page, limit=limit, total=total
        )

    async def count(self) -> int:
        return await self._count()

    async def count_by_user(self, user_id: str) -> int:
        return await self._count(AuditLog.user_id == user_id)

    async def count_by_entity(self, entity_type: str, entity_id: str) -> int:
        return await self._count(
            AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id
        )

    async def _group_counts(self, column: Any) -> list[GroupCount]:
        n = func.count(AuditLog.id).label("n")
        result = await self.db.execute(
            select(column, n).group_by(column).order_by(n.desc(), column)
        )
        return [GroupCount(key=key, count=int(count)) for key, count in result.all()]

    async def statistics(self) -> AuditLogStatistics:
        """Total, per-action and per-entity-type counts, and entries in the last 24 hours."""
        since = utc_now() - timedelta(hours=24)
        return AuditLogStatistics(
            total=await self._count(),
            by_action=await self._group_counts(AuditLog.action),
            by_entity_type=await self._group_counts(AuditLog.entity_type),
            last_24_hours=await self._count(AuditLog.created_at >= since),
        )

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Retention: delete entries created strictly before cutoff."""
        cutoff = ensure_utc(cutoff)
        result = await self.db.execute(
            delete(AuditLog)
            .where(AuditLog.created_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        deleted = result.rowcount or 0
        logger.info("Deleted %d audit log entries older than %s", deleted, cutoff.isoformat())
        return deleted

    async def delete_all_for_user(self, user_id: str) -> int:
        result = await self.db.execute(
            delete(AuditLog)
            .where(AuditLog.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
