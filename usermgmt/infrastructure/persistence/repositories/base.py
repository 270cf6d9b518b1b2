"""Base repository: generic get/create/update/delete plus counting and paging helpers."""

from typing import Any

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.dtos.pagination import page_offset, validate_page_args
from usermgmt.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository with get_by_id, create, update, delete and paging helpers.

    Reads use populate_existing so that rows changed by bulk/conditional
    statements (which bypass the identity map) are never served stale.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .where(model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and reload server-side defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush pending changes on an attached record and reload it."""
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()

    async def _count(self, *conditions: ColumnElement[bool]) -> int:
        """Count rows of this model matching all conditions."""
        stmt = select(func.count()).select_from(self.model)
        if conditions:
            stmt = stmt.where(*conditions)
        return int(await self.db.scalar(stmt) or 0)

    async def _fetch_page(
        self, stmt: Select[Any], page: int, limit: int
    ) -> tuple[list[ModelType], int]:
        """Run stmt for one 1-based page; return (rows, total rows across all pages).

        Raises:
            ValidationException: page < 1 or limit < 1.
        """
        validate_page_args(page, limit)
        total = int(
            await self.db.scalar(
                select(func.count()).select_from(stmt.order_by(None).subquery())
            )
            or 0
        )
        result = await self.db.execute(
            stmt.offset(page_offset(page, limit))
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total
