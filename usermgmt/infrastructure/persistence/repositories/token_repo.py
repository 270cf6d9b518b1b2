"""Generic lifecycle repository for token-like entities.

Sessions, refresh tokens and password-reset tokens share one state machine:

    issued --(flag flip | expiry passes)--> retired/expired --(sweep)--> deleted

Validity is ``not flag AND expires_at > now`` and is computed on every read.
The one-way flag (``is_revoked`` / ``is_used``) is only ever written with
``True``; Sessions have no flag and are ended by deleting the row.

Every flag flip is a single conditional UPDATE that matches only unflagged
rows, so concurrent retire/consume calls cannot both observe "unused" and
both proceed. Each operation takes one ``utc_now()`` snapshot.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, and_, delete, false, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.dtos.pagination import Page
from usermgmt.application.dtos.token import TokenResult
from usermgmt.domain.exceptions import (
    DuplicateTokenException,
    ResourceNotFoundException,
    ValidationException,
)
from usermgmt.infrastructure.persistence.database import Base
from usermgmt.infrastructure.persistence.models import User
from usermgmt.infrastructure.persistence.repositories.base import BaseRepository
from usermgmt.shared.enums import EntityType
from usermgmt.shared.logging import get_logger
from usermgmt.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)


def mask_token(token: str) -> str:
    """Shorten a token for error messages and logs (never log full tokens)."""
    return f"{token[:6]}..." if len(token) > 6 else "***"


class TokenRepository[ModelType: Base, ResultType: TokenResult](BaseRepository[ModelType], ABC):
    """Lifecycle operations over one token-like entity.

    Subclasses set ``entity_type``, ``retired_flag`` (attribute name of the
    one-way flag, or None) and implement ``_to_result``.
    """

    entity_type: str
    retired_flag: str | None = None

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        super().__init__(db, model)

    @abstractmethod
    def _to_result(self, obj: ModelType) -> ResultType: ...

    @property
    def _m(self) -> Any:
        return self.model

    def _flag(self) -> Any:
        return getattr(self.model, self.retired_flag) if self.retired_flag else None

    def _valid_clause(self, now: datetime) -> ColumnElement[bool]:
        """SQL form of validity: flag unset and expiry in the future."""
        flag = self._flag()
        if flag is None:
            return self._m.expires_at > now
        return and_(flag.is_(False), self._m.expires_at > now)

    def _not_found(self, handle: str) -> ResourceNotFoundException:
        return ResourceNotFoundException(self.entity_type, handle)

    async def _require_user(self, user_id: str) -> None:
        exists = await self.db.scalar(select(User.id).where(User.id == user_id))
        if exists is None:
            raise ResourceNotFoundException(EntityType.USER.value, user_id)

    async def _execute_write(self, stmt: Any) -> int:
        """Run a bulk/conditional UPDATE or DELETE and return the affected-row count."""
        result = await self.db.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    # ---- creation ---------------------------------------------------------

    async def issue(
        self, user_id: str, token: str, expires_at: datetime, **metadata: Any
    ) -> ResultType:
        """Persist a new token for user_id with a caller-supplied token string.

        Raises:
            ResourceNotFoundException: user_id does not reference a User.
            DuplicateTokenException: token already exists.
        """
        await self._require_user(user_id)
        obj = self.model(
            user_id=user_id, token=token, expires_at=ensure_utc(expires_at), **metadata
        )
        try:
            async with self.db.begin_nested():
                created = await self.create(obj)
        except IntegrityError as exc:
            # Either the token clashed or the user was deleted since the check above.
            await self._require_user(user_id)
            raise DuplicateTokenException(self.entity_type) from exc
        return self._to_result(created)

    # ---- reads ------------------------------------------------------------

    async def _get_by_token(self, token: str) -> ModelType | None:
        result = await self.db.execute(
            select(self.model)
            .where(self._m.token == token)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_by_token(self, token: str) -> ResultType | None:
        obj = await self._get_by_token(token)
        return self._to_result(obj) if obj else None

    async def find_by_id(self, entity_id: str) -> ResultType | None:
        obj = await self.get_by_id(entity_id)
        return self._to_result(obj) if obj else None

    async def is_valid(self, token: str) -> bool:
        """False for unknown tokens; otherwise not retired and not expired."""
        found = await self.find_by_token(token)
        if found is None:
            return False
        return found.is_valid_at(utc_now())

    async def list_for_user(
        self, user_id: str, *, active_only: bool = False
    ) -> list[ResultType]:
        """All tokens of a user, newest first. active_only keeps valid ones."""
        stmt = select(self.model).where(self._m.user_id == user_id)
        if active_only:
            stmt = stmt.where(self._valid_clause(utc_now()))
        stmt = stmt.order_by(self._m.created_at.desc(), self._m.id.desc())
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return [self._to_result(o) for o in result.scalars().all()]

    async def count_active_for_user(self, user_id: str) -> int:
        return await self._count(
            self._m.user_id == user_id, self._valid_clause(utc_now())
        )

    async def count(self) -> int:
        return await self._count()

    async def list(
        self,
        page: int = 1,
        limit: int = 10,
        *,
        user_id: str | None = None,
        retired: bool | None = None,
        expired: bool | None = None,
    ) -> Page[ResultType]:
        """Paginated listing, newest first.

        retired filters on the one-way flag (no rows match retired=True for
        sessions). expired=True means expires_at < now, False means >= now.
        """
        stmt = select(self.model)
        if user_id is not None:
            stmt = stmt.where(self._m.user_id == user_id)
        if retired is not None:
            flag = self._flag()
            if flag is None:
                if retired:
                    stmt = stmt.where(false())
            else:
                stmt = stmt.where(flag.is_(retired))
        if expired is not None:
            now = utc_now()
            stmt = stmt.where(
                self._m.expires_at < now if expired else self._m.expires_at >= now
            )
        stmt = stmt.order_by(self._m.created_at.desc(), self._m.id.desc())
        rows, total = await self._fetch_page(stmt, page, limit)
        return Page.build(
            [self._to_result(r) for r in rows], page=page, limit=limit, total=total
        )

    # ---- state transitions ------------------------------------------------

    async def retire(self, token: str) -> ResultType | None:
        """Set the one-way flag. Idempotent.

        For sessions the row is deleted instead (absent counts as already
        retired) and None is returned.

        Raises:
            ResourceNotFoundException: no row with this token (flagged entities).
        """
        flag = self._flag()
        if flag is None:
            await self._execute_write(delete(self.model).where(self._m.token == token))
            return None
        await self._execute_write(
            update(self.model)
            .where(self._m.token == token, flag.is_(False))
            .values({flag: True})
        )
        found = await self.find_by_token(token)
        if found is None:
            raise self._not_found(mask_token(token))
        return found

    async def retire_by_id(self, entity_id: str) -> ResultType | None:
        """Same as retire, addressed by primary key."""
        flag = self._flag()
        if flag is None:
            await self._execute_write(delete(self.model).where(self._m.id == entity_id))
            return None
        await self._execute_write(
            update(self.model)
            .where(self._m.id == entity_id, flag.is_(False))
            .values({flag: True})
        )
        found = await self.find_by_id(entity_id)
        if found is None:
            raise self._not_found(entity_id)
        return found

    async def consume(self, token: str) -> bool:
        """Atomically validate and retire. True only for the caller that flipped the flag.

        Raises:
            ValidationException: entity has no one-way flag (sessions).
        """
        flag = self._flag()
        if flag is None:
            raise ValidationException(f"{self.entity_type} cannot be consumed")
        now = utc_now()
        affected = await self._execute_write(
            update(self.model)
            .where(self._m.token == token, flag.is_(False), self._m.expires_at > now)
            .values({flag: True})
        )
        return affected == 1

    async def revoke_all_for_user(self, user_id: str) -> int:
        """Retire every not-yet-retired row of the user, expired or not.

        Sessions: deletes every row of the user. Returns rows affected, which
        includes expired rows that were never flagged: the result can be
        non-zero even when count_active_for_user was already 0. It is 0 only
        when every row was already retired (or the user has none).
        """
        flag = self._flag()
        if flag is None:
            affected = await self._execute_write(
                delete(self.model).where(self._m.user_id == user_id)
            )
        else:
            affected = await self._execute_write(
                update(self.model)
                .where(self._m.user_id == user_id, flag.is_(False))
                .values({flag: True})
            )
        if affected:
            logger.info("Revoked %d %s row(s) for user %s", affected, self.entity_type, user_id)
        return affected

    async def set_expiry(self, entity_id: str, expires_at: datetime) -> ResultType:
        """Change expires_at. The one-way flag is not touched."""
        affected = await self._execute_write(
            update(self.model)
            .where(self._m.id == entity_id)
            .values({self._m.expires_at: ensure_utc(expires_at)})
        )
        if not affected:
            raise self._not_found(entity_id)
        found = await self.find_by_id(entity_id)
        if found is None:
            raise self._not_found(entity_id)
        return found

    # ---- deletion ---------------------------------------------------------

    async def delete_by_id(self, entity_id: str) -> ResultType:
        """Delete one row by id; return its last state.

        Raises:
            ResourceNotFoundException: no such row.
        """
        obj = await self.get_by_id(entity_id)
        if obj is None:
            raise self._not_found(entity_id)
        result = self._to_result(obj)
        await self.delete(obj)
        return result

    async def delete_by_token(self, token: str) -> ResultType:
        obj = await self._get_by_token(token)
        if obj is None:
            raise self._not_found(mask_token(token))
        result = self._to_result(obj)
        await self.delete(obj)
        return result

    async def delete_all_for_user(self, user_id: str) -> int:
        """Hard-delete every row of the user. Irreversible."""
        return await self._execute_write(
            delete(self.model).where(self._m.user_id == user_id)
        )

    async def sweep_expired(self) -> int:
        """Delete rows whose expiry has passed. Future-expiring rows are never touched."""
        now = utc_now()
        deleted = await self._execute_write(
            delete(self.model).where(self._m.expires_at < now)
        )
        logger.info("Swept %d expired %s row(s)", deleted, self.entity_type)
        return deleted

    async def sweep_retired(self) -> int:
        """Delete rows whose one-way flag is set. Always 0 for sessions."""
        flag = self._flag()
        if flag is None:
            return 0
        deleted = await self._execute_write(delete(self.model).where(flag.is_(True)))
        logger.info("Swept %d retired %s row(s)", deleted, self.entity_type)
        return deleted
