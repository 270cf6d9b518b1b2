"""Role repository. Roles cannot be deleted while users reference them."""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from usermgmt.application.dtos.role import RoleCreate, RoleResult, RoleUpdate
from usermgmt.application.dtos.user import UserResult
from usermgmt.domain.exceptions import (
    DuplicateRoleNameException,
    ResourceNotFoundException,
    RoleInUseException,
)
from usermgmt.infrastructure.persistence.models import Role, User
from usermgmt.infrastructure.persistence.repositories.base import BaseRepository
from usermgmt.infrastructure.persistence.repositories.mappers import (
    role_to_result,
    user_to_result,
)
from usermgmt.shared.enums import EntityType
from usermgmt.shared.logging import get_logger

logger = get_logger(__name__)


class RoleRepository(BaseRepository[Role]):
    """Role repository: CRUD plus the guarded delete."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def _require(self, role_id: str) -> Role:
        role = await super().get_by_id(role_id)
        if role is None:
            raise ResourceNotFoundException(EntityType.ROLE.value, role_id)
        return role

    async def get_by_id(self, role_id: str) -> RoleResult | None:  # type: ignore[override]
        """Return the role with its assigned users, or None."""
        result = await self.db.execute(
            select(Role)
            .options(selectinload(Role.users))
            .where(Role.id == role_id)
            .execution_options(populate_existing=True)
        )
        role = result.scalar_one_or_none()
        return role_to_result(role, include_users=True) if role else None

    async def get_by_name(self, name: str) -> RoleResult | None:
        result = await self.db.execute(
            select(Role).where(Role.name == name).execution_options(populate_existing=True)
        )
        role = result.scalar_one_or_none()
        return role_to_result(role) if role else None

    async def list_roles(self) -> list[RoleResult]:
        """All roles ordered by name."""
        result = await self.db.execute(
            select(Role).order_by(Role.name).execution_options(populate_existing=True)
        )
        return [role_to_result(r) for r in result.scalars().all()]

    async def create_role(self, data: RoleCreate) -> RoleResult:
        """Create role; raise DuplicateRoleNameException when the name is taken."""
        role = Role(
            name=data.name,
            description=data.description,
            permissions=list(data.permissions),
        )
        try:
            created = await self.create(role)
        except IntegrityError as exc:
            raise DuplicateRoleNameException(data.name) from exc
        return role_to_result(created)

    async def update_role(self, role_id: str, data: RoleUpdate) -> RoleResult:
        role = await self._require(role_id)
        if data.name is not None:
            role.name = data.name
        if data.description is not None:
            role.description = data.description
        if data.permissions is not None:
            role.permissions = list(data.permissions)
        try:
            await self.update(role)
        except IntegrityError as exc:
            raise DuplicateRoleNameException(data.name or role.name) from exc
        return role_to_result(role)

    async def count_users(self, role_id: str) -> int:
        stmt = select(func.count()).select_from(User).where(User.role_id == role_id)
        return int(await self.db.scalar(stmt) or 0)

    async def can_delete_role(self, role_id: str) -> bool:
        """True when no user is assigned to the role."""
        return await self.count_users(role_id) == 0

    async def delete_role(self, role_id: str) -> None:
        """Delete the role only if no user references it (single conditional DELETE).

        Raises:
            ResourceNotFoundException: no such role.
            RoleInUseException: users are still assigned.
        """
        in_use = select(User.id).where(User.role_id == role_id).exists()
        result = await self.db.execute(
            delete(Role)
            .where(Role.id == role_id, ~in_use)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.info("Deleted role %s", role_id)
            return
        await self._require(role_id)
        raise RoleInUseException(role_id, await self.count_users(role_id))

    async def get_users_by_role(self, role_id: str) -> list[UserResult]:
        """Users assigned to the role, newest first."""
        result = await self.db.execute(
            select(User)
            .where(User.role_id == role_id)
            .order_by(User.created_at.desc(), User.id.desc())
            .execution_options(populate_existing=True)
        )
        return [user_to_result(u) for u in result.scalars().all()]
