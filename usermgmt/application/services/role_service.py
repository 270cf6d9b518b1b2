"""Role application service: create, update, guarded delete, with audit."""

from __future__ import annotations

from usermgmt.application.dtos.role import RoleCreate, RoleResult, RoleUpdate
from usermgmt.application.dtos.user import UserResult
from usermgmt.application.interfaces.repositories import IRoleRepository
from usermgmt.application.services.audit_recorder import AuditRecorder
from usermgmt.domain.exceptions import ResourceNotFoundException, ValidationException
from usermgmt.shared.enums import AuditAction, EntityType


class RoleService:
    """Role use cases. Duplicate names surface as DuplicateRoleNameException."""

    def __init__(self, role_repo: IRoleRepository, audit: AuditRecorder | None = None) -> None:
        self._role_repo = role_repo
        self._audit = audit

    async def _record(
        self,
        action: AuditAction,
        role_id: str,
        actor_id: str | None,
        old_value: RoleResult | None = None,
        new_value: RoleResult | None = None,
    ) -> None:
        if self._audit is not None:
            await self._audit.record(
                action, EntityType.ROLE, role_id, actor_id, old_value, new_value
            )

    async def get_role(self, role_id: str) -> RoleResult:
        role = await self._role_repo.get_by_id(role_id)
        if role is None:
            raise ResourceNotFoundException(EntityType.ROLE.value, role_id)
        return role

    async def list_roles(self) -> list[RoleResult]:
        return await self._role_repo.list_roles()

    async def users_in_role(self, role_id: str) -> list[UserResult]:
        return await self._role_repo.get_users_by_role(role_id)

    async def create_role(
        self, data: RoleCreate, *, actor_id: str | None = None
    ) -> RoleResult:
        if not data.name.strip():
            raise ValidationException("Role name must not be empty", field="name")
        role = await self._role_repo.create_role(data)
        await self._record(AuditAction.CREATED, role.id, actor_id, new_value=role)
        return role

    async def update_role(
        self, role_id: str, data: RoleUpdate, *, actor_id: str | None = None
    ) -> RoleResult:
        before = await self.get_role(role_id)
        after = await self._role_repo.update_role(role_id, data)
        await self._record(
            AuditAction.UPDATED,
            role_id,
            actor_id,
            old_value=_without_users(before),
            new_value=after,
        )
        return after

    async def delete_role(self, role_id: str, *, actor_id: str | None = None) -> None:
        """Delete the role if no user is assigned to it.

        Raises:
            ResourceNotFoundException: no such role.
            RoleInUseException: users are still assigned.
        """
        before = await self.get_role(role_id)
        await self._role_repo.delete_role(role_id)
        await self._record(
            AuditAction.DELETED, role_id, actor_id, old_value=_without_users(before)
        )


def _without_users(role: RoleResult) -> RoleResult:
    """Drop the member list so audit snapshots stay small."""
    return RoleResult(
        id=role.id,
        name=role.name,
        description=role.description,
        permissions=role.permissions,
        created_at=role.created_at,
        updated_at=role.updated_at,
    )
