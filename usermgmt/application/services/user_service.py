"""User application service: registration, profile, password and account lifecycle."""

from __future__ import annotations

import asyncio

from usermgmt.application.dtos.pagination import Page
from usermgmt.application.dtos.user import UserCreate, UserResult, UserUpdate
from usermgmt.application.interfaces.repositories import IAuditLogRepository, IUserRepository
from usermgmt.application.interfaces.services import IPasswordHasher
from usermgmt.application.services.audit_recorder import AuditRecorder
from usermgmt.application.services.credential_service import CredentialService
from usermgmt.domain.exceptions import (
    AuthenticationException,
    ResourceNotFoundException,
    ValidationException,
)
from usermgmt.shared.enums import AuditAction, EntityType


class UserService:
    """User use cases. State changes are recorded through the audit recorder."""

    def __init__(
        self,
        *,
        user_repo: IUserRepository,
        credentials: CredentialService,
        password_hasher: IPasswordHasher,
        audit: AuditRecorder | None = None,
        audit_repo: IAuditLogRepository | None = None,
    ) -> None:
        self._user_repo = user_repo
        self._credentials = credentials
        self._hasher = password_hasher
        self._audit = audit
        self._audit_repo = audit_repo

    async def _record(
        self,
        action: AuditAction,
        user_id: str,
        actor_id: str | None,
        old_value: UserResult | None = None,
        new_value: UserResult | None = None,
    ) -> None:
        if self._audit is not None:
            await self._audit.record(
                action, EntityType.USER, user_id, actor_id, old_value, new_value
            )

    async def get_user(self, user_id: str) -> UserResult:
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException(EntityType.USER.value, user_id)
        return user

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        *,
        is_active: bool | None = None,
        role_id: str | None = None,
        search: str | None = None,
    ) -> Page[UserResult]:
        return await self._user_repo.list_users(
            page, limit, is_active=is_active, role_id=role_id, search=search
        )

    async def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role_id: str,
        phone: str | None = None,
        avatar: str | None = None,
        actor_id: str | None = None,
    ) -> UserResult:
        """Hash the password and create the user.

        Raises:
            ValidationException: empty password.
            DuplicateEmailException: email already registered.
            ResourceNotFoundException: role does not exist.
        """
        if not password:
            raise ValidationException("Password must not be empty", field="password")
        hashed = await asyncio.to_thread(self._hasher.hash_password, password)
        user = await self._user_repo.create_user(
            UserCreate(
                email=email,
                password_hash=hashed,
                first_name=first_name,
                last_name=last_name,
                role_id=role_id,
                phone=phone,
                avatar=avatar,
            )
        )
        await self._record(AuditAction.CREATED, user.id, actor_id, new_value=user)
        return user

    async def update_profile(
        self, user_id: str, data: UserUpdate, *, actor_id: str | None = None
    ) -> UserResult:
        """Partial update (name, email, role, phone, avatar, is_active)."""
        if not data.changes():
            raise ValidationException("At least one field must be provided")
        before = await self.get_user(user_id)
        after = await self._user_repo.update_user(user_id, data)
        await self._record(AuditAction.UPDATED, user_id, actor_id, before, after)
        return after

    async def change_password(
        self,
        user_id: str,
        new_password: str,
        *,
        current_password: str | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Set a new password and revoke every credential the user holds.

        When current_password is given it must match the stored hash.

        Raises:
            AuthenticationException: current_password does not match.
        """
        if not new_password:
            raise ValidationException("Password must not be empty", field="password")
        if current_password is not None:
            stored = await self._user_repo.get_password_hash(user_id)
            if not await asyncio.to_thread(
                self._hasher.verify_password, current_password, stored
            ):
                raise AuthenticationException("Current password is incorrect")
        hashed = await asyncio.to_thread(self._hasher.hash_password, new_password)
        await self._user_repo.update_password(user_id, hashed)
        await self._credentials.revoke_all_credentials(user_id, actor_id=actor_id)
        await self._record(AuditAction.PASSWORD_CHANGED, user_id, actor_id)

    async def activate(self, user_id: str, *, actor_id: str | None = None) -> UserResult:
        before = await self.get_user(user_id)
        after = await self._user_repo.update_user(user_id, UserUpdate(is_active=True))
        await self._record(AuditAction.ACTIVATED, user_id, actor_id, before, after)
        return after

    async def deactivate(self, user_id: str, *, actor_id: str | None = None) -> UserResult:
        """Soft delete: is_active=False plus revocation of all credentials."""
        before = await self.get_user(user_id)
        after = await self._user_repo.soft_delete(user_id)
        await self._credentials.revoke_all_credentials(user_id, actor_id=actor_id)
        await self._record(AuditAction.DEACTIVATED, user_id, actor_id, before, after)
        return after

    async def delete_user(
        self, user_id: str, *, actor_id: str | None = None, purge_audit: bool = False
    ) -> None:
        """Hard delete. Sessions and tokens cascade with the row.

        Audit entries performed by the user block deletion unless purge_audit
        is set, in which case they are deleted first.

        Raises:
            ResourceNotFoundException: no such user.
            ConstraintViolationException: audit entries still reference the user.
        """
        before = await self.get_user(user_id)
        if purge_audit and self._audit_repo is not None:
            await self._audit_repo.delete_all_for_user(user_id)
        await self._user_repo.hard_delete(user_id)
        if actor_id is not None and actor_id != user_id:
            await self._record(AuditAction.DELETED, user_id, actor_id, old_value=before)
