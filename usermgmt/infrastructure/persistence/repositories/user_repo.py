"""User repository. Interface methods return application DTOs; passwords arrive already hashed."""

from __future__ import annotations

import asyncio

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.dtos.pagination import Page
from usermgmt.application.dtos.user import UserCreate, UserResult, UserUpdate
from usermgmt.domain.exceptions import (
    ConstraintViolationException,
    DuplicateEmailException,
    ResourceNotFoundException,
)
from usermgmt.infrastructure.persistence.models import Role, User
from usermgmt.infrastructure.persistence.repositories.base import BaseRepository
from usermgmt.infrastructure.persistence.repositories.mappers import user_to_result
from usermgmt.infrastructure.security.password import (
    DEFAULT_ROUNDS,
    get_password_hash,
    verify_password,
)
from usermgmt.shared.enums import EntityType

# Lazy dummy hashes for constant-time comparison when user is not found (timing-attack mitigation).
# One per bcrypt cost so a miss costs the same as a real check; computed on first use in a thread.
_dummy_hash_cache: dict[int, str] = {}


async def _get_dummy_hash(rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a valid bcrypt hash made with the given cost; computed once per cost in thread pool."""
    if rounds not in _dummy_hash_cache:
        _dummy_hash_cache[rounds] = await asyncio.to_thread(
            get_password_hash, "not-a-real-password", rounds
        )
    return _dummy_hash_cache[rounds]


class UserRepository(BaseRepository[User]):
    """User repository: CRUD, soft/hard delete, filtered listing, authenticate."""

    def __init__(self, db: AsyncSession, *, bcrypt_rounds: int = DEFAULT_ROUNDS) -> None:
        super().__init__(db, User)
        self.bcrypt_rounds = bcrypt_rounds

    async def _require(self, user_id: str) -> User:
        user = await super().get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException(EntityType.USER.value, user_id)
        return user

    async def _require_role(self, role_id: str) -> None:
        if await self.db.scalar(select(Role.id).where(Role.id == role_id)) is None:
            raise ResourceNotFoundException(EntityType.ROLE.value, role_id)

    async def get_by_id(self, user_id: str) -> UserResult | None:  # type: ignore[override]
        """Return the user with its role, or None. Soft-deleted users are still returned."""
        user = await super().get_by_id(user_id)
        return user_to_result(user) if user else None

    async def get_model_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User)
            .where(User.email == email)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> UserResult | None:
        user = await self.get_model_by_email(email)
        return user_to_result(user) if user else None

    async def get_password_hash(self, user_id: str) -> str:
        """Stored hash for a user (for password verification in services)."""
        return (await self._require(user_id)).password_hash

    async def authenticate(self, email: str, password: str) -> UserResult | None:
        """Return the user when the password matches and the account is active; else None."""
        user = await self.get_model_by_email(email)
        if not user:
            dummy_hash = await _get_dummy_hash(self.bcrypt_rounds)
            await asyncio.to_thread(verify_password, password, dummy_hash)
            return None
        if not user.is_active:
            return None
        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            return None
        return user_to_result(user)

    async def create_user(self, data: UserCreate) -> UserResult:
        """Create user; raise DuplicateEmailException on unique constraint violation.

        Raises:
            ResourceNotFoundException: role_id does not exist.
            DuplicateEmailException: email already registered.
        """
        await self._require_role(data.role_id)
        user = User(
            email=data.email,
            password_hash=data.password_hash,
            first_name=data.first_name,
            last_name=data.last_name,
            role_id=data.role_id,
            phone=data.phone,
            avatar=data.avatar,
            is_active=True,
        )
        try:
            created = await self.create(user)
        except IntegrityError as exc:
            raise DuplicateEmailException(data.email) from exc
        return user_to_result(await self._require(created.id))

    async def update_user(self, user_id: str, data: UserUpdate) -> UserResult:
        """Apply a partial update. Raises ResourceNotFoundException / DuplicateEmailException."""
        user = await self._require(user_id)
        changes = data.changes()
        if "role_id" in changes:
            await self._require_role(changes["role_id"])
        for key, value in changes.items():
            setattr(user, key, value)
        try:
            await self.update(user)
        except IntegrityError as exc:
            raise DuplicateEmailException(changes.get("email")) from exc
        return user_to_result(await self._require(user_id))

    async def update_password(self, user_id: str, password_hash: str) -> None:
        user = await self._require(user_id)
        user.password_hash = password_hash
        await self.update(user)

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        *,
        is_active: bool | None = None,
        role_id: str | None = None,
        search: str | None = None,
    ) -> Page[UserResult]:
        """Paginated users, newest first.

        search is a case-insensitive substring match on first name, last
        name or email.
        """
        stmt = select(User)
        if is_active is not None:
            stmt = stmt.where(User.is_active.is_(is_active))
        if role_id is not None:
            stmt = stmt.where(User.role_id == role_id)
        if search:
            stmt = stmt.where(
                or_(
                    User.first_name.icontains(search, autoescape=True),
                    User.last_name.icontains(search, autoescape=True),
                    User.email.icontains(search, autoescape=True),
                )
            )
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc())
        rows, total = await self._fetch_page(stmt, page, limit)
        return Page.build(
            [user_to_result(u) for u in rows], page=page, limit=limit, total=total
        )

    async def soft_delete(self, user_id: str) -> UserResult:
        """Deactivate the account (is_active=False). The row stays resolvable by id."""
        user = await self._require(user_id)
        user.is_active = False
        await self.update(user)
        return user_to_result(await self._require(user_id))

    async def hard_delete(self, user_id: str) -> None:
        """Remove the row; the user's sessions and tokens go with it.

        Raises:
            ResourceNotFoundException: no such user.
            ConstraintViolationException: audit log entries still reference the user.
        """
        user = await self._require(user_id)
        try:
            await self.delete(user)
        except IntegrityError as exc:
            raise ConstraintViolationException(
                "User is still referenced by audit log entries",
                details={"user_id": user_id},
            ) from exc

    async def count(self) -> int:
        return await self._count()

    async def count_active(self) -> int:
        return await self._count(User.is_active.is_(True))
