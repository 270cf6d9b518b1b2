"""User repository integration tests: CRUD, soft delete, filtered pagination, authenticate."""

import pytest

from usermgmt.application.dtos.audit_log import AuditLogEntryCreate
from usermgmt.application.dtos.role import RoleResult
from usermgmt.application.dtos.user import UserCreate, UserUpdate
from usermgmt.domain.exceptions import (
    ConstraintViolationException,
    DuplicateEmailException,
    ResourceNotFoundException,
    ValidationException,
)
from usermgmt.core.config import Settings
from usermgmt.core.dependencies import build_services
from usermgmt.infrastructure.persistence.repositories import (
    AuditLogRepository,
    RefreshTokenRepository,
    SessionRepository,
    UserRepository,
)
from usermgmt.infrastructure.persistence.repositories.user_repo import _get_dummy_hash
from usermgmt.shared.utils.datetime import utc_in

pytestmark = pytest.mark.requires_db


async def test_create_user_and_get_by_id(db_session, role: RoleResult) -> None:
    repo = UserRepository(db_session)
    created = await repo.create_user(
        UserCreate(
            email="grace@example.com",
            password_hash="hashed",
            first_name="Grace",
            last_name="Hopper",
            role_id=role.id,
            phone="+100",
        )
    )
    assert created.id
    assert created.is_active is True
    assert created.role is not None
    assert created.role.name == "member"
    assert created.created_at.tzinfo is not None

    found = await repo.get_by_id(created.id)
    assert found == created
    assert (await repo.get_by_email("grace@example.com")) == created
    assert not hasattr(found, "password_hash")


async def test_get_unknown_returns_none(db_session) -> None:
    repo = UserRepository(db_session)
    assert await repo.get_by_id("missing") is None
    assert await repo.get_by_email("missing@example.com") is None


async def test_duplicate_email_raises(db_session, user_factory) -> None:
    await user_factory(email="dup@example.com")
    with pytest.raises(DuplicateEmailException):
        await user_factory(email="dup@example.com")


async def test_create_with_unknown_role_raises(db_session) -> None:
    with pytest.raises(ResourceNotFoundException):
        await UserRepository(db_session).create_user(
            UserCreate(
                email="x@example.com",
                password_hash="h",
                first_name="X",
                last_name="Y",
                role_id="no-such-role",
            )
        )


async def test_update_user_partial(db_session, user_factory) -> None:
    created = await user_factory(phone="+1")
    repo = UserRepository(db_session)
    updated = await repo.update_user(created.id, UserUpdate(first_name="Renamed"))
    assert updated.first_name == "Renamed"
    assert updated.last_name == created.last_name
    assert updated.phone == "+1"
    assert updated.updated_at >= created.updated_at


async def test_update_user_to_taken_email_raises(db_session, user_factory) -> None:
    await user_factory(email="taken@example.com")
    other = await user_factory()
    with pytest.raises(DuplicateEmailException):
        await UserRepository(db_session).update_user(other.id, UserUpdate(email="taken@example.com"))


async def test_update_unknown_user_raises(db_session) -> None:
    with pytest.raises(ResourceNotFoundException):
        await UserRepository(db_session).update_user("missing", UserUpdate(first_name="X"))


async def test_update_password(db_session, user_factory) -> None:
    created = await user_factory()
    repo = UserRepository(db_session)
    await repo.update_password(created.id, "new-hash")
    assert await repo.get_password_hash(created.id) == "new-hash"
    with pytest.raises(ResourceNotFoundException):
        await repo.update_password("missing", "h")


async def test_soft_delete_keeps_row_resolvable(db_session, user_factory) -> None:
    active = await user_factory()
    gone = await user_factory()
    repo = UserRepository(db_session)

    result = await repo.soft_delete(gone.id)
    assert result.is_active is False

    still_there = await repo.get_by_id(gone.id)
    assert still_there is not None and still_there.is_active is False

    page = await repo.list_users(1, 10, is_active=True)
    assert [u.id for u in page.items] == [active.id]
    assert await repo.count() == 2
    assert await repo.count_active() == 1


async def test_list_users_pagination_over_25_rows(db_session, user_factory) -> None:
    for _ in range(25):
        await user_factory()
    repo = UserRepository(db_session)

    page = await repo.list_users(page=2, limit=10)
    assert len(page.items) == 10
    assert page.to_dict()["pagination"] == {"page": 2, "limit": 10, "total": 25, "pages": 3}

    seen = []
    for n in range(1, 4):
        seen.extend(u.id for u in (await repo.list_users(page=n, limit=10)).items)
    assert len(seen) == 25
    assert len(set(seen)) == 25


async def test_list_users_beyond_last_page_is_empty(db_session, user_factory) -> None:
    await user_factory()
    page = await UserRepository(db_session).list_users(page=5, limit=10)
    assert page.items == []
    assert page.pagination.total == 1


async def test_list_users_invalid_args(db_session) -> None:
    with pytest.raises(ValidationException):
        await UserRepository(db_session).list_users(page=1, limit=0)


async def test_list_users_search_is_case_insensitive(db_session, user_factory) -> None:
    await user_factory(first_name="Alice", last_name="Smith", email="alice@example.com")
    await user_factory(first_name="Bob", last_name="Jones", email="bob@corp.test")
    await user_factory(first_name="Carol", last_name="SMITHERS", email="carol@example.com")
    repo = UserRepository(db_session)

    by_last = await repo.list_users(search="smith")
    assert {u.first_name for u in by_last.items} == {"Alice", "Carol"}
    by_email = await repo.list_users(search="CORP")
    assert [u.first_name for u in by_email.items] == ["Bob"]
    assert (await repo.list_users(search="100%")).pagination.total == 0


async def test_list_users_by_role(db_session, user_factory, role: RoleResult) -> None:
    await user_factory()
    repo = UserRepository(db_session)
    assert (await repo.list_users(role_id=role.id)).pagination.total == 1
    assert (await repo.list_users(role_id="other")).pagination.total == 0


async def test_authenticate(db_session, user_factory, plain_password: str) -> None:
    created = await user_factory(email="login@example.com")
    repo = UserRepository(db_session)
    authed = await repo.authenticate("login@example.com", plain_password)
    assert authed is not None and authed.id == created.id
    assert await repo.authenticate("login@example.com", "wrong") is None
    assert await repo.authenticate("nobody@example.com", plain_password) is None
    await repo.soft_delete(created.id)
    assert await repo.authenticate("login@example.com", plain_password) is None


async def test_unknown_email_check_uses_configured_cost(db_session, settings: Settings) -> None:
    users = build_services(db_session, settings).users
    assert users.bcrypt_rounds == settings.bcrypt_rounds
    assert await users.authenticate("ghost@example.com", "whatever") is None
    dummy_hash = await _get_dummy_hash(users.bcrypt_rounds)
    assert int(dummy_hash.split("$")[2]) == settings.bcrypt_rounds


async def test_hard_delete_cascades_credentials(db_session, user_factory) -> None:
    created = await user_factory()
    await SessionRepository(db_session).issue(created.id, "s", utc_in(hours=1))
    await RefreshTokenRepository(db_session).issue(created.id, "r", utc_in(days=1))
    repo = UserRepository(db_session)

    await repo.hard_delete(created.id)
    assert await repo.get_by_id(created.id) is None
    assert await SessionRepository(db_session).count() == 0
    assert await RefreshTokenRepository(db_session).count() == 0
    with pytest.raises(ResourceNotFoundException):
        await repo.hard_delete(created.id)


async def test_hard_delete_blocked_by_audit_entries(db_session, user_factory) -> None:
    created = await user_factory()
    await AuditLogRepository(db_session).create(
        AuditLogEntryCreate(action="login", entity_type="session", entity_id="s1", user_id=created.id)
    )
    with pytest.raises(ConstraintViolationException):
        await UserRepository(db_session).hard_delete(created.id)
