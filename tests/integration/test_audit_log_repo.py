"""Audit log repository integration tests: append, reads, statistics, retention."""

from datetime import timedelta, timezone

import pytest

from usermgmt.application.dtos.audit_log import AuditLogEntryCreate
from usermgmt.application.dtos.user import UserResult
from usermgmt.domain.exceptions import ConstraintViolationException, ValidationException
from usermgmt.infrastructure.persistence.models import AuditLog
from usermgmt.infrastructure.persistence.repositories import AuditLogRepository
from usermgmt.shared.utils.datetime import utc_now

pytestmark = pytest.mark.requires_db


def _entry(user_id: str, action: str = "updated", entity_type: str = "user", entity_id: str = "e1") -> AuditLogEntryCreate:
    return AuditLogEntryCreate(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        old_value={"first_name": "Old"},
        new_value={"first_name": "New"},
        ip_address="127.0.0.1",
    )


async def test_create_and_get(db_session, user: UserResult) -> None:
    repo = AuditLogRepository(db_session)
    created = await repo.create(_entry(user.id))
    assert created.id
    assert created.old_value == {"first_name": "Old"}
    assert created.new_value == {"first_name": "New"}
    assert created.created_at.tzinfo is not None
    assert await repo.get_by_id(created.id) == created
    assert await repo.get_by_id("missing") is None


async def test_create_with_unknown_user_raises(db_session) -> None:
    with pytest.raises(ConstraintViolationException):
        await AuditLogRepository(db_session).create(_entry("no-such-user"))


async def test_entries_are_immutable(db_session, user: UserResult) -> None:
    repo = AuditLogRepository(db_session)
    created = await repo.create(_entry(user.id))
    row = await db_session.get(AuditLog, created.id)
    row.action = "tampered"
    with pytest.raises(ValueError):
        await db_session.flush()


async def test_list_filters(db_session, user_factory) -> None:
    actor = await user_factory()
    other = await user_factory()
    repo = AuditLogRepository(db_session)
    await repo.create(_entry(actor.id, "created", "user", "u1"))
    await repo.create(_entry(actor.id, "updated", "user", "u1"))
    await repo.create(_entry(actor.id, "created", "role", "r1"))
    await repo.create(_entry(other.id, "login", "session", "s1"))

    assert [e.action for e in await repo.list_by_entity("user", "u1")] == ["updated", "created"]
    assert len(await repo.list_by_user(actor.id)) == 3
    assert len(await repo.list_by_user(actor.id, limit=2)) == 2
    assert len(await repo.list_by_action("created")) == 2
    assert len(await repo.list_by_entity_type("session")) == 1
    assert await repo.count() == 4
    assert await repo.count_by_user(other.id) == 1
    assert await repo.count_by_entity("user", "u1") == 2

    page = await repo.list(1, 2, user_id=actor.id)
    assert page.pagination.total == 3
    assert page.pagination.pages == 2
    assert len(page.items) == 2
    assert (await repo.list(1, 10, action="created", entity_type="role")).pagination.total == 1

    with pytest.raises(ValidationException):
        await repo.list(0, 10)


async def test_list_date_range(db_session, user: UserResult) -> None:
    repo = AuditLogRepository(db_session)
    await repo.create(_entry(user.id))
    now = utc_now()
    assert (await repo.list(date_from=now - timedelta(minutes=1))).pagination.total == 1
    assert (await repo.list(date_from=now + timedelta(minutes=1))).pagination.total == 0
    assert (await repo.list(date_to=now - timedelta(minutes=1))).pagination.total == 0


async def test_date_bounds_with_utc_offset(db_session, user: UserResult) -> None:
    repo = AuditLogRepository(db_session)
    await repo.create(_entry(user.id))
    ahead_of_utc = timezone(timedelta(hours=9))
    now = utc_now().astimezone(ahead_of_utc)
    assert (await repo.list(date_from=now - timedelta(minutes=1))).pagination.total == 1
    assert (await repo.list(date_to=now - timedelta(minutes=1))).pagination.total == 0
    assert await repo.delete_older_than(now - timedelta(minutes=1)) == 0
    assert await repo.delete_older_than(now + timedelta(minutes=1)) == 1


async def test_statistics(db_session, user: UserResult) -> None:
    repo = AuditLogRepository(db_session)
    for action in ("login", "login", "login", "updated", "created"):
        entity = "session" if action == "login" else "user"
        await repo.create(_entry(user.id, action, entity))
    stats = await repo.statistics()
    assert stats.total == 5
    assert stats.last_24_hours == 5
    assert (stats.by_action[0].key, stats.by_action[0].count) == ("login", 3)
    assert {g.key: g.count for g in stats.by_action} == {"login": 3, "updated": 1, "created": 1}
    assert [(g.key, g.count) for g in stats.by_entity_type] == [("session", 3), ("user", 2)]


async def test_retention_deletes(db_session, user_factory) -> None:
    keep = await user_factory()
    purge = await user_factory()
    repo = AuditLogRepository(db_session)
    await repo.create(_entry(keep.id))
    await repo.create(_entry(purge.id))
    await repo.create(_entry(purge.id))

    assert await repo.delete_older_than(utc_now() - timedelta(days=1)) == 0
    assert await repo.delete_all_for_user(purge.id) == 2
    assert await repo.count() == 1
    assert await repo.delete_older_than(utc_now() + timedelta(seconds=1)) == 1
    assert await repo.count() == 0
