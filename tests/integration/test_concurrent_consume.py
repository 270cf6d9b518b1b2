"""Concurrent redemption of one token: exactly one caller wins.

Each contender runs in its own session and transaction, so this needs a
store shared across connections (a SQLite file, or TEST_DATABASE_URL).
"""

import asyncio
from collections.abc import AsyncIterator
from datetime import timedelta
from pathlib import Path

import pytest

from usermgmt.application.dtos.role import RoleCreate
from usermgmt.application.dtos.user import UserCreate
from usermgmt.core.config import Settings
from usermgmt.core.dependencies import build_services
from usermgmt.domain.exceptions import AuthenticationException
from usermgmt.infrastructure.persistence.database import Database
from usermgmt.shared.utils.datetime import utc_now

pytestmark = pytest.mark.requires_db


@pytest.fixture
async def shared_database(settings: Settings, tmp_path: Path) -> AsyncIterator[Database]:
    url = settings.resolved_database_url
    if url.startswith("sqlite") and ":memory:" in url:
        url = f"sqlite+aiosqlite:///{tmp_path / 'race.db'}"
    db = Database(url)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
async def seeded_user_id(shared_database: Database, settings: Settings) -> str:
    async with shared_database.transaction() as session:
        services = build_services(session, settings)
        role = await services.roles.create_role(RoleCreate(name="member", permissions=[]))
        user = await services.users.create_user(
            UserCreate(
                email="race@example.com",
                password_hash="not-a-real-hash",
                first_name="Race",
                last_name="Condition",
                role_id=role.id,
            )
        )
        return user.id


async def _consume_reset(database: Database, settings: Settings, token: str) -> bool:
    async with database.transaction() as session:
        return await build_services(session, settings).password_reset_tokens.consume(token)


async def _refresh(database: Database, settings: Settings, token: str) -> bool:
    try:
        async with database.transaction() as session:
            await build_services(session, settings).credential_service.refresh(token)
    except AuthenticationException:
        return False
    return True


async def test_concurrent_consume_has_single_winner(
    shared_database: Database, settings: Settings, seeded_user_id: str
) -> None:
    async with shared_database.transaction() as session:
        await build_services(session, settings).password_reset_tokens.issue(
            seeded_user_id, "race-reset", utc_now() + timedelta(hours=1)
        )

    results = await asyncio.gather(
        _consume_reset(shared_database, settings, "race-reset"),
        _consume_reset(shared_database, settings, "race-reset"),
    )
    assert sorted(results) == [False, True]

    async with shared_database.session() as session:
        reset_tokens = build_services(session, settings).password_reset_tokens
        assert not await reset_tokens.is_valid("race-reset")


async def test_concurrent_refresh_rotates_once(
    shared_database: Database, settings: Settings, seeded_user_id: str
) -> None:
    async with shared_database.transaction() as session:
        await build_services(session, settings).refresh_tokens.issue(
            seeded_user_id, "race-refresh", utc_now() + timedelta(days=1)
        )

    results = await asyncio.gather(
        _refresh(shared_database, settings, "race-refresh"),
        _refresh(shared_database, settings, "race-refresh"),
    )
    assert sorted(results) == [False, True]

    async with shared_database.session() as session:
        refresh_tokens = build_services(session, settings).refresh_tokens
        assert await refresh_tokens.count_active_for_user(seeded_user_id) == 1
