"""Pytest configuration and fixtures for usermgmt.

Each DB test gets a fresh database: in-memory SQLite by default, or the
database named by TEST_DATABASE_URL (tables are created and dropped per
test). The db_session fixture is rolled back after the test.
"""

import os
from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from usermgmt.application.dtos.role import RoleCreate, RoleResult
from usermgmt.application.dtos.user import UserCreate, UserResult
from usermgmt.core.config import Settings
from usermgmt.core.dependencies import Services, build_services
from usermgmt.infrastructure.persistence.database import Database
from usermgmt.infrastructure.persistence.repositories import RoleRepository, UserRepository
from usermgmt.infrastructure.security.password import get_password_hash

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# Lowest bcrypt cost keeps hashing fast in tests.
TEST_BCRYPT_ROUNDS = 4
TEST_PASSWORD = "correct horse battery staple"

UserFactory = Callable[..., Awaitable[UserResult]]


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: explicit values, no env file needed."""
    return Settings(
        ENVIRONMENT="test",
        database_url=TEST_DATABASE_URL,
        jwt_access_secret="test-access-secret",
        jwt_refresh_secret="test-refresh-secret",
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    """Isolated Database with all tables created; dropped and disposed after the test."""
    db = Database(settings.resolved_database_url)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncIterator[AsyncSession]:
    """Database session for repository/integration tests. Rolls back after test."""
    async with database.session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def services(db_session: AsyncSession, settings: Settings) -> Services:
    """All repositories and services bound to db_session."""
    return build_services(db_session, settings)


@pytest.fixture
async def role(db_session: AsyncSession) -> RoleResult:
    """A role with basic permissions."""
    return await RoleRepository(db_session).create_role(
        RoleCreate(name="member", description="Basic access", permissions=["users:read"])
    )


@pytest.fixture
def user_factory(db_session: AsyncSession, role: RoleResult) -> UserFactory:
    """Create users with unique emails; password is TEST_PASSWORD unless given."""
    counter = 0
    password_hash = get_password_hash(TEST_PASSWORD, rounds=TEST_BCRYPT_ROUNDS)

    async def create(**overrides: object) -> UserResult:
        nonlocal counter
        counter += 1
        fields: dict[str, object] = {
            "email": f"user{counter}@example.com",
            "password_hash": password_hash,
            "first_name": f"First{counter}",
            "last_name": f"Last{counter}",
            "role_id": role.id,
        }
        fields.update(overrides)
        return await UserRepository(db_session).create_user(UserCreate(**fields))  # type: ignore[arg-type]

    return create


@pytest.fixture
async def user(user_factory: UserFactory) -> UserResult:
    """A single active user."""
    return await user_factory(email="ada@example.com", first_name="Ada", last_name="Lovelace")


@pytest.fixture
def plain_password() -> str:
    """The clear-text password of users built by user_factory."""
    return TEST_PASSWORD
