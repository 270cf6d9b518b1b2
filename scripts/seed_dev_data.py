"""Seed development data: the admin/manager/user roles and demo accounts.

Existing roles (by name) and users (by email) are left untouched, so the
script can be re-run. Pass --create-tables to create the schema first
(development databases only; production schema is managed externally).

Usage:
    python -m scripts.seed_dev_data [--create-tables]

Exits 1 on failure.
"""

from __future__ import annotations

import sys

from usermgmt.application.dtos.role import RoleCreate
from usermgmt.core.dependencies import Services, build_services
from usermgmt.core.lifespan import run
from usermgmt.domain.exceptions import UserManagementException
from usermgmt.infrastructure.persistence.database import Database
from usermgmt.shared.logging import get_logger

logger = get_logger(__name__)

ROLES: list[RoleCreate] = [
    RoleCreate(
        name="admin",
        description="Full system access",
        permissions=[
            "users:read",
            "users:write",
            "users:delete",
            "roles:read",
            "roles:write",
            "roles:delete",
            "settings:read",
            "settings:write",
            "reports:read",
            "reports:export",
        ],
    ),
    RoleCreate(
        name="manager",
        description="Can manage users and view reports",
        permissions=["users:read", "users:write", "reports:read", "reports:export"],
    ),
    RoleCreate(
        name="user",
        description="Basic user access",
        permissions=["users:read"],
    ),
]

# (email, password, first name, last name, role name, phone)
USERS: list[tuple[str, str, str, str, str, str]] = [
    ("admin@example.com", "admin123", "Admin", "User", "admin", "+1234567890"),
    ("manager@example.com", "manager123", "Manager", "User", "manager", "+1234567891"),
    ("user@example.com", "user123", "Regular", "User", "user", "+1234567892"),
] + [
    (f"test{i}@example.com", "test123", f"Test{i}", "User", "user", f"+123456789{i + 2}")
    for i in range(1, 6)
]


async def _seed_roles(services: Services) -> dict[str, str]:
    """Create missing roles; return role name -> id."""
    ids: dict[str, str] = {}
    for data in ROLES:
        existing = await services.roles.get_by_name(data.name)
        role = existing or await services.role_service.create_role(data)
        ids[role.name] = role.id
    return ids


async def _seed_users(services: Services, role_ids: dict[str, str]) -> int:
    created = 0
    for email, password, first_name, last_name, role_name, phone in USERS:
        if await services.users.get_by_email(email) is not None:
            continue
        await services.user_service.register(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role_id=role_ids[role_name],
            phone=phone,
        )
        created += 1
    return created


async def main(database: Database) -> int:
    if "--create-tables" in sys.argv[1:]:
        await database.create_all()
        logger.info("Tables created")
    try:
        async with database.transaction() as session:
            services = build_services(session)
            role_ids = await _seed_roles(services)
            created = await _seed_users(services, role_ids)
            role_count = len(await services.roles.list_roles())
            user_count = await services.users.count()
    except UserManagementException as exc:
        logger.error("Seed failed: %s", exc.message)
        return 1
    print(f"Seeded {created} new user(s); database has {role_count} roles and {user_count} users")
    print("Test credentials:")
    print("  Admin: admin@example.com / admin123")
    print("  Manager: manager@example.com / manager123")
    print("  User: user@example.com / user123")
    print("  Test users: test1@example.com to test5@example.com / test123")
    return 0


if __name__ == "__main__":
    sys.exit(run(main))
