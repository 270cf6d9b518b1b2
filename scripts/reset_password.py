"""Reset a user's password and revoke all of their credentials.

Usage:
    python -m scripts.reset_password <email> <new_password>
"""

import sys

from usermgmt.core.dependencies import build_services
from usermgmt.core.lifespan import run
from usermgmt.infrastructure.persistence.database import Database


async def main(database: Database) -> int:
    """Reset password for the user with the given email."""
    if len(sys.argv) < 3:
        print(
            "Usage: python -m scripts.reset_password <email> <new_password>",
            file=sys.stderr,
        )
        return 1
    email = sys.argv[1]
    new_password = sys.argv[2]

    async with database.transaction() as session:
        services = build_services(session)
        user = await services.users.get_by_email(email)
        if user is None:
            print(f"User not found: {email}", file=sys.stderr)
            return 1
        await services.user_service.change_password(user.id, new_password)
    print(f"Password reset for user {user.id} ({user.email}); all sessions and tokens revoked")
    return 0


if __name__ == "__main__":
    sys.exit(run(main))
