"""Delete expired and retired credentials, plus old audit entries when configured.

Runs every sweep once: expired sessions, expired and revoked refresh
tokens, expired and used password-reset tokens. When AUDIT_RETENTION_DAYS
is set, audit log entries older than that many days are deleted too.
Intended for cron; there is no built-in scheduler.

Usage:
    python -m scripts.cleanup_credentials
"""

import sys

from usermgmt.core.dependencies import build_services
from usermgmt.core.lifespan import run
from usermgmt.infrastructure.persistence.database import Database


async def main(database: Database) -> int:
    async with database.transaction() as session:
        report = await build_services(session).credential_service.cleanup()
    print(f"Expired sessions deleted:       {report.expired_sessions}")
    print(f"Expired refresh tokens deleted: {report.expired_refresh_tokens}")
    print(f"Revoked refresh tokens deleted: {report.revoked_refresh_tokens}")
    print(f"Expired reset tokens deleted:   {report.expired_reset_tokens}")
    print(f"Used reset tokens deleted:      {report.used_reset_tokens}")
    print(f"Audit log entries deleted:      {report.audit_logs}")
    print(f"Total:                          {report.total}")
    return 0


if __name__ == "__main__":
    sys.exit(run(main))
