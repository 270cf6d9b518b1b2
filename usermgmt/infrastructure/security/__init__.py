"""Security helpers: password hashing."""

from usermgmt.infrastructure.security.password import (
    get_password_hash,
    needs_rehash,
    verify_password,
)

__all__ = ["get_password_hash", "needs_rehash", "verify_password"]
