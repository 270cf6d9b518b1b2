"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import Protocol


class IPasswordHasher(Protocol):
    """Protocol for password hashing. Both calls are CPU-bound (run via asyncio.to_thread)."""

    def hash_password(self, password: str) -> str:
        """Return a salted hash of password."""

    def verify_password(self, password: str, hashed: str) -> bool:
        """Return True when password matches hashed."""

    def needs_rehash(self, hashed: str) -> bool:
        """Return True when hashed was made with a different cost than the current one."""
