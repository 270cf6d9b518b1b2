"""DTOs for token-like entities (sessions, refresh tokens, password-reset tokens).

Validity is never stored: ``is_valid_at(now)`` recomputes it from the
one-way flag and the expiry.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TokenResult:
    """Fields common to every token-like entity."""

    id: str
    token: str
    user_id: str
    expires_at: datetime
    created_at: datetime

    @property
    def retired(self) -> bool:
        """Whether the one-way flag is set (sessions have none)."""
        return False

    def is_expired_at(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_valid_at(self, now: datetime) -> bool:
        return not self.retired and self.expires_at > now


@dataclass(frozen=True)
class SessionResult(TokenResult):
    last_activity_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class RefreshTokenResult(TokenResult):
    is_revoked: bool

    @property
    def retired(self) -> bool:
        return self.is_revoked


@dataclass(frozen=True)
class PasswordResetTokenResult(TokenResult):
    is_used: bool

    @property
    def retired(self) -> bool:
        return self.is_used


@dataclass(frozen=True)
class IssuedCredentials:
    """What a successful login hands back: a session plus a refresh token."""

    session: SessionResult
    refresh_token: RefreshTokenResult


@dataclass(frozen=True)
class SweepReport:
    """Rows removed by one cleanup run, per entity."""

    expired_sessions: int = 0
    expired_refresh_tokens: int = 0
    revoked_refresh_tokens: int = 0
    expired_reset_tokens: int = 0
    used_reset_tokens: int = 0
    audit_logs: int = 0

    @property
    def total(self) -> int:
        return (
            self.expired_sessions
            + self.expired_refresh_tokens
            + self.revoked_refresh_tokens
            + self.expired_reset_tokens
            + self.used_reset_tokens
            + self.audit_logs
        )
