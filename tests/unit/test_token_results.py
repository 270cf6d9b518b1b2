"""Unit tests for token read-models: validity is computed, never stored."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from usermgmt.application.dtos.token import (
    PasswordResetTokenResult,
    RefreshTokenResult,
    SessionResult,
    SweepReport,
)
from usermgmt.infrastructure.persistence.models import UserSession
from usermgmt.infrastructure.persistence.repositories.token_repo import TokenRepository, mask_token
from usermgmt.shared.utils.datetime import utc_now


def _refresh(*, revoked: bool, expires_in: timedelta) -> RefreshTokenResult:
    now = utc_now()
    return RefreshTokenResult(
        id="rt1",
        token="tok",
        user_id="u1",
        expires_at=now + expires_in,
        created_at=now,
        is_revoked=revoked,
    )


def test_refresh_token_validity() -> None:
    now = utc_now()
    assert _refresh(revoked=False, expires_in=timedelta(hours=1)).is_valid_at(now)
    assert not _refresh(revoked=True, expires_in=timedelta(hours=1)).is_valid_at(now)
    assert not _refresh(revoked=False, expires_in=timedelta(seconds=-1)).is_valid_at(now)


def test_expiry_boundary_is_invalid() -> None:
    """expires_at == now is already expired (validity needs expires_at > now)."""
    token = _refresh(revoked=False, expires_in=timedelta(hours=1))
    assert not token.is_valid_at(token.expires_at)
    assert token.is_expired_at(token.expires_at)


def test_reset_token_retired_follows_is_used() -> None:
    now = utc_now()
    token = PasswordResetTokenResult(
        id="p1",
        token="t",
        user_id="u1",
        expires_at=now + timedelta(minutes=5),
        created_at=now,
        is_used=True,
    )
    assert token.retired
    assert not token.is_valid_at(now)


def test_session_has_no_flag() -> None:
    now = utc_now()
    session = SessionResult(
        id="s1",
        token="t",
        user_id="u1",
        expires_at=now + timedelta(hours=1),
        created_at=now,
        last_activity_at=now,
    )
    assert not session.retired
    assert session.is_valid_at(now)


def test_sweep_report_total() -> None:
    report = SweepReport(expired_sessions=1, revoked_refresh_tokens=2, audit_logs=3)
    assert report.total == 6


def test_token_repository_needs_a_result_mapper() -> None:
    with pytest.raises(TypeError):
        TokenRepository(MagicMock(), UserSession)


def test_mask_token_hides_most_of_the_token() -> None:
    assert mask_token("abcdefghijkl") == "abcdef..."
    assert mask_token("short") == "***"
