"""Credential flow integration tests: login, refresh rotation, logout, password reset, cleanup."""

from datetime import timedelta

import pytest

from usermgmt.application.dtos.user import UserResult
from usermgmt.core.dependencies import Services, build_services
from usermgmt.domain.exceptions import AuthenticationException
from usermgmt.shared.utils.datetime import utc_now

pytestmark = pytest.mark.requires_db


async def test_start_session_issues_session_and_refresh_token(
    services: Services, user: UserResult, plain_password: str
) -> None:
    issued = await services.credential_service.start_session(
        user.email, plain_password, ip_address="10.1.1.1", user_agent="pytest"
    )
    assert issued.session.user_id == user.id
    assert issued.session.ip_address == "10.1.1.1"
    assert issued.refresh_token.user_id == user.id
    assert await services.sessions.is_valid(issued.session.token)
    assert await services.refresh_tokens.is_valid(issued.refresh_token.token)

    logins = await services.audit_logs.list_by_action("login")
    assert len(logins) == 1
    assert logins[0].user_id == user.id
    assert logins[0].entity_id == issued.session.id


async def test_session_lifetime_follows_settings(services: Services, user: UserResult, plain_password: str) -> None:
    issued = await services.credential_service.start_session(user.email, plain_password)
    remaining = issued.session.expires_at - utc_now()
    assert timedelta(hours=23) < remaining <= timedelta(hours=24)


async def test_start_session_rejects_bad_password(services: Services, user: UserResult) -> None:
    with pytest.raises(AuthenticationException):
        await services.credential_service.start_session(user.email, "wrong")


async def test_start_session_rejects_inactive_user(
    services: Services, user: UserResult, plain_password: str
) -> None:
    await services.users.soft_delete(user.id)
    with pytest.raises(AuthenticationException):
        await services.credential_service.start_session(user.email, plain_password)


async def test_validate_session(services: Services, user: UserResult, plain_password: str) -> None:
    issued = await services.credential_service.start_session(user.email, plain_password)
    session = await services.credential_service.validate_session(issued.session.token)
    assert session.id == issued.session.id
    with pytest.raises(AuthenticationException):
        await services.credential_service.validate_session("unknown")


async def test_refresh_rotates_token(services: Services, user: UserResult, plain_password: str) -> None:
    issued = await services.credential_service.start_session(user.email, plain_password)
    old = issued.refresh_token.token

    rotated = await services.credential_service.refresh(old)
    assert rotated.token != old
    assert await services.refresh_tokens.is_valid(rotated.token)
    assert not await services.refresh_tokens.is_valid(old)

    # Replaying the rotated-out token fails.
    with pytest.raises(AuthenticationException):
        await services.credential_service.refresh(old)


async def test_refresh_rejects_expired_token(services: Services, user: UserResult) -> None:
    await services.refresh_tokens.issue(user.id, "expired-rt", utc_now() - timedelta(seconds=1))
    with pytest.raises(AuthenticationException):
        await services.credential_service.refresh("expired-rt")


async def test_end_session(services: Services, user: UserResult, plain_password: str) -> None:
    issued = await services.credential_service.start_session(user.email, plain_password)
    await services.credential_service.end_session(
        issued.session.token, issued.refresh_token.token
    )
    assert await services.sessions.find_by_token(issued.session.token) is None
    assert not await services.refresh_tokens.is_valid(issued.refresh_token.token)
    # Logging out twice is harmless.
    await services.credential_service.end_session(issued.session.token, "never-issued")
    assert len(await services.audit_logs.list_by_action("logout")) == 1


async def test_password_reset_flow(services: Services, user: UserResult, plain_password: str) -> None:
    login = await services.credential_service.start_session(user.email, plain_password)
    reset = await services.credential_service.request_password_reset(user.email)
    assert reset is not None
    assert await services.password_reset_tokens.is_valid(reset.token)

    updated = await services.credential_service.reset_password(reset.token, "brand new password")
    assert updated.id == user.id

    assert not await services.password_reset_tokens.is_valid(reset.token)
    assert await services.sessions.find_by_token(login.session.token) is None
    assert not await services.refresh_tokens.is_valid(login.refresh_token.token)
    assert await services.users.authenticate(user.email, "brand new password") is not None
    assert await services.users.authenticate(user.email, plain_password) is None

    with pytest.raises(AuthenticationException):
        await services.credential_service.reset_password(reset.token, "again")


async def test_new_reset_request_invalidates_previous(services: Services, user: UserResult) -> None:
    first = await services.credential_service.request_password_reset(user.email)
    second = await services.credential_service.request_password_reset(user.email)
    assert first is not None and second is not None
    assert not await services.password_reset_tokens.is_valid(first.token)
    assert await services.password_reset_tokens.is_valid(second.token)


async def test_reset_request_for_unknown_email_returns_none(services: Services) -> None:
    assert await services.credential_service.request_password_reset("ghost@example.com") is None


async def test_reset_with_expired_token_fails(services: Services, user: UserResult) -> None:
    await services.password_reset_tokens.issue(user.id, "expired-reset", utc_now() - timedelta(seconds=1))
    with pytest.raises(AuthenticationException):
        await services.credential_service.reset_password("expired-reset", "whatever")


async def test_revoke_all_credentials(services: Services, user: UserResult, plain_password: str) -> None:
    await services.credential_service.start_session(user.email, plain_password)
    await services.credential_service.start_session(user.email, plain_password)
    await services.credential_service.request_password_reset(user.email)

    revoked = await services.credential_service.revoke_all_credentials(user.id)
    assert (revoked.sessions, revoked.refresh_tokens, revoked.password_reset_tokens) == (2, 2, 1)
    assert await services.refresh_tokens.count_active_for_user(user.id) == 0
    assert await services.password_reset_tokens.count_active_for_user(user.id) == 0


async def test_cleanup_sweeps_everything(services: Services, user: UserResult) -> None:
    past = utc_now() - timedelta(minutes=1)
    await services.sessions.issue(user.id, "s-exp", past)
    await services.refresh_tokens.issue(user.id, "r-exp", past)
    await services.refresh_tokens.issue(user.id, "r-rev", utc_now() + timedelta(days=1))
    await services.refresh_tokens.retire("r-rev")
    await services.password_reset_tokens.issue(user.id, "p-exp", past)
    await services.password_reset_tokens.issue(user.id, "p-used", utc_now() + timedelta(hours=1))
    await services.password_reset_tokens.consume("p-used")
    await services.refresh_tokens.issue(user.id, "r-live", utc_now() + timedelta(days=1))

    report = await services.credential_service.cleanup()
    assert report.expired_sessions == 1
    assert report.expired_refresh_tokens == 1
    assert report.revoked_refresh_tokens == 1
    assert report.expired_reset_tokens == 1
    assert report.used_reset_tokens == 1
    assert report.audit_logs == 0
    assert await services.refresh_tokens.is_valid("r-live")


async def test_cleanup_applies_audit_retention(db_session, settings, user: UserResult) -> None:
    retention = settings.model_copy(update={"audit_retention_days": 0})
    services = build_services(db_session, retention)
    await services.audit.record("login", "session", "s1", user.id)
    report = await services.credential_service.cleanup()
    assert report.audit_logs == 1
    assert await services.audit_logs.count() == 0


async def test_revoke_all_credentials_recorded_for_actor(
    services: Services, user: UserResult, plain_password: str
) -> None:
    await services.credential_service.start_session(user.email, plain_password)
    await services.credential_service.revoke_all_credentials(user.id, actor_id=user.id)
    [entry] = await services.audit_logs.list_by_action("credentials_revoked")
    assert entry.entity_id == user.id
    assert entry.new_value == {"sessions": 1, "refresh_tokens": 1, "password_reset_tokens": 0}


async def test_login_upgrades_outdated_hash_cost(
    db_session, settings, user: UserResult, plain_password: str
) -> None:
    stronger = build_services(db_session, settings.model_copy(update={"bcrypt_rounds": 5}))
    await stronger.credential_service.start_session(user.email, plain_password)
    stored = await stronger.users.get_password_hash(user.id)
    assert stored.split("$")[2] == "05"
    assert await stronger.users.authenticate(user.email, plain_password) is not None
