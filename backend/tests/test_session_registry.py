"""Tests for SessionRegistry interface and InMemorySessionRegistry."""
from datetime import datetime, timedelta, timezone

import pytest

from app.services.auth.sessions import ActiveSession, InMemorySessionRegistry, SessionRegistry


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return InMemorySessionRegistry(idle_timeout=timedelta(hours=24), clock=clock)


def test_session_registry_is_abstract():
    with pytest.raises(TypeError):
        SessionRegistry()


def test_set_active_session_makes_token_valid(registry):
    registry.set_active_session(1, "token-a")
    assert registry.is_token_valid(1, "token-a") is True


def test_unknown_user_has_no_valid_token(registry):
    assert registry.is_token_valid(42, "token-a") is False


def test_second_login_invalidates_first_token(registry):
    """Only the most recent token of a user is accepted."""
    registry.set_active_session(1, "token-a")
    registry.set_active_session(1, "token-b")

    assert registry.is_token_valid(1, "token-a") is False
    assert registry.is_token_valid(1, "token-b") is True
    assert registry.count() == 1


def test_sessions_are_per_user(registry):
    registry.set_active_session(1, "token-a")
    registry.set_active_session(2, "token-b")

    assert registry.is_token_valid(1, "token-a") is True
    assert registry.is_token_valid(2, "token-b") is True
    assert registry.is_token_valid(2, "token-a") is False


def test_login_resets_login_time(registry, clock):
    registry.set_active_session(1, "token-a")
    clock.advance(hours=2)
    registry.set_active_session(1, "token-b")

    session = registry.get_active_session(1)
    assert session.login_time == clock.now
    assert session.last_activity == clock.now


def test_successful_check_bumps_last_activity(registry, clock):
    registry.set_active_session(1, "token-a")
    clock.advance(minutes=30)

    registry.is_token_valid(1, "token-a")

    session = registry.get_active_session(1)
    assert session.last_activity == clock.now
    assert session.login_time == clock.now - timedelta(minutes=30)


def test_failed_check_does_not_bump_last_activity(registry, clock):
    registry.set_active_session(1, "token-a")
    login = clock.now
    clock.advance(minutes=30)

    registry.is_token_valid(1, "stale-token")

    assert registry.get_active_session(1).last_activity == login


def test_get_active_session_returns_copy(registry):
    registry.set_active_session(1, "token-a")
    session = registry.get_active_session(1)
    session.token = "tampered"

    assert registry.is_token_valid(1, "token-a") is True


def test_remove_active_session(registry):
    registry.set_active_session(1, "token-a")
    registry.remove_active_session(1)

    assert registry.get_active_session(1) is None
    assert registry.is_token_valid(1, "token-a") is False


def test_remove_missing_session_is_noop(registry):
    registry.remove_active_session(99)
    assert registry.count() == 0


def test_cleanup_evicts_only_idle_sessions(registry, clock):
    registry.set_active_session(1, "token-a")
    clock.advance(hours=20)
    registry.set_active_session(2, "token-b")
    clock.advance(hours=5)

    expired = registry.cleanup_expired_sessions()

    assert expired == [1]
    assert registry.get_active_session(1) is None
    assert registry.is_token_valid(2, "token-b") is True


def test_activity_keeps_session_alive(registry, clock):
    registry.set_active_session(1, "token-a")
    clock.advance(hours=23)
    registry.is_token_valid(1, "token-a")
    clock.advance(hours=23)

    assert registry.cleanup_expired_sessions() == []
    assert registry.count() == 1


def test_active_sessions_snapshot(registry):
    registry.set_active_session(1, "token-a")
    registry.set_active_session(2, "token-b")

    sessions = registry.active_sessions()

    assert {s.user_id for s in sessions} == {1, 2}
    assert all(isinstance(s, ActiveSession) for s in sessions)
