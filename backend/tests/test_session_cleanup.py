"""Tests for SessionCleanupScheduler."""
import asyncio
from unittest.mock import MagicMock

import pytest

from app.core.config import settings
from app.services.auth.cleanup import SessionCleanupScheduler
from app.services.auth.sessions import SessionRegistry


def _mock_registry(expired=None) -> MagicMock:
    registry = MagicMock(spec=SessionRegistry)
    registry.cleanup_expired_sessions.return_value = expired or []
    registry.count.return_value = 0
    return registry


def test_scheduler_interval_from_settings():
    scheduler = SessionCleanupScheduler(_mock_registry())
    assert scheduler.interval_minutes == settings.session_cleanup_interval_minutes


def test_run_once_returns_expired_user_ids():
    registry = _mock_registry(expired=[3, 4])
    scheduler = SessionCleanupScheduler(registry, interval_minutes=5)

    assert scheduler.run_once() == [3, 4]
    registry.cleanup_expired_sessions.assert_called_once()


@pytest.mark.asyncio
async def test_start_sweeps_and_stops():
    registry = _mock_registry()
    scheduler = SessionCleanupScheduler(registry, interval_minutes=1)

    task = asyncio.create_task(scheduler.start())
    await asyncio.sleep(0.05)
    scheduler.stop()
    await asyncio.wait_for(task, timeout=3)

    assert scheduler.running is False
    assert registry.cleanup_expired_sessions.call_count == 1


@pytest.mark.asyncio
async def test_start_survives_sweep_errors():
    registry = _mock_registry()
    registry.cleanup_expired_sessions.side_effect = RuntimeError("boom")
    scheduler = SessionCleanupScheduler(registry, interval_minutes=1)

    task = asyncio.create_task(scheduler.start())
    await asyncio.sleep(0.05)
    scheduler.stop()
    await asyncio.wait_for(task, timeout=3)

    assert task.exception() is None
