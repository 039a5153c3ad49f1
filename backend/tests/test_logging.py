# backend/tests/test_logging.py
import json
import logging
import sys

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.logging import JsonFormatter
from app.core.security import create_access_token
from app.main import app
from app.services.auth.sessions import InMemorySessionRegistry


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("request", logging.INFO, __file__, 1, "request %s", ("done",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_one_json_object():
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "request"
    assert payload["message"] == "request done"
    assert "timestamp" in payload


def test_includes_request_fields_only_when_present():
    payload = json.loads(JsonFormatter().format(_record(user_id=7, status_code=200, unrelated="x")))

    assert payload["user_id"] == 7
    assert payload["status_code"] == 200
    assert "unrelated" not in payload
    assert "latency_ms" not in payload


def test_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("app", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "ValueError: boom" in payload["exception"]


@pytest.mark.asyncio
async def test_replaced_session_is_logged_as_security_event(caplog):
    previous = app.state.session_registry
    app.state.session_registry = registry = InMemorySessionRegistry()
    stale = create_access_token({"userId": 5, "username": "ana", "roles": ["user"]})
    registry.set_active_session(5, stale)
    registry.set_active_session(5, create_access_token({"userId": 5, "username": "ana", "roles": ["user"]}))
    caplog.set_level(logging.INFO, logger="security")

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/users/validate-session", headers={"Authorization": f"Bearer {stale}"})
    finally:
        app.state.session_registry = previous

    assert response.status_code == 401
    events = [r for r in caplog.records if r.name == "security"]
    assert [r.getMessage() for r in events] == ["session_invalidated"]
    assert events[0].user_id == 5
    assert events[0].status_code == 401


@pytest.mark.asyncio
async def test_missing_token_is_not_a_security_event(caplog):
    caplog.set_level(logging.INFO, logger="security")

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/users/validate-session")

    assert response.status_code == 401
    assert not [r for r in caplog.records if r.name == "security"]
