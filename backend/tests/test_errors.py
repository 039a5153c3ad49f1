"""Tests for the JSON error envelope."""
import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from app.core.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    format_validation_errors,
    register_exception_handlers,
)


class Payload(BaseModel):
    count: int


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("Already there", extra={"activeTrackId": 3})

    @app.get("/unauthorized")
    async def unauthorized():
        raise UnauthorizedError("Session gone", code="SESSION_INVALIDATED")

    @app.get("/http")
    async def http():
        raise HTTPException(status_code=418, detail="teapot")

    @app.post("/validate")
    async def validate(payload: Payload):
        return payload

    return app


def test_app_error_to_dict():
    error = BadRequestError("Bad input", details="field x")
    assert error.status_code == 400
    assert error.to_dict() == {"error": "Bad input", "details": "field x"}


def test_status_codes():
    assert NotFoundError("x").status_code == 404
    assert ConflictError("x").status_code == 409
    assert UnauthorizedError("x").status_code == 401


def test_format_validation_errors_strips_prefix():
    body = format_validation_errors([
        {"loc": ("body",), "msg": "Value error, Name and event date are required"},
        {"loc": ("body", "event_time"), "msg": "Value error, bad time"},
    ])
    assert body["error"] == "Name and event date are required"
    assert "event_time: bad time" in body["details"]


@pytest.mark.asyncio
async def test_app_error_rendered_with_extra_fields():
    async with AsyncClient(transport=ASGITransport(app=_build_app()), base_url="http://test") as client:
        response = await client.get("/conflict")
    assert response.status_code == 409
    assert response.json() == {"error": "Already there", "activeTrackId": 3}


@pytest.mark.asyncio
async def test_error_code_rendered():
    async with AsyncClient(transport=ASGITransport(app=_build_app()), base_url="http://test") as client:
        response = await client.get("/unauthorized")
    assert response.status_code == 401
    assert response.json()["code"] == "SESSION_INVALIDATED"


@pytest.mark.asyncio
async def test_http_exception_uses_error_key():
    async with AsyncClient(transport=ASGITransport(app=_build_app()), base_url="http://test") as client:
        response = await client.get("/http")
    assert response.status_code == 418
    assert response.json() == {"error": "teapot"}


@pytest.mark.asyncio
async def test_request_validation_is_400():
    async with AsyncClient(transport=ASGITransport(app=_build_app()), base_url="http://test") as client:
        response = await client.post("/validate", json={"count": "many"})
    assert response.status_code == 400
    assert "error" in response.json()
    assert "count" in response.json()["details"]
