"""Tests for the JSON error envelope and request ID middleware."""

import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient

from purplesim.middleware.error_handler import register_error_handlers
from purplesim.middleware.request_id import RequestIDMiddleware


def _make_app():
    app = FastAPI()
    register_error_handlers(app)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/missing")
    async def missing():
        raise HTTPException(status_code=404, detail="nothing here")

    @app.get("/rejected")
    async def rejected():
        raise ValueError("limit must not be negative")

    @app.get("/typed")
    async def typed(count: int):
        return {"count": count}

    return app


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=_make_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
class TestErrorEnvelope:
    async def test_http_exception(self, client):
        resp = await client.get("/missing", headers={"X-Request-ID": "abc"})
        assert resp.status_code == 404
        data = resp.json()
        assert data["error"] is True
        assert data["status_code"] == 404
        assert data["detail"] == "nothing here"
        assert data["request_id"] == "abc"
        assert "timestamp" in data

    async def test_value_error_is_400(self, client):
        resp = await client.get("/rejected")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "limit must not be negative"

    async def test_validation_error(self, client):
        resp = await client.get("/typed", params={"count": "many"})
        assert resp.status_code == 422
        data = resp.json()
        assert data["detail"] == "Validation error"
        assert data["errors"][0]["loc"] == ["query", "count"]

    async def test_request_id_generated(self, client):
        resp = await client.get("/typed", params={"count": 1})
        assert resp.status_code == 200
        assert len(resp.headers["X-Request-ID"]) == 36
