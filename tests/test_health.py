"""Tests for app startup and the health endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from warfront.db.database import get_session
from warfront.main import app


def test_app_title() -> None:
    assert app.title == "Warfront"


async def test_health_skips_database(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": None, "email_delivery": None}


async def test_ready_with_email_disabled(client: AsyncClient) -> None:
    """The test suite runs without a Resend key."""
    response = await client.get("/ready")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ready",
        "database": "connected",
        "email_delivery": False,
    }


async def test_ready_reports_email_enabled(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("warfront.api.health.settings.resend_api_key", "re_test")

    response = await client.get("/ready")

    assert response.json()["email_delivery"] is True


async def test_ready_503_when_database_down() -> None:
    async def broken_session():
        session = AsyncMock()
        session.execute.side_effect = OperationalError(
            "SELECT 1", {}, Exception("connection refused")
        )
        yield session

    app.dependency_overrides[get_session] = broken_session
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ready")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 503
    assert response.json()["status"] == "not ready"
    assert response.json()["database"] == "disconnected"
