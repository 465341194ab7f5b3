"""Health endpoint tests."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from pettycash.main import app

pytestmark = pytest.mark.asyncio


async def test_health_reports_policy_window(reset_database) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["policy_window_days"] == "30"
    assert response.headers.get("X-Request-ID")
