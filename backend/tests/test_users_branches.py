"""Auth, user and branch endpoint tests."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _authenticate(client: AsyncClient, email: str, password: str) -> dict[str, str]:
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def test_login_rejects_bad_password(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": app_context["root_email"], "password": "wrong-password"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 401


async def test_current_user_profile(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = await _authenticate(client, app_context["seller_a_email"], app_context["password"])

    response = await client.get("/api/v1/users/me", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "seller"
    assert body["branch_id"] == str(app_context["branch_id"])


async def test_user_admin_requires_admin_role(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _authenticate(client, app_context["manager_email"], app_context["password"])
    root = await _authenticate(client, app_context["root_email"], app_context["password"])

    assert (await client.get("/api/v1/users", headers=manager)).status_code == 403

    created = await client.post(
        "/api/v1/users",
        json={
            "email": "new.seller@dealership.local",
            "password": "NewSeller1!",
            "first_name": "Nina",
            "last_name": "Nueva",
            "role": "seller",
            "branch_id": str(app_context["branch_id"]),
        },
        headers=root,
    )
    assert created.status_code == 201, created.text
    assert created.json()["organization_id"] == str(app_context["organization_id"])

    duplicate = await client.post(
        "/api/v1/users",
        json={
            "email": "new.seller@dealership.local",
            "password": "NewSeller1!",
            "first_name": "Nina",
            "last_name": "Again",
        },
        headers=root,
    )
    assert duplicate.status_code == 400

    listing = await client.get("/api/v1/users", headers=root)
    assert len(listing.json()) == 5

    login = await _authenticate(client, "new.seller@dealership.local", "NewSeller1!")
    assert login["Authorization"].startswith("Bearer ")


async def test_branches(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    root = await _authenticate(client, app_context["root_email"], app_context["password"])
    seller = await _authenticate(client, app_context["seller_b_email"], app_context["password"])

    created = await client.post("/api/v1/branches", json={"name": "Airport"}, headers=root)
    assert created.status_code == 201

    duplicate = await client.post("/api/v1/branches", json={"name": "Airport"}, headers=root)
    assert duplicate.status_code == 400

    denied = await client.post("/api/v1/branches", json={"name": "Mall"}, headers=seller)
    assert denied.status_code == 403

    names = [item["name"] for item in (await client.get("/api/v1/branches", headers=seller)).json()]
    assert names == ["Airport", "Downtown"]
