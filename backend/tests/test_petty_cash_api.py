"""API tests for the petty cash endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/petty-cash"


async def _authenticate(client: AsyncClient, email: str, password: str) -> dict[str, str]:
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def _headers(app_context: dict[str, Any], who: str) -> dict[str, str]:
    return await _authenticate(
        app_context["client"], app_context[f"{who}_email"], app_context["password"]
    )


async def _open_deposit(client: AsyncClient, headers: dict[str, str], amount: str, **extra) -> dict:
    response = await client.post(
        f"{BASE}/deposits",
        json={"amount": amount, "description": "Float", **extra},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _draw(
    client: AsyncClient, headers: dict[str, str], deposit_id: str, user_id: Any, amount: str
) -> dict:
    response = await client.post(
        f"{BASE}/withdrawals",
        json={"deposit_id": deposit_id, "user_id": str(user_id), "amount_given": amount},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_petty_cash_lifecycle_api(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _headers(app_context, "manager")
    seller_a = await _headers(app_context, "seller_a")

    deposit = await _open_deposit(client, manager, "10000")
    assert deposit["status"] == "open"
    assert deposit["remaining_amount"] == "10000.00"

    w_a = await _draw(client, manager, deposit["id"], app_context["seller_a_id"], "4000")
    w_b = await _draw(client, manager, deposit["id"], app_context["seller_b_id"], "6000")
    assert w_a["status"] == "pending"
    assert w_a["user_name"] == "Ana Tester"

    detail = await client.get(f"{BASE}/deposits/{deposit['id']}", headers=manager)
    assert detail.status_code == 200
    assert detail.json()["status"] == "pending_funding"
    assert detail.json()["remaining_amount"] == "0.00"

    spend_a = await client.post(
        f"{BASE}/withdrawals/{w_a['id']}/spends",
        json={"amount": "4000", "motive": "fuel"},
        headers=seller_a,
    )
    assert spend_a.status_code == 201, spend_a.text
    assert spend_a.json()["status"] == "justified"
    assert spend_a.json()["spends"][0]["description"] == "fuel"

    spend_b = await client.post(
        f"{BASE}/withdrawals/{w_b['id']}/spends",
        json={"amount": "6000", "description": "Workshop tools"},
        headers=manager,
    )
    assert spend_b.status_code == 201

    closed = await client.get(f"{BASE}/deposits/{deposit['id']}", headers=manager)
    assert closed.json()["status"] == "closed"

    spend_id = spend_b.json()["spends"][0]["id"]
    removed = await client.delete(
        f"{BASE}/withdrawals/{w_b['id']}/spends/{spend_id}", headers=manager
    )
    assert removed.status_code == 200
    assert removed.json()["status"] == "pending"

    reopened = await client.get(f"{BASE}/deposits/{deposit['id']}", headers=manager)
    assert reopened.json()["status"] == "pending_funding"


async def test_ledger_errors_map_to_http_status(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _headers(app_context, "manager")

    invalid = await client.post(
        f"{BASE}/deposits", json={"amount": "0", "description": "Zero"}, headers=manager
    )
    assert invalid.status_code == 400

    for huge in ("10000000000.00", "1e30"):
        too_large = await client.post(
            f"{BASE}/deposits", json={"amount": huge, "description": "Huge"}, headers=manager
        )
        assert too_large.status_code == 400, too_large.text

    deposit = await _open_deposit(client, manager, "100")
    overdraw = await client.post(
        f"{BASE}/withdrawals",
        json={
            "deposit_id": deposit["id"],
            "user_id": str(app_context["seller_a_id"]),
            "amount_given": "100.01",
        },
        headers=manager,
    )
    assert overdraw.status_code == 400
    assert "Insufficient funds" in overdraw.json()["detail"]

    withdrawal = await _draw(client, manager, deposit["id"], app_context["seller_a_id"], "50")
    over = await client.post(
        f"{BASE}/withdrawals/{withdrawal['id']}/spends",
        json={"amount": "60", "description": "Too much"},
        headers=manager,
    )
    assert over.status_code == 400

    missing_description = await client.post(
        f"{BASE}/withdrawals/{withdrawal['id']}/spends",
        json={"amount": "5", "motive": "other"},
        headers=manager,
    )
    assert missing_description.status_code == 400

    missing = await client.get(f"{BASE}/deposits/{uuid.uuid4()}", headers=manager)
    assert missing.status_code == 404

    missing_spend = await client.delete(
        f"{BASE}/withdrawals/{withdrawal['id']}/spends/{uuid.uuid4()}", headers=manager
    )
    assert missing_spend.status_code == 404

    blocked = await client.delete(f"{BASE}/deposits/{deposit['id']}", headers=manager)
    assert blocked.status_code == 400


async def test_role_checks(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _headers(app_context, "manager")
    seller_a = await _headers(app_context, "seller_a")
    seller_b = await _headers(app_context, "seller_b")

    forbidden = await client.post(
        f"{BASE}/deposits", json={"amount": "100", "description": "Nope"}, headers=seller_a
    )
    assert forbidden.status_code == 403

    deposit = await _open_deposit(client, manager, "100")
    withdrawal = await _draw(client, manager, deposit["id"], app_context["seller_a_id"], "40")

    not_recipient = await client.post(
        f"{BASE}/withdrawals/{withdrawal['id']}/spends",
        json={"amount": "10", "description": "Coffee"},
        headers=seller_b,
    )
    assert not_recipient.status_code == 403

    sweep = await client.post(f"{BASE}/reconcile", headers=seller_a)
    assert sweep.status_code == 403

    listing = await client.get(f"{BASE}/deposits", headers=seller_b)
    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()] == [deposit["id"]]

    unauthenticated = await client.get(f"{BASE}/deposits")
    assert unauthenticated.status_code == 401


async def test_withdrawal_uses_latest_open_branch_deposit(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _headers(app_context, "manager")
    branch_id = str(app_context["branch_id"])

    deposit = await _open_deposit(client, manager, "250", branch_id=branch_id)
    response = await client.post(
        f"{BASE}/withdrawals",
        json={
            "branch_id": branch_id,
            "user_id": str(app_context["seller_a_id"]),
            "amount_given": "25",
        },
        headers=manager,
    )
    assert response.status_code == 201
    assert response.json()["deposit_id"] == deposit["id"]

    general = await client.post(
        f"{BASE}/withdrawals",
        json={"user_id": str(app_context["seller_a_id"]), "amount_given": "25"},
        headers=manager,
    )
    assert general.status_code == 404


async def test_delete_withdrawal_returns_funds(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _headers(app_context, "manager")

    deposit = await _open_deposit(client, manager, "300")
    withdrawal = await _draw(client, manager, deposit["id"], app_context["seller_a_id"], "300")

    response = await client.delete(f"{BASE}/withdrawals/{withdrawal['id']}", headers=manager)
    assert response.status_code == 200
    assert response.json()["remaining_amount"] == "300.00"
    assert response.json()["status"] == "open"
    assert response.json()["withdrawals"] == []

    deleted = await client.delete(f"{BASE}/deposits/{deposit['id']}", headers=manager)
    assert deleted.status_code == 204


async def test_reconcile_endpoint_is_idempotent(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _headers(app_context, "manager")

    deposit = await _open_deposit(client, manager, "1000")
    withdrawal = await _draw(client, manager, deposit["id"], app_context["seller_a_id"], "500")

    as_of = (datetime.now(UTC) + timedelta(days=40)).isoformat()
    first = await client.post(
        f"{BASE}/reconcile", json={"as_of": as_of, "policy_window_days": 30}, headers=manager
    )
    assert first.status_code == 200
    assert first.json()["transitioned"] == 1
    assert first.json()["withdrawal_ids"] == [withdrawal["id"]]

    second = await client.post(
        f"{BASE}/reconcile", json={"as_of": as_of, "policy_window_days": 30}, headers=manager
    )
    assert second.json()["transitioned"] == 0

    detail = await client.get(f"{BASE}/deposits/{deposit['id']}", headers=manager)
    assert detail.json()["withdrawals"][0]["status"] == "not_closed"


async def test_ticket_upload(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _headers(app_context, "manager")
    seller_a = await _headers(app_context, "seller_a")

    deposit = await _open_deposit(client, manager, "100")
    withdrawal = await _draw(client, manager, deposit["id"], app_context["seller_a_id"], "40")

    upload = await client.post(
        f"{BASE}/withdrawals/{withdrawal['id']}/tickets",
        files={"file": ("gas station.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        headers=seller_a,
    )
    assert upload.status_code == 201, upload.text
    body = upload.json()
    assert body["key"].startswith(
        f"uploads/tickets/petty-cash/{app_context['organization_id']}/{withdrawal['id']}/"
    )
    assert body["key"].endswith("-gas-station.png")
    assert body["url"] == f"/petty-cash-test/{body['key']}"

    spend = await client.post(
        f"{BASE}/withdrawals/{withdrawal['id']}/spends",
        json={"amount": "12.40", "motive": "fuel", "ticket_url": body["url"]},
        headers=seller_a,
    )
    assert spend.json()["spends"][0]["ticket_url"] == body["url"]

    rejected = await client.post(
        f"{BASE}/withdrawals/{withdrawal['id']}/tickets",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=seller_a,
    )
    assert rejected.status_code == 400


async def test_movements_and_reports(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    manager = await _headers(app_context, "manager")

    deposit = await _open_deposit(client, manager, "500", reference="BANK-9")
    withdrawal = await _draw(client, manager, deposit["id"], app_context["seller_a_id"], "200")
    await client.post(
        f"{BASE}/withdrawals/{withdrawal['id']}/spends",
        json={"amount": "75.25", "description": "Parking"},
        headers=manager,
    )

    movements = await client.get(f"{BASE}/movements", headers=manager)
    assert movements.status_code == 200
    kinds = [(item["kind"], item["amount"]) for item in movements.json()]
    assert kinds == [("credit", "75.25"), ("debit", "500.00")]

    params = {
        "date_from": (date.today() - timedelta(days=1)).isoformat(),
        "date_to": (date.today() + timedelta(days=1)).isoformat(),
    }
    report = await client.get(f"{BASE}/reports/activity", params=params, headers=manager)
    assert report.status_code == 200
    totals = report.json()["totals"]
    assert totals == {
        "deposits": "500.00",
        "withdrawals": "200.00",
        "spends": "75.25",
        "balance": "424.75",
    }

    csv_response = await client.get(
        f"{BASE}/reports/activity.csv", params=params, headers=manager
    )
    assert csv_response.status_code == 200
    assert csv_response.headers["content-type"].startswith("text/csv")
    lines = csv_response.text.strip().splitlines()
    assert lines[0].startswith("deposit_id,deposit_created_at")
    assert any("Parking" in line for line in lines)
    assert lines[-1] == "balance,424.75"

    bad_range = await client.get(
        f"{BASE}/reports/activity",
        params={"date_from": params["date_to"], "date_to": params["date_from"]},
        headers=manager,
    )
    assert bad_range.status_code == 400
