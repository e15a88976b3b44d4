"""API tests for inventory queries and reports."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest


@pytest.fixture
async def stocked(async_client, catalog) -> dict:
    """Opening stock of 15 bolts at 4 and 10 nuts at 1, then all nuts withdrawn."""
    main = catalog["main"].id
    response = await async_client.post(
        "/api/opening-balances",
        json={
            "warehouse_id": main,
            "lines": [
                {"item_id": catalog["bolt"].id, "quantity": "15", "unit_cost": "4"},
                {"item_id": catalog["nut"].id, "quantity": "10", "unit_cost": "1"},
            ],
        },
    )
    assert response.status_code == 201

    withdrawal = await async_client.post(
        "/api/withdrawals",
        json={
            "warehouse_id": main,
            "lines": [{"item_id": catalog["nut"].id, "quantity": "10"}],
        },
    )
    approved = await async_client.post(
        f"/api/withdrawals/{withdrawal.json()['id']}/approve"
    )
    assert approved.status_code == 200
    return catalog


async def test_balances_hide_empty_pairs(async_client, stocked):
    body = (await async_client.get("/api/inventory/balances")).json()
    assert body["count"] == 1
    balance = body["balances"][0]
    assert balance["item_id"] == stocked["bolt"].id
    assert Decimal(balance["quantity"]) == Decimal("15")
    assert Decimal(balance["avg_unit_cost"]) == Decimal("4")

    everything = await async_client.get(
        "/api/inventory/balances", params={"include_zero": "true"}
    )
    assert everything.json()["count"] == 2


async def test_low_stock(async_client, stocked):
    body = (await async_client.get("/api/inventory/low-stock")).json()
    assert [b["item_id"] for b in body["balances"]] == [stocked["bolt"].id]


async def test_movements_filter_by_kind(async_client, stocked):
    body = (
        await async_client.get("/api/inventory/movements", params={"kind": "WITHDRAWAL"})
    ).json()
    assert body["count"] == 1
    movement = body["movements"][0]
    assert Decimal(movement["quantity"]) == Decimal("-10")
    assert Decimal(movement["balance_quantity"]) == Decimal("0")
    assert movement["created_by"] == "tester"


async def test_reconcile_pair(async_client, stocked):
    response = await async_client.get(
        f"/api/inventory/reconcile/{stocked['nut'].id}/{stocked['main'].id}"
    )
    assert response.status_code == 200
    body = response.json()
    assert body["reconciled"] is True
    assert body["movement_count"] == 2
    assert body["issues"] == []


async def test_stats(async_client, stocked):
    body = (await async_client.get("/api/inventory/stats")).json()
    assert Decimal(body["total_value"]) == Decimal("60")
    assert body["out_of_stock_lines"] == 1
    assert body["low_stock_lines"] == 1
    assert body["warehouse_count"] == 1


async def test_monthly_summary(async_client, stocked):
    now = datetime.now(UTC)
    response = await async_client.get(
        "/api/inventory/monthly-summary",
        params={"year": now.year, "month": now.month},
    )
    assert response.status_code == 200
    summaries = {s["item_id"]: s for s in response.json()["summaries"]}
    assert summaries[stocked["nut"].id]["movement_count"] == 2
    assert Decimal(summaries[stocked["bolt"].id]["closing_value"]) == Decimal("60")


async def test_monthly_summary_rejects_bad_month(async_client, ledger_db):
    response = await async_client.get(
        "/api/inventory/monthly-summary", params={"year": 2024, "month": 13}
    )
    assert response.status_code == 422
