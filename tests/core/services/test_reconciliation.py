"""Tests for ledger reconciliation and period summaries."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.core.entities.inventory import Balance, MovementKind, MovementRecord
from src.core.exceptions import ValidationError
from src.core.services.reconciliation import (
    ReconciliationService,
    compute_stats,
    month_bounds,
    reconcile_history,
    summarize_period,
)

D = Decimal


def _record(sequence, kind, qty, cost, value, bal_qty, bal_value, item="bolt"):
    return MovementRecord(
        item_id=item,
        warehouse_id="main",
        sequence=sequence,
        kind=kind,
        quantity=D(qty),
        unit_cost=D(cost),
        total_value=D(value),
        balance_quantity=D(bal_qty),
        balance_value=D(bal_value),
    )


@pytest.fixture
def history() -> list[MovementRecord]:
    return [
        _record(1, MovementKind.ITEM_ENTRY, "100", "10", "1000", "100", "1000"),
        _record(2, MovementKind.PURCHASE_RECEIPT, "50", "16", "800", "150", "1800"),
        _record(3, MovementKind.WITHDRAWAL, "-30", "12", "-360", "120", "1440"),
    ]


@pytest.fixture
def balance() -> Balance:
    return Balance(
        item_id="bolt",
        warehouse_id="main",
        quantity=D("120"),
        total_value=D("1440"),
        avg_unit_cost=D("12"),
        version=3,
    )


class TestReconcileHistory:
    def test_consistent_history(self, history, balance):
        result = reconcile_history("bolt", "main", history, balance)
        assert result.reconciled, result.issues
        assert result.movement_count == 3
        assert result.ledger_quantity == D("120")
        assert result.ledger_value == D("1440")

    def test_quantity_mismatch(self, history, balance):
        drifted = balance.model_copy(update={"quantity": D("121")})
        result = reconcile_history("bolt", "main", history, drifted)
        assert not result.reconciled
        assert any("balance quantity" in issue for issue in result.issues)

    def test_version_mismatch(self, history, balance):
        result = reconcile_history(
            "bolt", "main", history, balance.model_copy(update={"version": 4})
        )
        assert any("version" in issue for issue in result.issues)

    def test_sequence_gap(self, history, balance):
        history[2] = history[2].model_copy(update={"sequence": 4})
        result = reconcile_history("bolt", "main", history, balance)
        assert any("sequence gap" in issue for issue in result.issues)

    def test_broken_snapshot(self, history, balance):
        history[1] = history[1].model_copy(update={"balance_quantity": D("140")})
        result = reconcile_history("bolt", "main", history, balance)
        assert any("snapshot quantity" in issue for issue in result.issues)

    def test_rows_without_balance(self, history):
        result = reconcile_history("bolt", "main", history, None)
        assert "ledger rows exist but no current balance" in result.issues

    def test_balance_without_rows(self, balance):
        result = reconcile_history("bolt", "main", [], balance)
        assert "current balance exists without ledger rows" in result.issues

    def test_value_within_tolerance(self, history, balance):
        result = reconcile_history(
            "bolt",
            "main",
            history,
            balance.model_copy(update={"total_value": D("1440.005")}),
        )
        assert not any("balance value" in issue for issue in result.issues)


class TestMonthBounds:
    def test_december_rolls_over(self):
        start, end = month_bounds(2024, 12)
        assert start == datetime(2024, 12, 1, tzinfo=UTC)
        assert end == datetime(2025, 1, 1, tzinfo=UTC)

    def test_leap_february(self):
        _, end = month_bounds(2024, 2)
        assert end == datetime(2024, 3, 1, tzinfo=UTC)

    def test_invalid_month(self):
        with pytest.raises(ValidationError):
            month_bounds(2024, 13)


def test_summarize_period(history):
    summaries = summarize_period(2024, 6, history[1:])

    assert len(summaries) == 1
    summary = summaries[0]
    assert summary.movement_count == 2
    assert summary.opening_quantity == D("100")
    assert summary.opening_value == D("1000")
    assert summary.closing_quantity == D("120")
    assert summary.closing_value == D("1440")
    assert summary.weighted_avg_cost == D("12")


def test_compute_stats(balance):
    empty = Balance(item_id="nut", warehouse_id="site")
    stats = compute_stats([balance, empty], {"bolt": D("200"), "nut": D("5")})

    assert stats.total_lines == 2
    assert stats.total_value == D("1440")
    assert stats.low_stock_lines == 2
    assert stats.out_of_stock_lines == 1
    assert stats.average_value == D("720")
    assert stats.warehouse_count == 2


class TestReconciliationService:
    async def test_reconcile_all_covers_every_pair(self, history, balance):
        store = AsyncMock()
        store.list_pairs.return_value = [("bolt", "main")]
        store.get_pair_history.return_value = history
        store.get_balance.return_value = balance
        service = ReconciliationService(store)

        results = await service.reconcile_all()

        assert len(results) == 1
        assert results[0].reconciled
        store.get_pair_history.assert_awaited_once_with("bolt", "main")

    async def test_inventory_stats_pages_through_balances(self, balance):
        store = AsyncMock()
        store.list_balances.return_value = [balance]
        store.get_reorder_levels.return_value = {}
        service = ReconciliationService(store)

        stats = await service.inventory_stats()

        assert stats.total_lines == 1
        store.list_balances.assert_awaited_once()

    async def test_monthly_summary_queries_month_window(self, history):
        store = AsyncMock()
        store.list_movements_between.return_value = history
        service = ReconciliationService(store)

        summaries = await service.monthly_summary(2024, 6)

        start, end = store.list_movements_between.await_args.args
        assert start == datetime(2024, 6, 1, tzinfo=UTC)
        assert end == datetime(2024, 7, 1, tzinfo=UTC)
        assert summaries[0].closing_quantity == D("120")
