"""Tests for the weighted-average valuation engine."""

from decimal import Decimal

import pytest

from src.core.entities.inventory import Balance, MovementKind, MovementRequest
from src.core.exceptions import InsufficientStockError, InvalidMovementRequestError
from src.core.services.valuation import (
    apply_movement,
    check_balance_invariant,
    replay_movements,
)

D = Decimal


def _balance(quantity: str, value: str, avg: str, version: int = 1) -> Balance:
    return Balance(
        item_id="bolt",
        warehouse_id="main",
        quantity=D(quantity),
        total_value=D(value),
        avg_unit_cost=D(avg),
        version=version,
    )


def _request(kind: MovementKind, delta: str, **kwargs) -> MovementRequest:
    return MovementRequest(
        item_id="bolt",
        warehouse_id="main",
        kind=kind,
        quantity_delta=D(delta),
        **kwargs,
    )


class TestInbound:
    def test_first_receipt_creates_balance(self):
        result = apply_movement(
            None, _request(MovementKind.ITEM_ENTRY, "100", unit_cost=D("10"))
        )
        assert result.balance.quantity == D("100")
        assert result.balance.total_value == D("1000")
        assert result.balance.avg_unit_cost == D("10")
        assert result.balance.version == 1
        assert result.record.sequence == 1

    def test_weighted_average(self):
        result = apply_movement(
            _balance("100", "1000", "10"),
            _request(MovementKind.PURCHASE_RECEIPT, "50", unit_cost=D("16")),
        )
        assert result.balance.quantity == D("150")
        assert result.balance.total_value == D("1800")
        assert result.balance.avg_unit_cost == D("12")
        assert result.record.total_value == D("800")
        assert result.record.balance_value == D("1800")

    def test_zero_cost_receipt_lowers_average(self):
        result = apply_movement(
            _balance("10", "100", "10"),
            _request(MovementKind.OPENING_BALANCE, "10", unit_cost=D("0")),
        )
        assert result.balance.avg_unit_cost == D("5")

    def test_missing_cost_rejected(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(None, _request(MovementKind.ITEM_ENTRY, "10"))

    def test_negative_quantity_rejected(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(
                None, _request(MovementKind.ITEM_ENTRY, "-10", unit_cost=D("1"))
            )

    def test_negative_cost_rejected(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(
                None, _request(MovementKind.ITEM_ENTRY, "10", unit_cost=D("-1"))
            )


class TestOutbound:
    def test_withdrawal_at_average(self):
        result = apply_movement(
            _balance("100", "1000", "10"), _request(MovementKind.WITHDRAWAL, "-30")
        )
        assert result.balance.quantity == D("70")
        assert result.balance.total_value == D("700")
        assert result.balance.avg_unit_cost == D("10")
        assert result.record.unit_cost == D("10")
        assert result.record.total_value == D("-300")

    def test_withdrawing_everything_zeroes_value_and_keeps_average(self):
        result = apply_movement(
            _balance("3", "10", "3.333333"), _request(MovementKind.TRANSFER_OUT, "-3")
        )
        assert result.balance.quantity == D("0")
        assert result.balance.total_value == D("0")
        assert result.balance.avg_unit_cost == D("3.333333")

    def test_value_never_exceeds_previous(self):
        # 3 @ 3.333333 is worth 10; 2 left at the rounded average would be 6.666666
        result = apply_movement(
            _balance("3", "10", "3.333333"), _request(MovementKind.WITHDRAWAL, "-1")
        )
        assert result.balance.total_value <= D("10")
        assert result.balance.total_value >= D("0")

    def test_insufficient_stock(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            apply_movement(
                _balance("40", "400", "10"), _request(MovementKind.WITHDRAWAL, "-60")
            )
        assert exc_info.value.details["available"] == "40"

    def test_withdrawal_from_empty_pair(self):
        with pytest.raises(InsufficientStockError):
            apply_movement(None, _request(MovementKind.WITHDRAWAL, "-1"))

    def test_supplied_cost_rejected(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(
                _balance("10", "100", "10"),
                _request(MovementKind.WITHDRAWAL, "-1", unit_cost=D("10")),
            )

    def test_positive_quantity_rejected(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(
                _balance("10", "100", "10"), _request(MovementKind.WITHDRAWAL, "5")
            )


class TestAdjustment:
    def test_count_rebases_onto_line_cost(self):
        result = apply_movement(
            _balance("70", "700", "10"),
            _request(
                MovementKind.ADJUSTMENT,
                "-5",
                unit_cost=D("11"),
                system_quantity=D("70"),
                actual_quantity=D("65"),
            ),
        )
        assert result.balance.quantity == D("65")
        assert result.balance.total_value == D("715")
        assert result.balance.avg_unit_cost == D("11")
        assert result.record.total_value == D("15")

    def test_stale_system_quantity_rejected(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(
                _balance("70", "700", "10"),
                _request(
                    MovementKind.ADJUSTMENT,
                    "-5",
                    unit_cost=D("10"),
                    system_quantity=D("80"),
                    actual_quantity=D("75"),
                ),
            )

    def test_stale_count_allowed_when_not_strict(self):
        result = apply_movement(
            _balance("70", "700", "10"),
            _request(
                MovementKind.ADJUSTMENT,
                "-5",
                unit_cost=D("10"),
                system_quantity=D("80"),
                actual_quantity=D("75"),
            ),
            strict_counts=False,
        )
        assert result.balance.quantity == D("65")

    def test_delta_must_match_counts(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(
                _balance("70", "700", "10"),
                _request(
                    MovementKind.ADJUSTMENT,
                    "-3",
                    unit_cost=D("10"),
                    system_quantity=D("70"),
                    actual_quantity=D("65"),
                ),
            )

    def test_counts_required(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(
                _balance("70", "700", "10"),
                _request(MovementKind.ADJUSTMENT, "-5", unit_cost=D("10")),
            )


class TestRevaluation:
    def test_revaluation_keeps_quantity(self):
        result = apply_movement(
            _balance("65", "715", "11"),
            _request(MovementKind.REVALUATION, "0", unit_cost=D("12")),
        )
        assert result.balance.quantity == D("65")
        assert result.balance.total_value == D("780")
        assert result.record.quantity == D("0")
        assert result.record.total_value == D("65")

    def test_revaluation_with_quantity_rejected(self):
        with pytest.raises(InvalidMovementRequestError):
            apply_movement(
                _balance("65", "715", "11"),
                _request(MovementKind.REVALUATION, "1", unit_cost=D("12")),
            )


def test_zero_delta_rejected_for_movements():
    with pytest.raises(InvalidMovementRequestError):
        apply_movement(None, _request(MovementKind.ITEM_ENTRY, "0", unit_cost=D("1")))


@pytest.mark.parametrize(
    ("kind", "delta", "extra"),
    [
        (MovementKind.ITEM_ENTRY, "0.00004", {"unit_cost": D("10")}),
        (MovementKind.WITHDRAWAL, "-0.00004", {}),
    ],
)
def test_delta_rounding_to_zero_rejected(kind, delta, extra):
    with pytest.raises(InvalidMovementRequestError):
        apply_movement(_balance("1", "10", "10"), _request(kind, delta, **extra))


def test_sub_precision_delta_rounds_to_ledger_precision():
    result = apply_movement(
        None, _request(MovementKind.ITEM_ENTRY, "0.00006", unit_cost=D("10"))
    )
    assert result.record.quantity == D("0.0001")
    assert result.balance.quantity == D("0.0001")


def test_balance_for_other_pair_rejected():
    other = Balance(item_id="nut", warehouse_id="main")
    with pytest.raises(InvalidMovementRequestError):
        apply_movement(other, _request(MovementKind.ITEM_ENTRY, "1", unit_cost=D("1")))


def test_versions_increase_by_one():
    balance = None
    for _ in range(3):
        result = apply_movement(
            balance, _request(MovementKind.ITEM_ENTRY, "1", unit_cost=D("2"))
        )
        balance = result.balance
        assert result.record.sequence == balance.version
    assert balance.version == 3


class TestReplay:
    def test_replay_matches_engine(self):
        balance = None
        records = []
        requests = [
            _request(MovementKind.ITEM_ENTRY, "100", unit_cost=D("10")),
            _request(MovementKind.PURCHASE_RECEIPT, "50", unit_cost=D("16")),
            _request(MovementKind.WITHDRAWAL, "-30"),
            _request(
                MovementKind.ADJUSTMENT,
                "-5",
                unit_cost=D("13"),
                system_quantity=D("120"),
                actual_quantity=D("115"),
            ),
            _request(MovementKind.REVALUATION, "0", unit_cost=D("14")),
        ]
        for request in requests:
            result = apply_movement(balance, request)
            balance = result.balance
            records.append(result.record)

        replayed = replay_movements(records)
        assert replayed.quantity == balance.quantity
        assert replayed.total_value == balance.total_value
        assert replayed.avg_unit_cost == balance.avg_unit_cost
        assert replayed.version == balance.version

    def test_empty_history(self):
        assert replay_movements([]) is None


class TestBalanceInvariant:
    def test_consistent_balance(self):
        assert check_balance_invariant(_balance("150", "1800", "12")) == []

    def test_zero_quantity_with_value(self):
        issues = check_balance_invariant(_balance("0", "5", "10"))
        assert any("zero quantity" in issue for issue in issues)

    def test_drifted_value(self):
        issues = check_balance_invariant(_balance("10", "150", "10"))
        assert issues
