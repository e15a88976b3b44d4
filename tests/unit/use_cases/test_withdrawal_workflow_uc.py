"""Tests for WithdrawalWorkflowUseCase."""

from decimal import Decimal

import pytest

from src.application.dto.requests import CreateWithdrawalRequest, WithdrawalLineRequest
from src.application.use_cases import WithdrawalWorkflowUseCase
from src.core.entities.documents import Withdrawal, WithdrawalLine, WithdrawalStatus
from src.core.entities.inventory import Balance, MovementKind
from src.core.exceptions import (
    DocumentStateError,
    InsufficientStockError,
    WarehouseNotFoundError,
)

D = Decimal


@pytest.fixture
def use_case(deps) -> WithdrawalWorkflowUseCase:
    return WithdrawalWorkflowUseCase(**deps)


@pytest.fixture
def stocked(ledger_store) -> Balance:
    balance = Balance(
        item_id="item-1",
        warehouse_id="wh-main",
        quantity=D("100"),
        total_value=D("1000"),
        avg_unit_cost=D("10"),
        version=1,
    )
    ledger_store.get_balance.return_value = balance
    return balance


@pytest.fixture
def pending_withdrawal(document_store) -> Withdrawal:
    withdrawal = Withdrawal(
        id="wth-1",
        withdrawal_number="WTH-2024-001",
        warehouse_id="wh-main",
        purpose="Pump overhaul",
        requested_by="fitter",
        lines=[WithdrawalLine(item_id="item-1", quantity=D("30"), unit_cost=D("10"))],
    )
    document_store.get_withdrawal.return_value = withdrawal
    return withdrawal


def _request(*quantities: str, warehouse_id: str = "wh-main") -> CreateWithdrawalRequest:
    return CreateWithdrawalRequest(
        warehouse_id=warehouse_id,
        lines=[WithdrawalLineRequest(item_id="item-1", quantity=q) for q in quantities],
    )


class TestCreate:
    async def test_indicative_cost_from_balance(self, use_case, coordinator, stocked):
        result = await use_case.create(_request("30"), "fitter")

        line = result.withdrawal.lines[0]
        assert line.unit_cost == D("10")
        assert line.total_value == D("300")
        assert result.withdrawal.status == WithdrawalStatus.PENDING
        assert coordinator.batches == []

    async def test_lines_for_same_item_are_summed(self, use_case, stocked):
        with pytest.raises(InsufficientStockError) as exc:
            await use_case.create(_request("60", "50"), "fitter")

        assert exc.value.line == 1
        assert exc.value.details["requested"] == "110"
        assert exc.value.details["available"] == "100"

    async def test_no_balance_means_no_stock(self, use_case):
        with pytest.raises(InsufficientStockError):
            await use_case.create(_request("1"), "fitter")

    async def test_unknown_warehouse(self, use_case):
        with pytest.raises(WarehouseNotFoundError):
            await use_case.create(_request("1", warehouse_id="nowhere"), "fitter")


class TestApprove:
    async def test_lines_repriced_at_ledger_cost(
        self, use_case, coordinator, document_store, pending_withdrawal
    ):
        coordinator.outbound_cost = D("11")
        result = await use_case.approve("wth-1", "manager")

        [request] = coordinator.batches[0]
        assert request.kind == MovementKind.WITHDRAWAL
        assert request.quantity_delta == D("-30")
        assert request.unit_cost is None

        line = result.withdrawal.lines[0]
        assert line.id == pending_withdrawal.lines[0].id
        assert line.unit_cost == D("11")
        assert line.total_value == D("330")
        assert result.withdrawal.status == WithdrawalStatus.COMPLETED
        document_store.update_withdrawal.assert_awaited_once_with(
            result.withdrawal, session=coordinator.session, expected_status="PENDING"
        )

    async def test_rejected_cannot_be_approved(
        self, use_case, document_store, pending_withdrawal
    ):
        document_store.get_withdrawal.return_value = pending_withdrawal.model_copy(
            update={"status": WithdrawalStatus.REJECTED}
        )
        with pytest.raises(DocumentStateError):
            await use_case.approve("wth-1", "manager")


class TestReject:
    async def test_reject_records_approver(self, use_case, document_store, pending_withdrawal):
        result = await use_case.reject("wth-1", "manager")

        assert result.withdrawal.status == WithdrawalStatus.REJECTED
        assert result.withdrawal.approved_by == "manager"
        document_store.update_withdrawal.assert_awaited_once_with(
            result.withdrawal, expected_status="PENDING"
        )

    async def test_completed_cannot_be_deleted(
        self, use_case, document_store, pending_withdrawal
    ):
        document_store.get_withdrawal.return_value = pending_withdrawal.model_copy(
            update={"status": WithdrawalStatus.COMPLETED}
        )
        with pytest.raises(DocumentStateError):
            await use_case.delete("wth-1")
