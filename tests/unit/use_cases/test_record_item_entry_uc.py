"""Tests for RecordItemEntryUseCase."""

from decimal import Decimal

import pytest

from src.application.dto.requests import CreateItemEntryRequest
from src.application.use_cases import RecordItemEntryUseCase
from src.core.entities.inventory import MovementKind
from src.core.exceptions import InsufficientStockError, SupplierNotFoundError


@pytest.fixture
def use_case(deps) -> RecordItemEntryUseCase:
    return RecordItemEntryUseCase(**deps)


def _request(**overrides) -> CreateItemEntryRequest:
    data = {
        "item_id": "item-1",
        "warehouse_id": "wh-main",
        "quantity": "50",
        "landed_cost": "16",
        "supplier_id": "sup-1",
    }
    data.update(overrides)
    return CreateItemEntryRequest(**data)


class TestRecordItemEntryUseCase:
    async def test_posts_one_entry_movement(self, use_case, coordinator):
        result = await use_case.execute(_request(), "tester")

        [request] = coordinator.batches[0]
        assert request.kind == MovementKind.ITEM_ENTRY
        assert request.quantity_delta == Decimal("50")
        assert request.unit_cost == Decimal("16")
        assert request.reference_id == result.entry.id
        assert result.entry.total_value == Decimal("800")
        assert result.entry.created_by == "tester"
        assert len(result.movements) == 1

    async def test_entry_saved_inside_ledger_transaction(
        self, use_case, coordinator, document_store
    ):
        result = await use_case.execute(_request(), "tester")

        document_store.create_item_entry.assert_awaited_once_with(
            result.entry, session=coordinator.session
        )

    async def test_unknown_supplier(self, use_case, coordinator):
        with pytest.raises(SupplierNotFoundError):
            await use_case.execute(_request(supplier_id="missing"), "tester")
        assert coordinator.batches == []

    async def test_ledger_failure_skips_document(
        self, use_case, coordinator, document_store
    ):
        coordinator.error = InsufficientStockError("item-1", "wh-main", 1, 0)

        with pytest.raises(InsufficientStockError):
            await use_case.execute(_request(), "tester")
        document_store.create_item_entry.assert_not_awaited()

    async def test_response_carries_movements(self, use_case):
        result = await use_case.execute(_request(), "tester")
        response = use_case.to_response(result)

        assert response.id == result.entry.id
        assert [m.kind for m in response.movements] == [MovementKind.ITEM_ENTRY]
