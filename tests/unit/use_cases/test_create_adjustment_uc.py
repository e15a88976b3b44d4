"""Tests for CreateAdjustmentUseCase."""

from decimal import Decimal

import pytest

from src.application.dto.requests import AdjustmentLineRequest, CreateAdjustmentRequest
from src.application.use_cases import CreateAdjustmentUseCase
from src.core.entities.documents import AdjustmentType, DocumentType
from src.core.entities.inventory import MovementKind
from src.core.exceptions import ValidationError, WarehouseNotFoundError

D = Decimal


@pytest.fixture
def use_case(deps) -> CreateAdjustmentUseCase:
    return CreateAdjustmentUseCase(**deps)


def _request(adjustment_type=AdjustmentType.PHYSICAL_COUNT, *lines, warehouse_id="wh-main"):
    return CreateAdjustmentRequest(
        warehouse_id=warehouse_id,
        adjustment_type=adjustment_type,
        reason="Quarterly count",
        lines=[
            AdjustmentLineRequest(
                item_id="item-1",
                system_quantity=system,
                actual_quantity=actual,
                unit_cost=cost,
            )
            for system, actual, cost in lines
        ],
    )


class TestCreateAdjustmentUseCase:
    async def test_count_difference_posts_adjustment(
        self, use_case, coordinator, document_store, numbering
    ):
        result = await use_case.execute(
            _request(AdjustmentType.PHYSICAL_COUNT, ("70", "65", "11")), "counter"
        )

        numbering.next_number.assert_awaited_once_with(DocumentType.ADJUSTMENT)
        [request] = coordinator.batches[0]
        assert request.kind == MovementKind.ADJUSTMENT
        assert request.quantity_delta == D("-5")
        assert request.unit_cost == D("11")
        assert request.system_quantity == D("70")
        assert request.actual_quantity == D("65")
        assert request.reference_id == result.adjustment.id

        assert result.adjustment.adjusted_by == "counter"
        document_store.create_adjustment.assert_awaited_once_with(
            result.adjustment, session=coordinator.session
        )

    async def test_matching_lines_post_nothing(self, use_case, coordinator, document_store):
        result = await use_case.execute(
            _request(AdjustmentType.PHYSICAL_COUNT, ("10", "10", "5")), "counter"
        )

        assert coordinator.batches == []
        assert result.movements == []
        document_store.create_adjustment.assert_awaited_once_with(result.adjustment)

    async def test_only_differing_lines_move(self, use_case, coordinator):
        await use_case.execute(
            _request(
                AdjustmentType.DAMAGE,
                ("10", "10", "5"),
                ("8", "6", "5"),
            ),
            "counter",
        )
        assert [r.quantity_delta for r in coordinator.batches[0]] == [D("-2")]

    async def test_revaluation_posts_every_line(self, use_case, coordinator):
        await use_case.execute(
            _request(AdjustmentType.REVALUATION, ("10", "10", "7"), ("4", "4", "3")),
            "counter",
        )

        batch = coordinator.batches[0]
        assert [r.kind for r in batch] == [MovementKind.REVALUATION] * 2
        assert [r.quantity_delta for r in batch] == [D("0"), D("0")]
        assert [r.unit_cost for r in batch] == [D("7"), D("3")]

    async def test_revaluation_cannot_change_quantity(self, use_case, numbering):
        with pytest.raises(ValidationError):
            await use_case.execute(
                _request(AdjustmentType.REVALUATION, ("10", "9", "7")), "counter"
            )
        numbering.next_number.assert_not_awaited()

    async def test_unknown_warehouse(self, use_case):
        with pytest.raises(WarehouseNotFoundError):
            await use_case.execute(
                _request(AdjustmentType.SHRINKAGE, ("5", "3", "1"), warehouse_id="nowhere"),
                "counter",
            )
