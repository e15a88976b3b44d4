"""Tests for opening balance and revaluation use cases."""

from decimal import Decimal

import pytest

from src.application.dto.requests import (
    CreateOpeningBalanceRequest,
    CreateRevaluationRequest,
    OpeningBalanceLineRequest,
    RevaluationLineRequest,
)
from src.application.use_cases import PostOpeningBalanceUseCase, RevalueStockUseCase
from src.core.entities.inventory import MovementKind


@pytest.fixture
def opening(deps) -> PostOpeningBalanceUseCase:
    return PostOpeningBalanceUseCase(**deps)


@pytest.fixture
def revalue(deps) -> RevalueStockUseCase:
    return RevalueStockUseCase(**deps)


async def test_opening_balance_lines_share_reference(opening, coordinator):
    request = CreateOpeningBalanceRequest(
        warehouse_id="wh-main",
        notes="Go-live stock",
        lines=[
            OpeningBalanceLineRequest(item_id="item-1", quantity="100", unit_cost="10"),
            OpeningBalanceLineRequest(item_id="item-2", quantity="5", unit_cost="3"),
        ],
    )
    result = await opening.execute(request, "admin")

    batch = coordinator.batches[0]
    assert [r.kind for r in batch] == [MovementKind.OPENING_BALANCE] * 2
    assert {r.reference_id for r in batch} == {result.reference_id}
    assert [m.total_value for m in result.movements] == [Decimal("1000"), Decimal("15")]

    response = opening.to_response(result)
    assert response.reference_id == result.reference_id
    assert len(response.movements) == 2


async def test_revaluation_moves_no_quantity(revalue, coordinator):
    request = CreateRevaluationRequest(
        warehouse_id="wh-main",
        lines=[RevaluationLineRequest(item_id="item-1", unit_cost="12")],
    )
    result = await revalue.execute(request, "admin")

    [movement] = coordinator.batches[0]
    assert movement.kind == MovementKind.REVALUATION
    assert movement.quantity_delta == 0
    assert movement.unit_cost == Decimal("12")
    assert result.movements[0].kind == MovementKind.REVALUATION
