"""Opening balance and revaluation use cases."""

from dataclasses import dataclass, field

from src.application.dto.requests import (
    CreateOpeningBalanceRequest,
    CreateRevaluationRequest,
)
from src.application.dto.responses import MovementBatchResponse, MovementResponse
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.common import ZERO, new_id
from src.core.entities.inventory import MovementKind, MovementRecord, MovementRequest

logger = get_logger(__name__)


@dataclass
class MovementBatchResult:
    """Movements posted under one generated reference."""

    reference_id: str
    movements: list[MovementRecord] = field(default_factory=list)


class _BatchUseCase(LedgerUseCase):
    def to_response(self, result: MovementBatchResult) -> MovementBatchResponse:
        return MovementBatchResponse(
            reference_id=result.reference_id,
            movements=[MovementResponse.model_validate(m) for m in result.movements],
        )


class PostOpeningBalanceUseCase(_BatchUseCase):
    """Load initial stock into a warehouse as OPENING_BALANCE receipts."""

    async def execute(
        self, request: CreateOpeningBalanceRequest, user_id: str
    ) -> MovementBatchResult:
        reference_id = new_id()
        movements = [
            MovementRequest(
                item_id=line.item_id,
                warehouse_id=request.warehouse_id,
                kind=MovementKind.OPENING_BALANCE,
                quantity_delta=line.quantity,
                unit_cost=line.unit_cost,
                reference_id=reference_id,
                notes=request.notes,
            )
            for line in request.lines
        ]

        coordinator = await self._get_coordinator()
        records = await coordinator.apply_movements(movements, user_id)

        logger.info(
            "opening_balance_posted",
            reference_id=reference_id,
            warehouse_id=request.warehouse_id,
            lines=len(records),
        )
        return MovementBatchResult(reference_id=reference_id, movements=records)


class RevalueStockUseCase(_BatchUseCase):
    """Re-base balances onto new average costs without moving quantity."""

    async def execute(
        self, request: CreateRevaluationRequest, user_id: str
    ) -> MovementBatchResult:
        reference_id = new_id()
        movements = [
            MovementRequest(
                item_id=line.item_id,
                warehouse_id=request.warehouse_id,
                kind=MovementKind.REVALUATION,
                quantity_delta=ZERO,
                unit_cost=line.unit_cost,
                reference_id=reference_id,
                notes=request.notes,
            )
            for line in request.lines
        ]

        coordinator = await self._get_coordinator()
        records = await coordinator.apply_movements(movements, user_id)

        logger.info(
            "stock_revalued",
            reference_id=reference_id,
            warehouse_id=request.warehouse_id,
            lines=len(records),
            value_change=str(sum((r.total_value for r in records), ZERO)),
        )
        return MovementBatchResult(reference_id=reference_id, movements=records)
