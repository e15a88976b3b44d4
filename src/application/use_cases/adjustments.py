"""Inventory adjustment use case - counted corrections posted immediately."""

from dataclasses import dataclass, field

from src.application.dto.requests import CreateAdjustmentRequest
from src.application.dto.responses import AdjustmentResponse, MovementResponse
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.common import ZERO
from src.core.entities.documents import (
    Adjustment,
    AdjustmentLine,
    AdjustmentType,
    DocumentType,
)
from src.core.entities.inventory import MovementKind, MovementRecord, MovementRequest
from src.core.exceptions import ValidationError, WarehouseNotFoundError
from src.core.interfaces import ILedgerSession

logger = get_logger(__name__)


@dataclass
class AdjustmentResult:
    adjustment: Adjustment
    movements: list[MovementRecord] = field(default_factory=list)


class CreateAdjustmentUseCase(LedgerUseCase):
    """
    Record an adjustment and post its movements.

    Each line re-bases the pair onto the counted quantity at the line's unit
    cost. Lines whose count matches the system quantity move nothing, except
    in REVALUATION adjustments, where every line posts a revaluation.
    """

    async def execute(
        self, request: CreateAdjustmentRequest, user_id: str
    ) -> AdjustmentResult:
        revaluation = request.adjustment_type == AdjustmentType.REVALUATION
        if revaluation:
            for index, line in enumerate(request.lines):
                if line.actual_quantity != line.system_quantity:
                    raise ValidationError(
                        "actual_quantity",
                        f"line {index}: revaluations cannot change quantity",
                        line.actual_quantity,
                    )

        catalog = await self._get_catalog_store()
        if await catalog.get_warehouse(request.warehouse_id) is None:
            raise WarehouseNotFoundError(request.warehouse_id)

        numbering = await self._get_numbering()
        adjustment = Adjustment(
            adjustment_number=await numbering.next_number(DocumentType.ADJUSTMENT),
            warehouse_id=request.warehouse_id,
            adjustment_type=request.adjustment_type,
            reason=request.reason,
            notes=request.notes,
            adjusted_by=user_id,
            lines=[AdjustmentLine(**line.model_dump()) for line in request.lines],
        )

        movements = [
            self._to_movement(adjustment, line, revaluation)
            for line in adjustment.lines
            if revaluation or line.adjustment_quantity != ZERO
        ]

        documents = await self._get_document_store()
        if not movements:
            adjustment = await documents.create_adjustment(adjustment)
            logger.info(
                "adjustment_recorded",
                adjustment_id=adjustment.id,
                adjustment_number=adjustment.adjustment_number,
                movements=0,
            )
            return AdjustmentResult(adjustment=adjustment)

        async def save_adjustment(session: ILedgerSession, _: list[MovementRecord]) -> None:
            await documents.create_adjustment(adjustment, session=session)

        coordinator = await self._get_coordinator()
        records = await coordinator.apply_movements(
            movements, user_id, on_applied=save_adjustment
        )

        logger.info(
            "adjustment_recorded",
            adjustment_id=adjustment.id,
            adjustment_number=adjustment.adjustment_number,
            adjustment_type=adjustment.adjustment_type.value,
            movements=len(records),
        )
        return AdjustmentResult(adjustment=adjustment, movements=records)

    @staticmethod
    def _to_movement(
        adjustment: Adjustment, line: AdjustmentLine, revaluation: bool
    ) -> MovementRequest:
        if revaluation:
            return MovementRequest(
                item_id=line.item_id,
                warehouse_id=adjustment.warehouse_id,
                kind=MovementKind.REVALUATION,
                quantity_delta=ZERO,
                unit_cost=line.unit_cost,
                reference_id=adjustment.id,
                notes=adjustment.reason,
            )
        return MovementRequest(
            item_id=line.item_id,
            warehouse_id=adjustment.warehouse_id,
            kind=MovementKind.ADJUSTMENT,
            quantity_delta=line.adjustment_quantity,
            unit_cost=line.unit_cost,
            reference_id=adjustment.id,
            notes=adjustment.reason,
            system_quantity=line.system_quantity,
            actual_quantity=line.actual_quantity,
        )

    def to_response(self, result: AdjustmentResult) -> AdjustmentResponse:
        """Convert result to API response."""
        response = AdjustmentResponse.model_validate(result.adjustment)
        response.movements = [MovementResponse.model_validate(m) for m in result.movements]
        return response
