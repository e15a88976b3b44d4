"""Record Item Entry Use Case - receipt of one item at a landed cost."""

from dataclasses import dataclass, field

from src.application.dto.requests import CreateItemEntryRequest
from src.application.dto.responses import ItemEntryResponse, MovementResponse
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.documents import ItemEntry
from src.core.entities.inventory import MovementKind, MovementRecord, MovementRequest
from src.core.exceptions import SupplierNotFoundError
from src.core.interfaces import ILedgerSession

logger = get_logger(__name__)


@dataclass
class ItemEntryResult:
    """Saved entry and the ledger row it produced."""

    entry: ItemEntry
    movements: list[MovementRecord] = field(default_factory=list)


class RecordItemEntryUseCase(LedgerUseCase):
    """Receive stock into a warehouse and store the entry document with it."""

    async def execute(
        self, request: CreateItemEntryRequest, user_id: str
    ) -> ItemEntryResult:
        if request.supplier_id:
            catalog = await self._get_catalog_store()
            if await catalog.get_supplier(request.supplier_id) is None:
                raise SupplierNotFoundError(request.supplier_id)

        entry = ItemEntry(**request.model_dump(), created_by=user_id)
        movement = MovementRequest(
            item_id=entry.item_id,
            warehouse_id=entry.warehouse_id,
            kind=MovementKind.ITEM_ENTRY,
            quantity_delta=entry.quantity,
            unit_cost=entry.landed_cost,
            reference_id=entry.id,
            notes=entry.notes,
        )

        documents = await self._get_document_store()

        async def save_entry(session: ILedgerSession, _: list[MovementRecord]) -> None:
            await documents.create_item_entry(entry, session=session)

        coordinator = await self._get_coordinator()
        records = await coordinator.apply_movements(
            [movement], user_id, on_applied=save_entry
        )

        logger.info(
            "item_entry_recorded",
            entry_id=entry.id,
            item_id=entry.item_id,
            warehouse_id=entry.warehouse_id,
            quantity=str(entry.quantity),
        )
        return ItemEntryResult(entry=entry, movements=records)

    def to_response(self, result: ItemEntryResult) -> ItemEntryResponse:
        """Convert result to API response."""
        response = ItemEntryResponse.model_validate(result.entry)
        response.movements = [MovementResponse.model_validate(m) for m in result.movements]
        return response
