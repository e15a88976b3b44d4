"""
Purchase workflow use case.

Purchases are created PENDING and numbered PO-YEAR-NNN. Approval receives
every line into the main warehouse as PURCHASE_RECEIPT movements and marks
the purchase RECEIVED in the same transaction.
"""

from dataclasses import dataclass, field

from src.application.dto.requests import CreatePurchaseRequest
from src.application.dto.responses import MovementResponse, PurchaseResponse
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.common import utcnow
from src.core.entities.documents import (
    DocumentType,
    Purchase,
    PurchaseLine,
    PurchaseStatus,
)
from src.core.entities.inventory import MovementKind, MovementRecord, MovementRequest
from src.core.exceptions import (
    DocumentNotFoundError,
    DocumentStateError,
    ItemNotFoundError,
    SupplierNotFoundError,
    ValidationError,
)
from src.core.interfaces import ILedgerSession

logger = get_logger(__name__)


@dataclass
class PurchaseResult:
    purchase: Purchase
    movements: list[MovementRecord] = field(default_factory=list)


class PurchaseWorkflowUseCase(LedgerUseCase):
    """Create, approve, cancel and delete purchases."""

    async def create(self, request: CreatePurchaseRequest, user_id: str) -> PurchaseResult:
        """
        Create a pending purchase.

        Raises:
            SupplierNotFoundError: Unknown supplier
            ItemNotFoundError: A line references an unknown item
        """
        catalog = await self._get_catalog_store()
        if await catalog.get_supplier(request.supplier_id) is None:
            raise SupplierNotFoundError(request.supplier_id)
        for index, line in enumerate(request.lines):
            if await catalog.get_item(line.item_id) is None:
                raise ItemNotFoundError(line.item_id).at_line(index, line.item_id)

        numbering = await self._get_numbering()
        purchase = Purchase(
            purchase_number=await numbering.next_number(DocumentType.PURCHASE),
            supplier_id=request.supplier_id,
            notes=request.notes,
            created_by=user_id,
            lines=[PurchaseLine(**line.model_dump()) for line in request.lines],
        )

        documents = await self._get_document_store()
        purchase = await documents.create_purchase(purchase)
        logger.info(
            "purchase_created",
            purchase_id=purchase.id,
            purchase_number=purchase.purchase_number,
            total_cost=str(purchase.total_cost),
        )
        return PurchaseResult(purchase=purchase)

    async def approve(self, purchase_id: str, user_id: str) -> PurchaseResult:
        """
        Receive a pending purchase into the main warehouse.

        Raises:
            DocumentNotFoundError: Unknown purchase
            DocumentStateError: Purchase is not pending
            ValidationError: No main warehouse is configured
        """
        purchase = await self._load(purchase_id)
        if purchase.status != PurchaseStatus.PENDING:
            raise DocumentStateError(
                "purchase", purchase_id, purchase.status.value, "approve"
            )

        catalog = await self._get_catalog_store()
        main = await catalog.get_main_warehouse()
        if main is None:
            raise ValidationError(
                "warehouse_id", "no main warehouse configured to receive purchases"
            )

        movements = [
            MovementRequest(
                item_id=line.item_id,
                warehouse_id=main.id,
                kind=MovementKind.PURCHASE_RECEIPT,
                quantity_delta=line.quantity,
                unit_cost=line.unit_cost,
                reference_id=purchase.id,
                notes=purchase.purchase_number,
            )
            for line in purchase.lines
        ]

        received = purchase.model_copy(
            update={
                "status": PurchaseStatus.RECEIVED,
                "warehouse_id": main.id,
                "approved_by": user_id,
                "approved_at": utcnow(),
            }
        )
        documents = await self._get_document_store()

        async def mark_received(session: ILedgerSession, _: list[MovementRecord]) -> None:
            await documents.update_purchase(
                received, session=session, expected_status=PurchaseStatus.PENDING.value
            )

        coordinator = await self._get_coordinator()
        records = await coordinator.apply_movements(
            movements, user_id, on_applied=mark_received
        )

        logger.info(
            "purchase_approved",
            purchase_id=purchase.id,
            warehouse_id=main.id,
            lines=len(records),
            user_id=user_id,
        )
        return PurchaseResult(purchase=received, movements=records)

    async def cancel(self, purchase_id: str, user_id: str) -> PurchaseResult:
        purchase = await self._load(purchase_id)
        if purchase.status != PurchaseStatus.PENDING:
            raise DocumentStateError(
                "purchase", purchase_id, purchase.status.value, "cancel"
            )

        cancelled = purchase.model_copy(update={"status": PurchaseStatus.CANCELLED})
        documents = await self._get_document_store()
        await documents.update_purchase(
            cancelled, expected_status=PurchaseStatus.PENDING.value
        )
        logger.info("purchase_cancelled", purchase_id=purchase_id, user_id=user_id)
        return PurchaseResult(purchase=cancelled)

    async def delete(self, purchase_id: str) -> bool:
        """Delete a purchase that has not been received."""
        purchase = await self._load(purchase_id)
        if purchase.status == PurchaseStatus.RECEIVED:
            raise DocumentStateError(
                "purchase", purchase_id, purchase.status.value, "delete"
            )
        documents = await self._get_document_store()
        return await documents.delete_purchase(purchase_id)

    async def _load(self, purchase_id: str) -> Purchase:
        documents = await self._get_document_store()
        purchase = await documents.get_purchase(purchase_id)
        if purchase is None:
            raise DocumentNotFoundError("purchase", purchase_id)
        return purchase

    def to_response(self, result: PurchaseResult) -> PurchaseResponse:
        """Convert result to API response."""
        response = PurchaseResponse.model_validate(result.purchase)
        response.movements = [MovementResponse.model_validate(m) for m in result.movements]
        return response
