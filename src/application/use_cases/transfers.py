"""
Transfer workflow use case.

Approving a transfer posts, for every line, a TRANSFER_OUT from the source
warehouse followed by a TRANSFER_IN to the destination priced at the
source's average cost. Both legs and the status change commit together.
"""

from dataclasses import dataclass, field

from src.application.dto.requests import CreateTransferRequest
from src.application.dto.responses import MovementResponse, TransferResponse
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.common import utcnow
from src.core.entities.documents import (
    DocumentType,
    Transfer,
    TransferLine,
    TransferStatus,
)
from src.core.entities.inventory import MovementKind, MovementRecord, MovementRequest
from src.core.exceptions import (
    DocumentNotFoundError,
    DocumentStateError,
    ItemNotFoundError,
    ValidationError,
    WarehouseNotFoundError,
)
from src.core.interfaces import ILedgerSession

logger = get_logger(__name__)

APPROVABLE = (TransferStatus.PENDING, TransferStatus.IN_TRANSIT)


@dataclass
class TransferResult:
    transfer: Transfer
    movements: list[MovementRecord] = field(default_factory=list)


class TransferWorkflowUseCase(LedgerUseCase):
    """Create, approve, cancel and delete inter-warehouse transfers."""

    async def create(self, request: CreateTransferRequest, user_id: str) -> TransferResult:
        """
        Create a pending transfer.

        Raises:
            ValidationError: Source and destination are the same warehouse
            WarehouseNotFoundError: Unknown source or destination
            ItemNotFoundError: A line references an unknown item
        """
        if request.from_warehouse_id == request.to_warehouse_id:
            raise ValidationError(
                "to_warehouse_id",
                "source and destination warehouses must differ",
                request.to_warehouse_id,
            )

        catalog = await self._get_catalog_store()
        for warehouse_id in (request.from_warehouse_id, request.to_warehouse_id):
            if await catalog.get_warehouse(warehouse_id) is None:
                raise WarehouseNotFoundError(warehouse_id)
        for index, line in enumerate(request.lines):
            if await catalog.get_item(line.item_id) is None:
                raise ItemNotFoundError(line.item_id).at_line(index, line.item_id)

        numbering = await self._get_numbering()
        transfer = Transfer(
            transfer_number=await numbering.next_number(DocumentType.TRANSFER),
            from_warehouse_id=request.from_warehouse_id,
            to_warehouse_id=request.to_warehouse_id,
            notes=request.notes,
            created_by=user_id,
            lines=[TransferLine(**line.model_dump()) for line in request.lines],
        )

        documents = await self._get_document_store()
        transfer = await documents.create_transfer(transfer)
        logger.info(
            "transfer_created",
            transfer_id=transfer.id,
            transfer_number=transfer.transfer_number,
            lines=len(transfer.lines),
        )
        return TransferResult(transfer=transfer)

    async def approve(self, transfer_id: str, user_id: str) -> TransferResult:
        """
        Execute a transfer.

        Raises:
            DocumentNotFoundError: Unknown transfer
            DocumentStateError: Transfer is completed or cancelled
            InsufficientStockError: Source lacks stock for a line
        """
        transfer = await self._load(transfer_id)
        if transfer.status not in APPROVABLE:
            raise DocumentStateError(
                "transfer", transfer_id, transfer.status.value, "approve"
            )

        movements: list[MovementRequest] = []
        for line in transfer.lines:
            out_index = len(movements)
            movements.append(
                MovementRequest(
                    item_id=line.item_id,
                    warehouse_id=transfer.from_warehouse_id,
                    kind=MovementKind.TRANSFER_OUT,
                    quantity_delta=-line.quantity,
                    reference_id=transfer.id,
                    notes=transfer.transfer_number,
                )
            )
            movements.append(
                MovementRequest(
                    item_id=line.item_id,
                    warehouse_id=transfer.to_warehouse_id,
                    kind=MovementKind.TRANSFER_IN,
                    quantity_delta=line.quantity,
                    reference_id=transfer.id,
                    notes=transfer.transfer_number,
                    cost_from_line=out_index,
                )
            )

        previous_status = transfer.status.value
        documents = await self._get_document_store()
        completed: Transfer | None = None

        async def mark_completed(
            session: ILedgerSession, records: list[MovementRecord]
        ) -> None:
            nonlocal completed
            # Outbound legs sit at even positions, one per line
            lines = [
                line.model_copy(update={"unit_cost": records[2 * i].unit_cost})
                for i, line in enumerate(transfer.lines)
            ]
            completed = transfer.model_copy(
                update={
                    "status": TransferStatus.COMPLETED,
                    "approved_by": user_id,
                    "approved_at": utcnow(),
                    "lines": lines,
                }
            )
            await documents.update_transfer(
                completed, session=session, expected_status=previous_status
            )

        coordinator = await self._get_coordinator()
        records = await coordinator.apply_movements(
            movements, user_id, on_applied=mark_completed
        )
        assert completed is not None

        logger.info(
            "transfer_approved",
            transfer_id=transfer.id,
            from_warehouse_id=transfer.from_warehouse_id,
            to_warehouse_id=transfer.to_warehouse_id,
            lines=len(transfer.lines),
            user_id=user_id,
        )
        return TransferResult(transfer=completed, movements=records)

    async def cancel(self, transfer_id: str, user_id: str) -> TransferResult:
        transfer = await self._load(transfer_id)
        if transfer.status not in APPROVABLE:
            raise DocumentStateError(
                "transfer", transfer_id, transfer.status.value, "cancel"
            )

        cancelled = transfer.model_copy(update={"status": TransferStatus.CANCELLED})
        documents = await self._get_document_store()
        await documents.update_transfer(
            cancelled, expected_status=transfer.status.value
        )
        logger.info("transfer_cancelled", transfer_id=transfer_id, user_id=user_id)
        return TransferResult(transfer=cancelled)

    async def delete(self, transfer_id: str) -> bool:
        """Delete a transfer that has not been completed."""
        transfer = await self._load(transfer_id)
        if transfer.status == TransferStatus.COMPLETED:
            raise DocumentStateError(
                "transfer", transfer_id, transfer.status.value, "delete"
            )
        documents = await self._get_document_store()
        return await documents.delete_transfer(transfer_id)

    async def _load(self, transfer_id: str) -> Transfer:
        documents = await self._get_document_store()
        transfer = await documents.get_transfer(transfer_id)
        if transfer is None:
            raise DocumentNotFoundError("transfer", transfer_id)
        return transfer

    def to_response(self, result: TransferResult) -> TransferResponse:
        """Convert result to API response."""
        response = TransferResponse.model_validate(result.transfer)
        response.movements = [MovementResponse.model_validate(m) for m in result.movements]
        return response
