"""
Withdrawal workflow use case.

Creation checks availability and records the current average cost as an
indicative price. The check is advisory: approval values every line again
under the write lock and stores the cost the ledger actually used.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from src.application.dto.requests import CreateWithdrawalRequest
from src.application.dto.responses import MovementResponse, WithdrawalResponse
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.common import ZERO, utcnow
from src.core.entities.documents import (
    DocumentType,
    Withdrawal,
    WithdrawalLine,
    WithdrawalStatus,
)
from src.core.entities.inventory import MovementKind, MovementRecord, MovementRequest
from src.core.exceptions import (
    DocumentNotFoundError,
    DocumentStateError,
    InsufficientStockError,
    ItemNotFoundError,
    WarehouseNotFoundError,
)
from src.core.interfaces import ILedgerSession

logger = get_logger(__name__)


@dataclass
class WithdrawalResult:
    withdrawal: Withdrawal
    movements: list[MovementRecord] = field(default_factory=list)


class WithdrawalWorkflowUseCase(LedgerUseCase):
    """Request, approve, reject and delete withdrawals."""

    async def create(
        self, request: CreateWithdrawalRequest, user_id: str
    ) -> WithdrawalResult:
        """
        Create a pending withdrawal.

        Raises:
            WarehouseNotFoundError: Unknown warehouse
            ItemNotFoundError: A line references an unknown item
            InsufficientStockError: Requested quantity exceeds the current
                balance (lines for the same item are summed)
        """
        catalog = await self._get_catalog_store()
        if await catalog.get_warehouse(request.warehouse_id) is None:
            raise WarehouseNotFoundError(request.warehouse_id)

        ledger = await self._get_ledger_store()
        requested: dict[str, Decimal] = {}
        lines: list[WithdrawalLine] = []
        for index, line in enumerate(request.lines):
            if await catalog.get_item(line.item_id) is None:
                raise ItemNotFoundError(line.item_id).at_line(index, line.item_id)

            balance = await ledger.get_balance(line.item_id, request.warehouse_id)
            available = balance.quantity if balance else ZERO
            requested[line.item_id] = requested.get(line.item_id, ZERO) + line.quantity
            if requested[line.item_id] > available:
                raise InsufficientStockError(
                    line.item_id,
                    request.warehouse_id,
                    requested[line.item_id],
                    available,
                ).at_line(index)

            lines.append(
                WithdrawalLine(
                    item_id=line.item_id,
                    quantity=line.quantity,
                    unit_cost=balance.avg_unit_cost if balance else ZERO,
                )
            )

        numbering = await self._get_numbering()
        withdrawal = Withdrawal(
            withdrawal_number=await numbering.next_number(DocumentType.WITHDRAWAL),
            warehouse_id=request.warehouse_id,
            purpose=request.purpose,
            requested_by=user_id,
            lines=lines,
        )

        documents = await self._get_document_store()
        withdrawal = await documents.create_withdrawal(withdrawal)
        logger.info(
            "withdrawal_created",
            withdrawal_id=withdrawal.id,
            withdrawal_number=withdrawal.withdrawal_number,
            lines=len(withdrawal.lines),
        )
        return WithdrawalResult(withdrawal=withdrawal)

    async def approve(self, withdrawal_id: str, user_id: str) -> WithdrawalResult:
        """
        Post a pending withdrawal at the current average cost.

        Raises:
            DocumentNotFoundError: Unknown withdrawal
            DocumentStateError: Withdrawal is not pending
            InsufficientStockError: Stock fell below the requested quantity
        """
        withdrawal = await self._load(withdrawal_id)
        if withdrawal.status != WithdrawalStatus.PENDING:
            raise DocumentStateError(
                "withdrawal", withdrawal_id, withdrawal.status.value, "approve"
            )

        movements = [
            MovementRequest(
                item_id=line.item_id,
                warehouse_id=withdrawal.warehouse_id,
                kind=MovementKind.WITHDRAWAL,
                quantity_delta=-line.quantity,
                reference_id=withdrawal.id,
                notes=withdrawal.purpose or withdrawal.withdrawal_number,
            )
            for line in withdrawal.lines
        ]

        documents = await self._get_document_store()
        completed: Withdrawal | None = None

        async def mark_completed(
            session: ILedgerSession, records: list[MovementRecord]
        ) -> None:
            nonlocal completed
            lines = [
                WithdrawalLine(
                    id=line.id,
                    item_id=line.item_id,
                    quantity=line.quantity,
                    unit_cost=record.unit_cost,
                )
                for line, record in zip(withdrawal.lines, records, strict=True)
            ]
            completed = withdrawal.model_copy(
                update={
                    "status": WithdrawalStatus.COMPLETED,
                    "approved_by": user_id,
                    "approved_at": utcnow(),
                    "lines": lines,
                }
            )
            await documents.update_withdrawal(
                completed,
                session=session,
                expected_status=WithdrawalStatus.PENDING.value,
            )

        coordinator = await self._get_coordinator()
        records = await coordinator.apply_movements(
            movements, user_id, on_applied=mark_completed
        )
        assert completed is not None

        logger.info(
            "withdrawal_approved",
            withdrawal_id=withdrawal.id,
            warehouse_id=withdrawal.warehouse_id,
            total_value=str(sum((line.total_value for line in completed.lines), ZERO)),
            user_id=user_id,
        )
        return WithdrawalResult(withdrawal=completed, movements=records)

    async def reject(self, withdrawal_id: str, user_id: str) -> WithdrawalResult:
        withdrawal = await self._load(withdrawal_id)
        if withdrawal.status != WithdrawalStatus.PENDING:
            raise DocumentStateError(
                "withdrawal", withdrawal_id, withdrawal.status.value, "reject"
            )

        rejected = withdrawal.model_copy(
            update={
                "status": WithdrawalStatus.REJECTED,
                "approved_by": user_id,
                "approved_at": utcnow(),
            }
        )
        documents = await self._get_document_store()
        await documents.update_withdrawal(
            rejected, expected_status=WithdrawalStatus.PENDING.value
        )
        logger.info("withdrawal_rejected", withdrawal_id=withdrawal_id, user_id=user_id)
        return WithdrawalResult(withdrawal=rejected)

    async def delete(self, withdrawal_id: str) -> bool:
        """Delete a withdrawal that has not been completed."""
        withdrawal = await self._load(withdrawal_id)
        if withdrawal.status == WithdrawalStatus.COMPLETED:
            raise DocumentStateError(
                "withdrawal", withdrawal_id, withdrawal.status.value, "delete"
            )
        documents = await self._get_document_store()
        return await documents.delete_withdrawal(withdrawal_id)

    async def _load(self, withdrawal_id: str) -> Withdrawal:
        documents = await self._get_document_store()
        withdrawal = await documents.get_withdrawal(withdrawal_id)
        if withdrawal is None:
            raise DocumentNotFoundError("withdrawal", withdrawal_id)
        return withdrawal

    def to_response(self, result: WithdrawalResult) -> WithdrawalResponse:
        """Convert result to API response."""
        response = WithdrawalResponse.model_validate(result.withdrawal)
        response.movements = [MovementResponse.model_validate(m) for m in result.movements]
        return response
