"""Competing writers against the same item/warehouse pair."""

import asyncio
from decimal import Decimal

from src.application.dto.requests import (
    CreateItemEntryRequest,
    CreateWithdrawalRequest,
    WithdrawalLineRequest,
)
from src.application.services import get_reconciliation_service
from src.application.use_cases import RecordItemEntryUseCase, WithdrawalWorkflowUseCase
from src.core.entities.documents import WithdrawalStatus
from src.core.exceptions import InsufficientStockError
from src.infrastructure.storage.sqlite import get_document_store, get_ledger_store


async def test_only_one_overlapping_withdrawal_succeeds(catalog):
    bolt, main = catalog["bolt"].id, catalog["main"].id
    await RecordItemEntryUseCase().execute(
        CreateItemEntryRequest(
            item_id=bolt, warehouse_id=main, quantity="100", landed_cost="10"
        ),
        "receiver",
    )

    withdrawals = WithdrawalWorkflowUseCase()
    request = CreateWithdrawalRequest(
        warehouse_id=main,
        lines=[WithdrawalLineRequest(item_id=bolt, quantity="60")],
    )
    # both pass the advisory check at creation time
    first = await withdrawals.create(request, "fitter-a")
    second = await withdrawals.create(request, "fitter-b")

    outcomes = await asyncio.gather(
        withdrawals.approve(first.withdrawal.id, "manager"),
        withdrawals.approve(second.withdrawal.id, "manager"),
        return_exceptions=True,
    )

    failures = [o for o in outcomes if isinstance(o, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientStockError)

    ledger = await get_ledger_store()
    balance = await ledger.get_balance(bolt, main)
    assert balance.quantity == Decimal("40")
    assert balance.total_value == Decimal("400")
    assert balance.version == 2

    documents = await get_document_store()
    stored = [await documents.get_withdrawal(w.withdrawal.id) for w in (first, second)]
    statuses = sorted(w.status.value for w in stored)
    assert statuses == [WithdrawalStatus.COMPLETED.value, WithdrawalStatus.PENDING.value]

    service = await get_reconciliation_service()
    assert (await service.reconcile_pair(bolt, main)).reconciled


async def test_parallel_entries_keep_sequence_dense(catalog):
    bolt, main = catalog["bolt"].id, catalog["main"].id
    use_case = RecordItemEntryUseCase()
    await asyncio.gather(
        *(
            use_case.execute(
                CreateItemEntryRequest(
                    item_id=bolt, warehouse_id=main, quantity="1", landed_cost=str(n)
                ),
                f"receiver-{n}",
            )
            for n in range(1, 6)
        )
    )

    ledger = await get_ledger_store()
    history = await ledger.get_pair_history(bolt, main)
    assert [r.sequence for r in history] == [1, 2, 3, 4, 5]

    balance = await ledger.get_balance(bolt, main)
    assert balance.quantity == Decimal("5")
    assert balance.total_value == Decimal("15")
    assert balance.version == 5
