"""
Inventory document endpoints.

Every mutating endpoint requires the X-User-Id header; the acting user is
recorded on the document and on each ledger row it posts.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_acting_user,
    get_adjustment_use_case,
    get_doc_store,
    get_item_entry_use_case,
    get_opening_balance_use_case,
    get_purchase_use_case,
    get_revaluation_use_case,
    get_transfer_use_case,
    get_withdrawal_use_case,
)
from src.application.dto.requests import (
    CreateAdjustmentRequest,
    CreateItemEntryRequest,
    CreateOpeningBalanceRequest,
    CreatePurchaseRequest,
    CreateRevaluationRequest,
    CreateTransferRequest,
    CreateWithdrawalRequest,
)
from src.application.dto.responses import (
    AdjustmentListResponse,
    AdjustmentResponse,
    DeleteResponse,
    ErrorResponse,
    ItemEntryListResponse,
    ItemEntryResponse,
    MovementBatchResponse,
    PurchaseListResponse,
    PurchaseResponse,
    TransferListResponse,
    TransferResponse,
    WithdrawalListResponse,
    WithdrawalResponse,
)
from src.application.use_cases import (
    AdjustmentResult,
    CreateAdjustmentUseCase,
    ItemEntryResult,
    PostOpeningBalanceUseCase,
    PurchaseResult,
    PurchaseWorkflowUseCase,
    RecordItemEntryUseCase,
    RevalueStockUseCase,
    TransferResult,
    TransferWorkflowUseCase,
    WithdrawalResult,
    WithdrawalWorkflowUseCase,
)
from src.core.entities.documents import PurchaseStatus, TransferStatus, WithdrawalStatus
from src.core.exceptions import DocumentNotFoundError
from src.infrastructure.storage.sqlite import SQLiteDocumentStore

router = APIRouter(prefix="/api", tags=["documents"])

_MOVEMENT_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ------------------------------------------------------------ item entries


@router.post(
    "/item-entries",
    response_model=ItemEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MOVEMENT_ERRORS,
)
async def create_item_entry(
    request: CreateItemEntryRequest,
    user_id: str = Depends(get_acting_user),
    use_case: RecordItemEntryUseCase = Depends(get_item_entry_use_case),
) -> ItemEntryResponse:
    """Receive one item into a warehouse at a landed cost."""
    result = await use_case.execute(request, user_id)
    return use_case.to_response(result)


@router.get("/item-entries", response_model=ItemEntryListResponse)
async def list_item_entries(
    item_id: str | None = None,
    warehouse_id: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> ItemEntryListResponse:
    entries = await store.list_item_entries(
        item_id=item_id, warehouse_id=warehouse_id, limit=limit, offset=offset
    )
    return ItemEntryListResponse(
        entries=[ItemEntryResponse.model_validate(e) for e in entries],
        count=len(entries),
    )


@router.get(
    "/item-entries/{entry_id}",
    response_model=ItemEntryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_item_entry(
    entry_id: str,
    use_case: RecordItemEntryUseCase = Depends(get_item_entry_use_case),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> ItemEntryResponse:
    entry = await store.get_item_entry(entry_id)
    if entry is None:
        raise DocumentNotFoundError("item_entry", entry_id)
    return use_case.to_response(ItemEntryResult(entry=entry))


# --------------------------------------------------------------- purchases


@router.post(
    "/purchases",
    response_model=PurchaseResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MOVEMENT_ERRORS,
)
async def create_purchase(
    request: CreatePurchaseRequest,
    user_id: str = Depends(get_acting_user),
    use_case: PurchaseWorkflowUseCase = Depends(get_purchase_use_case),
) -> PurchaseResponse:
    result = await use_case.create(request, user_id)
    return use_case.to_response(result)


@router.get("/purchases", response_model=PurchaseListResponse)
async def list_purchases(
    status_filter: PurchaseStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> PurchaseListResponse:
    purchases = await store.list_purchases(status=status_filter, limit=limit, offset=offset)
    return PurchaseListResponse(
        purchases=[PurchaseResponse.model_validate(p) for p in purchases],
        count=len(purchases),
    )


@router.get(
    "/purchases/{purchase_id}",
    response_model=PurchaseResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_purchase(
    purchase_id: str,
    use_case: PurchaseWorkflowUseCase = Depends(get_purchase_use_case),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> PurchaseResponse:
    purchase = await store.get_purchase(purchase_id)
    if purchase is None:
        raise DocumentNotFoundError("purchase", purchase_id)
    return use_case.to_response(PurchaseResult(purchase=purchase))


@router.post(
    "/purchases/{purchase_id}/approve",
    response_model=PurchaseResponse,
    responses=_MOVEMENT_ERRORS,
)
async def approve_purchase(
    purchase_id: str,
    user_id: str = Depends(get_acting_user),
    use_case: PurchaseWorkflowUseCase = Depends(get_purchase_use_case),
) -> PurchaseResponse:
    """Receive a pending purchase into the main warehouse."""
    result = await use_case.approve(purchase_id, user_id)
    return use_case.to_response(result)


@router.post(
    "/purchases/{purchase_id}/cancel",
    response_model=PurchaseResponse,
    responses=_MOVEMENT_ERRORS,
)
async def cancel_purchase(
    purchase_id: str,
    user_id: str = Depends(get_acting_user),
    use_case: PurchaseWorkflowUseCase = Depends(get_purchase_use_case),
) -> PurchaseResponse:
    result = await use_case.cancel(purchase_id, user_id)
    return use_case.to_response(result)


@router.delete(
    "/purchases/{purchase_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(get_acting_user)],
    responses=_MOVEMENT_ERRORS,
)
async def delete_purchase(
    purchase_id: str,
    use_case: PurchaseWorkflowUseCase = Depends(get_purchase_use_case),
) -> DeleteResponse:
    return DeleteResponse(id=purchase_id, deleted=await use_case.delete(purchase_id))


# --------------------------------------------------------------- transfers


@router.post(
    "/transfers",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MOVEMENT_ERRORS,
)
async def create_transfer(
    request: CreateTransferRequest,
    user_id: str = Depends(get_acting_user),
    use_case: TransferWorkflowUseCase = Depends(get_transfer_use_case),
) -> TransferResponse:
    result = await use_case.create(request, user_id)
    return use_case.to_response(result)


@router.get("/transfers", response_model=TransferListResponse)
async def list_transfers(
    status_filter: TransferStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> TransferListResponse:
    transfers = await store.list_transfers(status=status_filter, limit=limit, offset=offset)
    return TransferListResponse(
        transfers=[TransferResponse.model_validate(t) for t in transfers],
        count=len(transfers),
    )


@router.get(
    "/transfers/{transfer_id}",
    response_model=TransferResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_transfer(
    transfer_id: str,
    use_case: TransferWorkflowUseCase = Depends(get_transfer_use_case),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> TransferResponse:
    transfer = await store.get_transfer(transfer_id)
    if transfer is None:
        raise DocumentNotFoundError("transfer", transfer_id)
    return use_case.to_response(TransferResult(transfer=transfer))


@router.post(
    "/transfers/{transfer_id}/approve",
    response_model=TransferResponse,
    responses=_MOVEMENT_ERRORS,
)
async def approve_transfer(
    transfer_id: str,
    user_id: str = Depends(get_acting_user),
    use_case: TransferWorkflowUseCase = Depends(get_transfer_use_case),
) -> TransferResponse:
    """Move the stock: out of the source, into the destination at source cost."""
    result = await use_case.approve(transfer_id, user_id)
    return use_case.to_response(result)


@router.post(
    "/transfers/{transfer_id}/cancel",
    response_model=TransferResponse,
    responses=_MOVEMENT_ERRORS,
)
async def cancel_transfer(
    transfer_id: str,
    user_id: str = Depends(get_acting_user),
    use_case: TransferWorkflowUseCase = Depends(get_transfer_use_case),
) -> TransferResponse:
    result = await use_case.cancel(transfer_id, user_id)
    return use_case.to_response(result)


@router.delete(
    "/transfers/{transfer_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(get_acting_user)],
    responses=_MOVEMENT_ERRORS,
)
async def delete_transfer(
    transfer_id: str,
    use_case: TransferWorkflowUseCase = Depends(get_transfer_use_case),
) -> DeleteResponse:
    return DeleteResponse(id=transfer_id, deleted=await use_case.delete(transfer_id))


# ------------------------------------------------------------- withdrawals


@router.post(
    "/withdrawals",
    response_model=WithdrawalResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MOVEMENT_ERRORS,
)
async def create_withdrawal(
    request: CreateWithdrawalRequest,
    user_id: str = Depends(get_acting_user),
    use_case: WithdrawalWorkflowUseCase = Depends(get_withdrawal_use_case),
) -> WithdrawalResponse:
    result = await use_case.create(request, user_id)
    return use_case.to_response(result)


@router.get("/withdrawals", response_model=WithdrawalListResponse)
async def list_withdrawals(
    status_filter: WithdrawalStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> WithdrawalListResponse:
    withdrawals = await store.list_withdrawals(
        status=status_filter, limit=limit, offset=offset
    )
    return WithdrawalListResponse(
        withdrawals=[WithdrawalResponse.model_validate(w) for w in withdrawals],
        count=len(withdrawals),
    )


@router.get(
    "/withdrawals/{withdrawal_id}",
    response_model=WithdrawalResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_withdrawal(
    withdrawal_id: str,
    use_case: WithdrawalWorkflowUseCase = Depends(get_withdrawal_use_case),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> WithdrawalResponse:
    withdrawal = await store.get_withdrawal(withdrawal_id)
    if withdrawal is None:
        raise DocumentNotFoundError("withdrawal", withdrawal_id)
    return use_case.to_response(WithdrawalResult(withdrawal=withdrawal))


@router.post(
    "/withdrawals/{withdrawal_id}/approve",
    response_model=WithdrawalResponse,
    responses=_MOVEMENT_ERRORS,
)
async def approve_withdrawal(
    withdrawal_id: str,
    user_id: str = Depends(get_acting_user),
    use_case: WithdrawalWorkflowUseCase = Depends(get_withdrawal_use_case),
) -> WithdrawalResponse:
    """Post a pending withdrawal at the current average cost."""
    result = await use_case.approve(withdrawal_id, user_id)
    return use_case.to_response(result)


@router.post(
    "/withdrawals/{withdrawal_id}/reject",
    response_model=WithdrawalResponse,
    responses=_MOVEMENT_ERRORS,
)
async def reject_withdrawal(
    withdrawal_id: str,
    user_id: str = Depends(get_acting_user),
    use_case: WithdrawalWorkflowUseCase = Depends(get_withdrawal_use_case),
) -> WithdrawalResponse:
    result = await use_case.reject(withdrawal_id, user_id)
    return use_case.to_response(result)


@router.delete(
    "/withdrawals/{withdrawal_id}",
    response_model=DeleteResponse,
    dependencies=[Depends(get_acting_user)],
    responses=_MOVEMENT_ERRORS,
)
async def delete_withdrawal(
    withdrawal_id: str,
    use_case: WithdrawalWorkflowUseCase = Depends(get_withdrawal_use_case),
) -> DeleteResponse:
    return DeleteResponse(id=withdrawal_id, deleted=await use_case.delete(withdrawal_id))


# ------------------------------------------------------------- adjustments


@router.post(
    "/adjustments",
    response_model=AdjustmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MOVEMENT_ERRORS,
)
async def create_adjustment(
    request: CreateAdjustmentRequest,
    user_id: str = Depends(get_acting_user),
    use_case: CreateAdjustmentUseCase = Depends(get_adjustment_use_case),
) -> AdjustmentResponse:
    """Record counted quantities and re-base the affected balances."""
    result = await use_case.execute(request, user_id)
    return use_case.to_response(result)


@router.get("/adjustments", response_model=AdjustmentListResponse)
async def list_adjustments(
    warehouse_id: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> AdjustmentListResponse:
    adjustments = await store.list_adjustments(
        warehouse_id=warehouse_id, limit=limit, offset=offset
    )
    return AdjustmentListResponse(
        adjustments=[AdjustmentResponse.model_validate(a) for a in adjustments],
        count=len(adjustments),
    )


@router.get(
    "/adjustments/{adjustment_id}",
    response_model=AdjustmentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_adjustment(
    adjustment_id: str,
    use_case: CreateAdjustmentUseCase = Depends(get_adjustment_use_case),
    store: SQLiteDocumentStore = Depends(get_doc_store),
) -> AdjustmentResponse:
    adjustment = await store.get_adjustment(adjustment_id)
    if adjustment is None:
        raise DocumentNotFoundError("adjustment", adjustment_id)
    return use_case.to_response(AdjustmentResult(adjustment=adjustment))


# ----------------------------------------------- opening balances / revaluation


@router.post(
    "/opening-balances",
    response_model=MovementBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MOVEMENT_ERRORS,
)
async def post_opening_balance(
    request: CreateOpeningBalanceRequest,
    user_id: str = Depends(get_acting_user),
    use_case: PostOpeningBalanceUseCase = Depends(get_opening_balance_use_case),
) -> MovementBatchResponse:
    result = await use_case.execute(request, user_id)
    return use_case.to_response(result)


@router.post(
    "/revaluations",
    response_model=MovementBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MOVEMENT_ERRORS,
)
async def revalue_stock(
    request: CreateRevaluationRequest,
    user_id: str = Depends(get_acting_user),
    use_case: RevalueStockUseCase = Depends(get_revaluation_use_case),
) -> MovementBatchResponse:
    """Re-base balances onto new unit costs without moving quantity."""
    result = await use_case.execute(request, user_id)
    return use_case.to_response(result)
