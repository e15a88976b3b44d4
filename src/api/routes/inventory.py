"""Inventory query and reporting endpoints."""

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_ledger, get_reconciliation
from src.application.dto.responses import (
    BalanceListResponse,
    BalanceResponse,
    ErrorResponse,
    InventoryStatsResponse,
    MonthlySummaryResponse,
    MovementListResponse,
    MovementResponse,
    PeriodSummaryResponse,
    ReconciliationResponse,
)
from src.core.entities.inventory import MovementKind
from src.core.services import ReconciliationService
from src.infrastructure.storage.sqlite import SQLiteLedgerStore

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("/balances", response_model=BalanceListResponse)
async def list_balances(
    warehouse_id: str | None = None,
    item_id: str | None = None,
    include_zero: bool = Query(default=False, description="Include empty pairs"),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: SQLiteLedgerStore = Depends(get_ledger),
) -> BalanceListResponse:
    """Current quantity, value and average cost per item and warehouse."""
    balances = await store.list_balances(
        warehouse_id=warehouse_id,
        item_id=item_id,
        include_zero=include_zero,
        limit=limit,
        offset=offset,
    )
    return BalanceListResponse(
        balances=[BalanceResponse.model_validate(b) for b in balances],
        count=len(balances),
    )


@router.get("/low-stock", response_model=BalanceListResponse)
async def list_low_stock(
    warehouse_id: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: SQLiteLedgerStore = Depends(get_ledger),
) -> BalanceListResponse:
    """Balances at or below their item's reorder level."""
    balances = await store.list_low_stock(
        warehouse_id=warehouse_id, limit=limit, offset=offset
    )
    return BalanceListResponse(
        balances=[BalanceResponse.model_validate(b) for b in balances],
        count=len(balances),
    )


@router.get("/stats", response_model=InventoryStatsResponse)
async def inventory_stats(
    warehouse_id: str | None = None,
    service: ReconciliationService = Depends(get_reconciliation),
) -> InventoryStatsResponse:
    stats = await service.inventory_stats(warehouse_id=warehouse_id)
    return InventoryStatsResponse.model_validate(stats)


@router.get("/movements", response_model=MovementListResponse)
async def list_movements(
    item_id: str | None = None,
    warehouse_id: str | None = None,
    kind: MovementKind | None = None,
    reference_id: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: SQLiteLedgerStore = Depends(get_ledger),
) -> MovementListResponse:
    """Ledger rows, newest first."""
    movements = await store.list_movements(
        item_id=item_id,
        warehouse_id=warehouse_id,
        kind=kind,
        reference_id=reference_id,
        limit=limit,
        offset=offset,
    )
    return MovementListResponse(
        movements=[MovementResponse.model_validate(m) for m in movements],
        count=len(movements),
    )


@router.get(
    "/reconcile/{item_id}/{warehouse_id}",
    response_model=ReconciliationResponse,
)
async def reconcile_pair(
    item_id: str,
    warehouse_id: str,
    service: ReconciliationService = Depends(get_reconciliation),
) -> ReconciliationResponse:
    """Replay a pair's ledger and compare it with the current balance."""
    result = await service.reconcile_pair(item_id, warehouse_id)
    return ReconciliationResponse.model_validate(result)


@router.get(
    "/monthly-summary",
    response_model=MonthlySummaryResponse,
    responses={400: {"model": ErrorResponse}},
)
async def monthly_summary(
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
    item_id: str | None = None,
    warehouse_id: str | None = None,
    service: ReconciliationService = Depends(get_reconciliation),
) -> MonthlySummaryResponse:
    """Weighted-average summary per pair for one calendar month."""
    summaries = await service.monthly_summary(
        year, month, item_id=item_id, warehouse_id=warehouse_id
    )
    return MonthlySummaryResponse(
        year=year,
        month=month,
        summaries=[PeriodSummaryResponse.model_validate(s) for s in summaries],
    )
