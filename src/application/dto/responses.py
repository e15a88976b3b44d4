"""Response DTOs for API endpoints.

Pydantic v2 models for API responses. Decimal fields serialize as JSON
strings so no precision is lost in transit.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.core.entities.catalog import CostingMethod
from src.core.entities.documents import (
    AdjustmentType,
    PurchaseStatus,
    TransferStatus,
    WithdrawalStatus,
)
from src.core.entities.inventory import MovementKind


class _FromEntity(BaseModel):
    """Base for responses built straight from domain entities."""

    model_config = ConfigDict(from_attributes=True)


# --------------------------------------------------------------------- catalog


class ItemResponse(_FromEntity):
    id: str
    item_code: str
    description: str
    unit_of_measure: str
    standard_cost: Decimal
    costing_method: CostingMethod
    reorder_level: Decimal | None = None
    min_level: Decimal | None = None
    max_level: Decimal | None = None
    supplier_id: str | None = None
    created_at: datetime
    updated_at: datetime


class ItemListResponse(BaseModel):
    items: list[ItemResponse]
    count: int


class WarehouseResponse(_FromEntity):
    id: str
    name: str
    location: str | None = None
    description: str | None = None
    is_main: bool
    default_costing_method: CostingMethod
    created_at: datetime
    updated_at: datetime


class WarehouseListResponse(BaseModel):
    warehouses: list[WarehouseResponse]
    count: int


class SupplierResponse(_FromEntity):
    id: str
    name: str
    contact_email: str | None = None
    phone: str | None = None
    created_at: datetime


class SupplierListResponse(BaseModel):
    suppliers: list[SupplierResponse]
    count: int


# ------------------------------------------------------------------- inventory


class BalanceResponse(_FromEntity):
    """Current balance of one item in one warehouse."""

    item_id: str
    warehouse_id: str
    quantity: Decimal
    total_value: Decimal
    avg_unit_cost: Decimal
    version: int
    updated_at: datetime


class BalanceListResponse(BaseModel):
    balances: list[BalanceResponse]
    count: int


class MovementResponse(_FromEntity):
    """Ledger entry with the balance snapshot after the movement."""

    id: int | None = None
    item_id: str
    warehouse_id: str
    sequence: int
    kind: MovementKind
    quantity: Decimal
    unit_cost: Decimal
    total_value: Decimal
    reference_id: str | None = None
    notes: str | None = None
    cost_method: CostingMethod
    balance_quantity: Decimal
    balance_value: Decimal
    created_by: str | None = None
    created_at: datetime


class MovementListResponse(BaseModel):
    movements: list[MovementResponse]
    count: int


class MovementBatchResponse(BaseModel):
    """Movements posted together under one reference."""

    reference_id: str
    movements: list[MovementResponse]


class InventoryStatsResponse(_FromEntity):
    total_lines: int
    total_value: Decimal
    low_stock_lines: int
    out_of_stock_lines: int
    average_value: Decimal
    warehouse_count: int


class ReconciliationResponse(_FromEntity):
    """Ledger replay compared with the cached balance."""

    item_id: str
    warehouse_id: str
    reconciled: bool
    movement_count: int
    ledger_quantity: Decimal
    ledger_value: Decimal
    balance_quantity: Decimal | None = None
    balance_value: Decimal | None = None
    issues: list[str] = Field(default_factory=list)


class PeriodSummaryResponse(_FromEntity):
    item_id: str
    warehouse_id: str
    year: int
    month: int
    movement_count: int
    opening_quantity: Decimal
    opening_value: Decimal
    closing_quantity: Decimal
    closing_value: Decimal
    total_quantity: Decimal
    total_value: Decimal
    weighted_avg_cost: Decimal


class MonthlySummaryResponse(BaseModel):
    year: int
    month: int
    summaries: list[PeriodSummaryResponse]


# ------------------------------------------------------------------- documents


class ItemEntryResponse(_FromEntity):
    id: str
    item_id: str
    warehouse_id: str
    supplier_id: str | None = None
    quantity: Decimal
    landed_cost: Decimal
    total_value: Decimal
    purchase_reference: str | None = None
    notes: str | None = None
    created_by: str
    created_at: datetime
    movements: list[MovementResponse] = Field(default_factory=list)


class ItemEntryListResponse(BaseModel):
    entries: list[ItemEntryResponse]
    count: int


class PurchaseLineResponse(_FromEntity):
    id: str
    item_id: str
    quantity: Decimal
    unit_cost: Decimal
    total_cost: Decimal


class PurchaseResponse(_FromEntity):
    id: str
    purchase_number: str
    supplier_id: str
    status: PurchaseStatus
    total_cost: Decimal
    notes: str | None = None
    warehouse_id: str | None = None
    created_by: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    lines: list[PurchaseLineResponse]
    created_at: datetime
    updated_at: datetime
    movements: list[MovementResponse] = Field(default_factory=list)


class PurchaseListResponse(BaseModel):
    purchases: list[PurchaseResponse]
    count: int


class TransferLineResponse(_FromEntity):
    id: str
    item_id: str
    quantity: Decimal
    unit_cost: Decimal | None = None


class TransferResponse(_FromEntity):
    id: str
    transfer_number: str
    from_warehouse_id: str
    to_warehouse_id: str
    status: TransferStatus
    notes: str | None = None
    created_by: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    lines: list[TransferLineResponse]
    created_at: datetime
    updated_at: datetime
    movements: list[MovementResponse] = Field(default_factory=list)


class TransferListResponse(BaseModel):
    transfers: list[TransferResponse]
    count: int


class WithdrawalLineResponse(_FromEntity):
    id: str
    item_id: str
    quantity: Decimal
    unit_cost: Decimal
    total_value: Decimal


class WithdrawalResponse(_FromEntity):
    id: str
    withdrawal_number: str
    warehouse_id: str
    purpose: str | None = None
    status: WithdrawalStatus
    requested_by: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    lines: list[WithdrawalLineResponse]
    created_at: datetime
    updated_at: datetime
    movements: list[MovementResponse] = Field(default_factory=list)


class WithdrawalListResponse(BaseModel):
    withdrawals: list[WithdrawalResponse]
    count: int


class AdjustmentLineResponse(_FromEntity):
    id: str
    item_id: str
    system_quantity: Decimal
    actual_quantity: Decimal
    adjustment_quantity: Decimal
    unit_cost: Decimal
    total_adjustment: Decimal


class AdjustmentResponse(_FromEntity):
    id: str
    adjustment_number: str
    warehouse_id: str
    adjustment_type: AdjustmentType
    reason: str
    notes: str | None = None
    adjusted_by: str
    adjusted_at: datetime
    lines: list[AdjustmentLineResponse]
    created_at: datetime
    movements: list[MovementResponse] = Field(default_factory=list)


class AdjustmentListResponse(BaseModel):
    adjustments: list[AdjustmentResponse]
    count: int


class DeleteResponse(BaseModel):
    id: str
    deleted: bool


# ---------------------------------------------------------------------- system


class ComponentHealthResponse(BaseModel):
    """Health of one dependency."""

    name: str
    available: bool
    latency_ms: float | None = None
    schema_version: str | None = None
    connections_in_use: int | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict | None = Field(default=None, description="Structured error context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
