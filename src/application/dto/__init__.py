"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    AdjustmentLineRequest,
    CreateAdjustmentRequest,
    CreateItemEntryRequest,
    CreateItemRequest,
    CreateOpeningBalanceRequest,
    CreatePurchaseRequest,
    CreateRevaluationRequest,
    CreateSupplierRequest,
    CreateTransferRequest,
    CreateWarehouseRequest,
    CreateWithdrawalRequest,
    OpeningBalanceLineRequest,
    PurchaseLineRequest,
    RevaluationLineRequest,
    TransferLineRequest,
    UpdateItemRequest,
    UpdateWarehouseRequest,
    WithdrawalLineRequest,
)
from src.application.dto.responses import (
    AdjustmentListResponse,
    AdjustmentResponse,
    BalanceListResponse,
    BalanceResponse,
    ComponentHealthResponse,
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    InventoryStatsResponse,
    ItemEntryListResponse,
    ItemEntryResponse,
    ItemListResponse,
    ItemResponse,
    MonthlySummaryResponse,
    MovementBatchResponse,
    MovementListResponse,
    MovementResponse,
    PeriodSummaryResponse,
    PurchaseListResponse,
    PurchaseResponse,
    ReconciliationResponse,
    SupplierListResponse,
    SupplierResponse,
    TransferListResponse,
    TransferResponse,
    WarehouseListResponse,
    WarehouseResponse,
    WithdrawalListResponse,
    WithdrawalResponse,
)

__all__ = [
    # Requests
    "CreateItemRequest",
    "UpdateItemRequest",
    "CreateWarehouseRequest",
    "UpdateWarehouseRequest",
    "CreateSupplierRequest",
    "CreateItemEntryRequest",
    "PurchaseLineRequest",
    "CreatePurchaseRequest",
    "TransferLineRequest",
    "CreateTransferRequest",
    "WithdrawalLineRequest",
    "CreateWithdrawalRequest",
    "AdjustmentLineRequest",
    "CreateAdjustmentRequest",
    "OpeningBalanceLineRequest",
    "CreateOpeningBalanceRequest",
    "RevaluationLineRequest",
    "CreateRevaluationRequest",
    # Responses
    "ItemResponse",
    "ItemListResponse",
    "WarehouseResponse",
    "WarehouseListResponse",
    "SupplierResponse",
    "SupplierListResponse",
    "BalanceResponse",
    "BalanceListResponse",
    "MovementResponse",
    "MovementListResponse",
    "MovementBatchResponse",
    "InventoryStatsResponse",
    "ReconciliationResponse",
    "PeriodSummaryResponse",
    "MonthlySummaryResponse",
    "ItemEntryResponse",
    "ItemEntryListResponse",
    "PurchaseResponse",
    "PurchaseListResponse",
    "TransferResponse",
    "TransferListResponse",
    "WithdrawalResponse",
    "WithdrawalListResponse",
    "AdjustmentResponse",
    "AdjustmentListResponse",
    "DeleteResponse",
    "ComponentHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
