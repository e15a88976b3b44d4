"""Core domain entities."""

from src.core.entities.catalog import (
    CostingMethod,
    Item,
    Supplier,
    Warehouse,
)
from src.core.entities.common import (
    new_id,
    quantize_cost,
    quantize_quantity,
    quantize_value,
    to_decimal,
    utcnow,
)
from src.core.entities.documents import (
    Adjustment,
    AdjustmentLine,
    AdjustmentType,
    DocumentType,
    ItemEntry,
    Purchase,
    PurchaseLine,
    PurchaseStatus,
    Transfer,
    TransferLine,
    TransferStatus,
    Withdrawal,
    WithdrawalLine,
    WithdrawalStatus,
)
from src.core.entities.inventory import (
    INBOUND_KINDS,
    OUTBOUND_KINDS,
    Balance,
    InventoryStats,
    MovementKind,
    MovementRecord,
    MovementRequest,
    PeriodSummary,
    ReconciliationResult,
)

__all__ = [
    # Catalog
    "CostingMethod",
    "Item",
    "Supplier",
    "Warehouse",
    # Inventory
    "Balance",
    "INBOUND_KINDS",
    "OUTBOUND_KINDS",
    "InventoryStats",
    "MovementKind",
    "MovementRecord",
    "MovementRequest",
    "PeriodSummary",
    "ReconciliationResult",
    # Documents
    "Adjustment",
    "AdjustmentLine",
    "AdjustmentType",
    "DocumentType",
    "ItemEntry",
    "Purchase",
    "PurchaseLine",
    "PurchaseStatus",
    "Transfer",
    "TransferLine",
    "TransferStatus",
    "Withdrawal",
    "WithdrawalLine",
    "WithdrawalStatus",
    # Helpers
    "new_id",
    "quantize_cost",
    "quantize_quantity",
    "quantize_value",
    "to_decimal",
    "utcnow",
]
