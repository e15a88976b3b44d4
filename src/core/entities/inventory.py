"""Inventory ledger domain entities."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from src.core.entities.catalog import CostingMethod
from src.core.entities.common import ZERO, utcnow


class MovementKind(str, Enum):
    """Kinds of inventory movements recorded in the ledger."""

    ITEM_ENTRY = "ITEM_ENTRY"
    PURCHASE_RECEIPT = "PURCHASE_RECEIPT"
    OPENING_BALANCE = "OPENING_BALANCE"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    WITHDRAWAL = "WITHDRAWAL"
    ADJUSTMENT = "ADJUSTMENT"
    REVALUATION = "REVALUATION"

    @property
    def is_inbound(self) -> bool:
        return self in INBOUND_KINDS

    @property
    def is_outbound(self) -> bool:
        return self in OUTBOUND_KINDS


INBOUND_KINDS = frozenset(
    {
        MovementKind.ITEM_ENTRY,
        MovementKind.PURCHASE_RECEIPT,
        MovementKind.OPENING_BALANCE,
        MovementKind.TRANSFER_IN,
    }
)
OUTBOUND_KINDS = frozenset({MovementKind.TRANSFER_OUT, MovementKind.WITHDRAWAL})


class Balance(BaseModel):
    """
    Current balance of one item in one warehouse.

    A zero quantity keeps its average cost; an absent balance has none.
    `version` increases by one with every movement applied to the pair and
    equals the sequence of the latest ledger row.
    """

    item_id: str
    warehouse_id: str
    quantity: Decimal = ZERO
    total_value: Decimal = ZERO
    avg_unit_cost: Decimal = ZERO
    version: int = 0
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def key(self) -> tuple[str, str]:
        return (self.item_id, self.warehouse_id)

    @property
    def implied_value(self) -> Decimal:
        """Value implied by quantity and average cost."""
        return self.quantity * self.avg_unit_cost


class MovementRequest(BaseModel):
    """
    A request to move stock for one item in one warehouse.

    Inbound kinds carry an explicit unit cost; outbound kinds must not.
    Adjustments carry both counted quantities. `cost_from_line` prices an
    inbound line at the unit cost of an earlier outbound line in the same
    batch (used to carry a transfer's source cost to its destination).
    """

    item_id: str
    warehouse_id: str
    kind: MovementKind
    quantity_delta: Decimal
    unit_cost: Decimal | None = None
    reference_id: str | None = None
    notes: str | None = None
    cost_method: CostingMethod | None = None
    system_quantity: Decimal | None = None
    actual_quantity: Decimal | None = None
    cost_from_line: int | None = None


class MovementRecord(BaseModel):
    """Immutable ledger entry with the balance snapshot after the movement."""

    id: int | None = None
    item_id: str
    warehouse_id: str
    sequence: int = 0
    kind: MovementKind
    quantity: Decimal
    unit_cost: Decimal
    total_value: Decimal
    reference_id: str | None = None
    notes: str | None = None
    cost_method: CostingMethod = CostingMethod.WEIGHTED_AVERAGE
    balance_quantity: Decimal
    balance_value: Decimal
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class ReconciliationResult(BaseModel):
    """Outcome of replaying the ledger of one item/warehouse pair."""

    item_id: str
    warehouse_id: str
    movement_count: int = 0
    ledger_quantity: Decimal = ZERO
    ledger_value: Decimal = ZERO
    balance_quantity: Decimal | None = None
    balance_value: Decimal | None = None
    issues: list[str] = Field(default_factory=list)

    @property
    def reconciled(self) -> bool:
        return not self.issues


class PeriodSummary(BaseModel):
    """Monthly weighted-average summary for one item/warehouse pair."""

    item_id: str
    warehouse_id: str
    year: int
    month: int
    movement_count: int = 0
    opening_quantity: Decimal = ZERO
    opening_value: Decimal = ZERO
    closing_quantity: Decimal = ZERO
    closing_value: Decimal = ZERO
    total_quantity: Decimal = ZERO
    total_value: Decimal = ZERO
    weighted_avg_cost: Decimal = ZERO


class InventoryStats(BaseModel):
    """Aggregates over a list of balances."""

    total_lines: int = 0
    total_value: Decimal = ZERO
    low_stock_lines: int = 0
    out_of_stock_lines: int = 0
    average_value: Decimal = ZERO
    warehouse_count: int = 0
