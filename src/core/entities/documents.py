"""
Inventory document entities.

Documents are the sources of movement requests: item entries, purchases,
transfers, withdrawals and adjustments. Each carries header data, line
items and the acting users.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from src.core.entities.common import ZERO, new_id, quantize_value, utcnow


class DocumentType(str, Enum):
    """Document types and their number prefixes."""

    ITEM_ENTRY = "item_entry"
    PURCHASE = "purchase"
    TRANSFER = "transfer"
    WITHDRAWAL = "withdrawal"
    ADJUSTMENT = "adjustment"

    @property
    def prefix(self) -> str | None:
        return DOCUMENT_PREFIXES.get(self)


DOCUMENT_PREFIXES: dict[DocumentType, str] = {
    DocumentType.PURCHASE: "PO",
    DocumentType.TRANSFER: "TRF",
    DocumentType.WITHDRAWAL: "WTH",
    DocumentType.ADJUSTMENT: "ADJ",
}


class PurchaseStatus(str, Enum):
    PENDING = "PENDING"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


class TransferStatus(str, Enum):
    PENDING = "PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class WithdrawalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class AdjustmentType(str, Enum):
    PHYSICAL_COUNT = "PHYSICAL_COUNT"
    DAMAGE = "DAMAGE"
    CORRECTION = "CORRECTION"
    FOUND = "FOUND"
    SHRINKAGE = "SHRINKAGE"
    REVALUATION = "REVALUATION"


class ItemEntry(BaseModel):
    """A receipt of one item into a warehouse at a landed cost."""

    id: str = Field(default_factory=new_id)
    item_id: str
    warehouse_id: str
    supplier_id: str | None = None
    quantity: Decimal
    landed_cost: Decimal
    total_value: Decimal = ZERO
    purchase_reference: str | None = None
    notes: str | None = None
    created_by: str
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def compute_total(self) -> "ItemEntry":
        self.total_value = quantize_value(self.quantity * self.landed_cost)
        return self


class PurchaseLine(BaseModel):
    """A purchase order line."""

    id: str = Field(default_factory=new_id)
    item_id: str
    quantity: Decimal
    unit_cost: Decimal
    total_cost: Decimal = ZERO

    @model_validator(mode="after")
    def compute_total(self) -> "PurchaseLine":
        self.total_cost = quantize_value(self.quantity * self.unit_cost)
        return self


class Purchase(BaseModel):
    """A purchase order; receiving it posts receipts into the main warehouse."""

    id: str = Field(default_factory=new_id)
    purchase_number: str
    supplier_id: str
    status: PurchaseStatus = PurchaseStatus.PENDING
    total_cost: Decimal = ZERO
    notes: str | None = None
    warehouse_id: str | None = None  # set on receipt
    created_by: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    lines: list[PurchaseLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def compute_total(self) -> "Purchase":
        if self.lines:
            self.total_cost = sum((line.total_cost for line in self.lines), ZERO)
        return self


class TransferLine(BaseModel):
    """A transfer line; the unit cost is fixed when the transfer is executed."""

    id: str = Field(default_factory=new_id)
    item_id: str
    quantity: Decimal
    unit_cost: Decimal | None = None


class Transfer(BaseModel):
    """A movement of stock between two warehouses."""

    id: str = Field(default_factory=new_id)
    transfer_number: str
    from_warehouse_id: str
    to_warehouse_id: str
    status: TransferStatus = TransferStatus.PENDING
    notes: str | None = None
    created_by: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    lines: list[TransferLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class WithdrawalLine(BaseModel):
    """
    A withdrawal line.

    The cost is indicative until approval, when it is replaced by the
    average cost actually used by the ledger.
    """

    id: str = Field(default_factory=new_id)
    item_id: str
    quantity: Decimal
    unit_cost: Decimal = ZERO
    total_value: Decimal = ZERO

    @model_validator(mode="after")
    def compute_total(self) -> "WithdrawalLine":
        self.total_value = quantize_value(self.quantity * self.unit_cost)
        return self


class Withdrawal(BaseModel):
    """A request to take material out of a warehouse."""

    id: str = Field(default_factory=new_id)
    withdrawal_number: str
    warehouse_id: str
    purpose: str | None = None
    status: WithdrawalStatus = WithdrawalStatus.PENDING
    requested_by: str
    approved_by: str | None = None
    approved_at: datetime | None = None
    lines: list[WithdrawalLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AdjustmentLine(BaseModel):
    """A counted line of an adjustment."""

    id: str = Field(default_factory=new_id)
    item_id: str
    system_quantity: Decimal
    actual_quantity: Decimal
    unit_cost: Decimal
    adjustment_quantity: Decimal = ZERO
    total_adjustment: Decimal = ZERO

    @model_validator(mode="after")
    def compute_delta(self) -> "AdjustmentLine":
        self.adjustment_quantity = self.actual_quantity - self.system_quantity
        self.total_adjustment = quantize_value(self.adjustment_quantity * self.unit_cost)
        return self


class Adjustment(BaseModel):
    """An inventory adjustment, posted when created."""

    id: str = Field(default_factory=new_id)
    adjustment_number: str
    warehouse_id: str
    adjustment_type: AdjustmentType
    reason: str
    notes: str | None = None
    adjusted_by: str
    adjusted_at: datetime = Field(default_factory=utcnow)
    lines: list[AdjustmentLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
