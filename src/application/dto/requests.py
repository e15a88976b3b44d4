"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
Quantities and costs are decimals; JSON numbers and numeric strings are
both accepted.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.core.entities.catalog import CostingMethod
from src.core.entities.documents import AdjustmentType

# --------------------------------------------------------------------- catalog


class CreateItemRequest(BaseModel):
    """Request to add an item to the catalog."""

    item_code: str = Field(..., min_length=1, max_length=64, examples=["BOLT-M8"])
    description: str = Field(..., min_length=1, examples=["Hex bolt M8 x 40"])
    unit_of_measure: str = Field(default="PCS", examples=["PCS", "KG", "M"])
    standard_cost: Decimal = Field(default=Decimal("0"), ge=0)
    costing_method: CostingMethod = CostingMethod.WEIGHTED_AVERAGE
    reorder_level: Decimal | None = Field(default=None, ge=0)
    min_level: Decimal | None = Field(default=None, ge=0)
    max_level: Decimal | None = Field(default=None, ge=0)
    supplier_id: str | None = None


class UpdateItemRequest(BaseModel):
    """Partial item update; omitted fields are left unchanged."""

    item_code: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = Field(default=None, min_length=1)
    unit_of_measure: str | None = None
    standard_cost: Decimal | None = Field(default=None, ge=0)
    costing_method: CostingMethod | None = None
    reorder_level: Decimal | None = Field(default=None, ge=0)
    min_level: Decimal | None = Field(default=None, ge=0)
    max_level: Decimal | None = Field(default=None, ge=0)
    supplier_id: str | None = None


class CreateWarehouseRequest(BaseModel):
    """Request to add a warehouse."""

    name: str = Field(..., min_length=1, examples=["Main Store"])
    location: str | None = None
    description: str | None = None
    is_main: bool = Field(
        default=False,
        description="Flag as main warehouse (clears the flag on the others)",
    )
    default_costing_method: CostingMethod = CostingMethod.WEIGHTED_AVERAGE


class UpdateWarehouseRequest(BaseModel):
    """Partial warehouse update."""

    name: str | None = Field(default=None, min_length=1)
    location: str | None = None
    description: str | None = None
    is_main: bool | None = None
    default_costing_method: CostingMethod | None = None


class CreateSupplierRequest(BaseModel):
    name: str = Field(..., min_length=1)
    contact_email: str | None = None
    phone: str | None = None


# ------------------------------------------------------------------- documents


class CreateItemEntryRequest(BaseModel):
    """Receipt of one item into a warehouse at a landed cost."""

    item_id: str
    warehouse_id: str
    quantity: Decimal = Field(..., gt=0, decimal_places=4)
    landed_cost: Decimal = Field(..., ge=0, description="Unit cost including freight")
    supplier_id: str | None = None
    purchase_reference: str | None = None
    notes: str | None = None


class PurchaseLineRequest(BaseModel):
    item_id: str
    quantity: Decimal = Field(..., gt=0, decimal_places=4)
    unit_cost: Decimal = Field(..., ge=0)


class CreatePurchaseRequest(BaseModel):
    """Purchase order; stock is received into the main warehouse on approval."""

    supplier_id: str
    notes: str | None = None
    lines: list[PurchaseLineRequest] = Field(..., min_length=1)


class TransferLineRequest(BaseModel):
    item_id: str
    quantity: Decimal = Field(..., gt=0, decimal_places=4)


class CreateTransferRequest(BaseModel):
    """Transfer between two warehouses; priced at the source average on approval."""

    from_warehouse_id: str
    to_warehouse_id: str
    notes: str | None = None
    lines: list[TransferLineRequest] = Field(..., min_length=1)


class WithdrawalLineRequest(BaseModel):
    item_id: str
    quantity: Decimal = Field(..., gt=0, decimal_places=4)


class CreateWithdrawalRequest(BaseModel):
    """Request to take material out of a warehouse, pending approval."""

    warehouse_id: str
    purpose: str | None = None
    lines: list[WithdrawalLineRequest] = Field(..., min_length=1)


class AdjustmentLineRequest(BaseModel):
    item_id: str
    system_quantity: Decimal = Field(
        ..., ge=0, decimal_places=4, description="Quantity the system shows"
    )
    actual_quantity: Decimal = Field(
        ..., ge=0, decimal_places=4, description="Quantity counted"
    )
    unit_cost: Decimal = Field(..., ge=0, description="Cost the balance is re-based on")


class CreateAdjustmentRequest(BaseModel):
    """Inventory adjustment, posted immediately."""

    warehouse_id: str
    adjustment_type: AdjustmentType
    reason: str = Field(..., min_length=1)
    notes: str | None = None
    lines: list[AdjustmentLineRequest] = Field(..., min_length=1)


class OpeningBalanceLineRequest(BaseModel):
    item_id: str
    quantity: Decimal = Field(..., gt=0, decimal_places=4)
    unit_cost: Decimal = Field(..., ge=0)


class CreateOpeningBalanceRequest(BaseModel):
    """Initial stock of a warehouse."""

    warehouse_id: str
    notes: str | None = None
    lines: list[OpeningBalanceLineRequest] = Field(..., min_length=1)


class RevaluationLineRequest(BaseModel):
    item_id: str
    unit_cost: Decimal = Field(..., ge=0, description="New average unit cost")


class CreateRevaluationRequest(BaseModel):
    """Re-base balances onto new unit costs without moving quantity."""

    warehouse_id: str
    notes: str | None = None
    lines: list[RevaluationLineRequest] = Field(..., min_length=1)
