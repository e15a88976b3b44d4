"""
Catalog domain entities: items, warehouses and suppliers.

Items are the stock-keeping units valued by the ledger; warehouses are the
storage locations a balance is kept for.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from src.core.entities.common import ZERO, new_id, utcnow


class CostingMethod(str, Enum):
    """Costing method recorded on items, warehouses and movements."""

    WEIGHTED_AVERAGE = "WEIGHTED_AVERAGE"
    FIFO = "FIFO"
    LIFO = "LIFO"
    MOVING_AVERAGE = "MOVING_AVERAGE"
    STANDARD_COST = "STANDARD_COST"
    SPECIFIC_IDENTIFICATION = "SPECIFIC_IDENTIFICATION"


class Supplier(BaseModel):
    """A supplier items are sourced from."""

    id: str = Field(default_factory=new_id)
    name: str
    contact_email: str | None = None
    phone: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class Item(BaseModel):
    """
    A stock-keeping unit.

    The item code is unique and becomes immutable once any movement
    references the item.
    """

    id: str = Field(default_factory=new_id)
    item_code: str
    description: str
    unit_of_measure: str = "PCS"
    standard_cost: Decimal = ZERO
    costing_method: CostingMethod = CostingMethod.WEIGHTED_AVERAGE
    reorder_level: Decimal | None = None
    min_level: Decimal | None = None
    max_level: Decimal | None = None
    supplier_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("item_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        code = v.strip()
        if not code:
            raise ValueError("item_code must not be empty")
        return code

    @field_validator("standard_cost")
    @classmethod
    def non_negative_cost(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("standard_cost must be >= 0")
        return v


class Warehouse(BaseModel):
    """A storage location. At most one warehouse is flagged as main."""

    id: str = Field(default_factory=new_id)
    name: str
    location: str | None = None
    description: str | None = None
    is_main: bool = False
    default_costing_method: CostingMethod = CostingMethod.WEIGHTED_AVERAGE
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("name must not be empty")
        return name
