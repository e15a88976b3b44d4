"""Catalog maintenance use case: items, warehouses and suppliers."""

from src.application.dto.requests import (
    CreateItemRequest,
    CreateSupplierRequest,
    CreateWarehouseRequest,
    UpdateItemRequest,
    UpdateWarehouseRequest,
)
from src.application.dto.responses import (
    ItemResponse,
    SupplierResponse,
    WarehouseResponse,
)
from src.application.use_cases.base import LedgerUseCase
from src.config import get_logger
from src.core.entities.catalog import Item, Supplier, Warehouse
from src.core.exceptions import (
    ItemNotFoundError,
    SupplierNotFoundError,
    WarehouseNotFoundError,
)

logger = get_logger(__name__)


class ManageCatalogUseCase(LedgerUseCase):
    """
    Create and maintain catalog entries.

    Rules enforced here on top of the store's uniqueness checks:
    - an item's supplier must exist
    - an item code cannot change once the item has ledger history (checked
      by the store in the same transaction as the update)
    """

    # ---------------------------------------------------------------- items

    async def create_item(self, request: CreateItemRequest) -> Item:
        store = await self._get_catalog_store()
        if request.supplier_id:
            await self._require_supplier(request.supplier_id)

        item = Item(**request.model_dump())
        return await store.create_item(item)

    async def update_item(self, item_id: str, request: UpdateItemRequest) -> Item:
        store = await self._get_catalog_store()
        item = await store.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)

        changes = request.model_dump(exclude_unset=True)
        if changes.get("supplier_id"):
            await self._require_supplier(changes["supplier_id"])

        updated = Item.model_validate({**item.model_dump(), **changes})
        return await store.update_item(updated)

    async def delete_item(self, item_id: str) -> bool:
        store = await self._get_catalog_store()
        if not await store.delete_item(item_id):
            raise ItemNotFoundError(item_id)
        return True

    # ----------------------------------------------------------- warehouses

    async def create_warehouse(self, request: CreateWarehouseRequest) -> Warehouse:
        store = await self._get_catalog_store()
        return await store.create_warehouse(Warehouse(**request.model_dump()))

    async def update_warehouse(
        self, warehouse_id: str, request: UpdateWarehouseRequest
    ) -> Warehouse:
        store = await self._get_catalog_store()
        warehouse = await store.get_warehouse(warehouse_id)
        if warehouse is None:
            raise WarehouseNotFoundError(warehouse_id)

        changes = request.model_dump(exclude_unset=True)
        updated = Warehouse.model_validate({**warehouse.model_dump(), **changes})
        return await store.update_warehouse(updated)

    async def delete_warehouse(self, warehouse_id: str) -> bool:
        store = await self._get_catalog_store()
        if not await store.delete_warehouse(warehouse_id):
            raise WarehouseNotFoundError(warehouse_id)
        return True

    # ------------------------------------------------------------ suppliers

    async def create_supplier(self, request: CreateSupplierRequest) -> Supplier:
        store = await self._get_catalog_store()
        return await store.create_supplier(Supplier(**request.model_dump()))

    async def _require_supplier(self, supplier_id: str) -> None:
        store = await self._get_catalog_store()
        if await store.get_supplier(supplier_id) is None:
            raise SupplierNotFoundError(supplier_id)

    # ------------------------------------------------------------ responses

    @staticmethod
    def item_response(item: Item) -> ItemResponse:
        return ItemResponse.model_validate(item)

    @staticmethod
    def warehouse_response(warehouse: Warehouse) -> WarehouseResponse:
        return WarehouseResponse.model_validate(warehouse)

    @staticmethod
    def supplier_response(supplier: Supplier) -> SupplierResponse:
        return SupplierResponse.model_validate(supplier)
