"""
Catalog endpoints: items, warehouses and suppliers.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_acting_user, get_cat_store, get_catalog_use_case
from src.application.dto.requests import (
    CreateItemRequest,
    CreateSupplierRequest,
    CreateWarehouseRequest,
    UpdateItemRequest,
    UpdateWarehouseRequest,
)
from src.application.dto.responses import (
    DeleteResponse,
    ErrorResponse,
    ItemListResponse,
    ItemResponse,
    SupplierListResponse,
    SupplierResponse,
    WarehouseListResponse,
    WarehouseResponse,
)
from src.application.use_cases.catalog import ManageCatalogUseCase
from src.core.exceptions import ItemNotFoundError, WarehouseNotFoundError
from src.infrastructure.storage.sqlite import SQLiteCatalogStore

router = APIRouter(prefix="/api", tags=["catalog"])

_WRITE = [Depends(get_acting_user)]


# ------------------------------------------------------------------- items


@router.post(
    "/items",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_WRITE,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_item(
    request: CreateItemRequest,
    use_case: ManageCatalogUseCase = Depends(get_catalog_use_case),
) -> ItemResponse:
    """Add an item to the catalog."""
    item = await use_case.create_item(request)
    return use_case.item_response(item)


@router.get("/items", response_model=ItemListResponse)
async def list_items(
    q: str | None = Query(default=None, description="Match code or description"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> ItemListResponse:
    """List items ordered by code."""
    items = await store.list_items(search=q, limit=limit, offset=offset)
    return ItemListResponse(
        items=[ItemResponse.model_validate(item) for item in items],
        count=len(items),
    )


@router.get(
    "/items/{item_id}",
    response_model=ItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_item(
    item_id: str,
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> ItemResponse:
    item = await store.get_item(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return ItemResponse.model_validate(item)


@router.patch(
    "/items/{item_id}",
    response_model=ItemResponse,
    dependencies=_WRITE,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_item(
    item_id: str,
    request: UpdateItemRequest,
    use_case: ManageCatalogUseCase = Depends(get_catalog_use_case),
) -> ItemResponse:
    """Update item fields; the code is frozen once movements exist."""
    item = await use_case.update_item(item_id, request)
    return use_case.item_response(item)


@router.delete(
    "/items/{item_id}",
    response_model=DeleteResponse,
    dependencies=_WRITE,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_item(
    item_id: str,
    use_case: ManageCatalogUseCase = Depends(get_catalog_use_case),
) -> DeleteResponse:
    """Delete an item without stock or movement history."""
    return DeleteResponse(id=item_id, deleted=await use_case.delete_item(item_id))


# -------------------------------------------------------------- warehouses


@router.post(
    "/warehouses",
    response_model=WarehouseResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_WRITE,
    responses={409: {"model": ErrorResponse}},
)
async def create_warehouse(
    request: CreateWarehouseRequest,
    use_case: ManageCatalogUseCase = Depends(get_catalog_use_case),
) -> WarehouseResponse:
    warehouse = await use_case.create_warehouse(request)
    return use_case.warehouse_response(warehouse)


@router.get("/warehouses", response_model=WarehouseListResponse)
async def list_warehouses(
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> WarehouseListResponse:
    warehouses = await store.list_warehouses()
    return WarehouseListResponse(
        warehouses=[WarehouseResponse.model_validate(w) for w in warehouses],
        count=len(warehouses),
    )


@router.get(
    "/warehouses/{warehouse_id}",
    response_model=WarehouseResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_warehouse(
    warehouse_id: str,
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> WarehouseResponse:
    warehouse = await store.get_warehouse(warehouse_id)
    if warehouse is None:
        raise WarehouseNotFoundError(warehouse_id)
    return WarehouseResponse.model_validate(warehouse)


@router.patch(
    "/warehouses/{warehouse_id}",
    response_model=WarehouseResponse,
    dependencies=_WRITE,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_warehouse(
    warehouse_id: str,
    request: UpdateWarehouseRequest,
    use_case: ManageCatalogUseCase = Depends(get_catalog_use_case),
) -> WarehouseResponse:
    warehouse = await use_case.update_warehouse(warehouse_id, request)
    return use_case.warehouse_response(warehouse)


@router.delete(
    "/warehouses/{warehouse_id}",
    response_model=DeleteResponse,
    dependencies=_WRITE,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_warehouse(
    warehouse_id: str,
    use_case: ManageCatalogUseCase = Depends(get_catalog_use_case),
) -> DeleteResponse:
    """Delete a warehouse without stock or movement history."""
    return DeleteResponse(
        id=warehouse_id, deleted=await use_case.delete_warehouse(warehouse_id)
    )


# --------------------------------------------------------------- suppliers


@router.post(
    "/suppliers",
    response_model=SupplierResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_WRITE,
    responses={409: {"model": ErrorResponse}},
)
async def create_supplier(
    request: CreateSupplierRequest,
    use_case: ManageCatalogUseCase = Depends(get_catalog_use_case),
) -> SupplierResponse:
    supplier = await use_case.create_supplier(request)
    return use_case.supplier_response(supplier)


@router.get("/suppliers", response_model=SupplierListResponse)
async def list_suppliers(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteCatalogStore = Depends(get_cat_store),
) -> SupplierListResponse:
    suppliers = await store.list_suppliers(limit=limit, offset=offset)
    return SupplierListResponse(
        suppliers=[SupplierResponse.model_validate(s) for s in suppliers],
        count=len(suppliers),
    )
