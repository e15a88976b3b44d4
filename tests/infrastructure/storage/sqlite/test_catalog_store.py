"""Tests for SQLiteCatalogStore."""

from decimal import Decimal

import pytest

from src.core.entities.catalog import CostingMethod, Item, Supplier, Warehouse
from src.core.entities.inventory import MovementKind, MovementRequest
from src.core.exceptions import (
    DeletionBlockedError,
    DuplicateEntityError,
    ItemNotFoundError,
    ValidationError,
)
from src.core.services import MovementCoordinator
from src.infrastructure.storage.sqlite import SQLiteCatalogStore, SQLiteLedgerStore


@pytest.fixture
def store(ledger_db) -> SQLiteCatalogStore:
    return SQLiteCatalogStore()


async def _receive(item_id: str, warehouse_id: str) -> None:
    coordinator = MovementCoordinator(SQLiteLedgerStore(), retry_delay=0)
    await coordinator.apply_movements(
        [
            MovementRequest(
                item_id=item_id,
                warehouse_id=warehouse_id,
                kind=MovementKind.ITEM_ENTRY,
                quantity_delta=Decimal("5"),
                unit_cost=Decimal("2"),
            )
        ],
        "tester",
    )


class TestItems:
    async def test_create_and_get(self, store):
        item = Item(
            item_code="BOLT-M8",
            description="Hex bolt",
            standard_cost=Decimal("1.25"),
            reorder_level=Decimal("10"),
            costing_method=CostingMethod.FIFO,
        )
        await store.create_item(item)

        fetched = await store.get_item(item.id)
        assert fetched is not None
        assert fetched.item_code == "BOLT-M8"
        assert fetched.standard_cost == Decimal("1.25")
        assert fetched.reorder_level == Decimal("10")
        assert fetched.min_level is None
        assert fetched.costing_method == CostingMethod.FIFO

    async def test_get_by_code(self, store):
        item = await store.create_item(Item(item_code="NUT-M8", description="Nut"))
        fetched = await store.get_item_by_code(" NUT-M8 ")
        assert fetched is not None
        assert fetched.id == item.id

    async def test_get_missing(self, store):
        assert await store.get_item("missing") is None

    async def test_duplicate_code(self, store):
        await store.create_item(Item(item_code="DUP", description="first"))
        with pytest.raises(DuplicateEntityError):
            await store.create_item(Item(item_code="DUP", description="second"))

    async def test_update(self, store):
        item = await store.create_item(Item(item_code="A-1", description="old"))
        item.description = "new"
        item.unit_of_measure = "KG"
        await store.update_item(item)

        fetched = await store.get_item(item.id)
        assert fetched.description == "new"
        assert fetched.unit_of_measure == "KG"

    async def test_code_change_allowed_without_movements(self, store):
        item = await store.create_item(Item(item_code="A-2", description="x"))
        item.item_code = "A-3"
        await store.update_item(item)

        assert (await store.get_item(item.id)).item_code == "A-3"

    async def test_code_frozen_once_item_has_movements(self, store):
        item = await store.create_item(Item(item_code="USED-1", description="x"))
        warehouse = await store.create_warehouse(Warehouse(name="W"))
        await _receive(item.id, warehouse.id)

        item.item_code = "USED-2"
        with pytest.raises(ValidationError) as exc:
            await store.update_item(item)
        assert exc.value.details["field"] == "item_code"
        assert (await store.get_item(item.id)).item_code == "USED-1"

        item.item_code = "USED-1"
        item.description = "renamed"
        await store.update_item(item)
        assert (await store.get_item(item.id)).description == "renamed"

    async def test_update_missing(self, store):
        with pytest.raises(ItemNotFoundError):
            await store.update_item(Item(id="ghost", item_code="G", description="x"))

    async def test_list_with_search(self, store):
        await store.create_item(Item(item_code="BOLT-1", description="Bolt"))
        await store.create_item(Item(item_code="WASHER-1", description="Flat washer"))

        assert len(await store.list_items()) == 2
        found = await store.list_items(search="wash")
        assert [i.item_code for i in found] == ["WASHER-1"]

    async def test_delete_unused(self, store):
        item = await store.create_item(Item(item_code="GONE", description="x"))
        assert await store.delete_item(item.id) is True
        assert await store.get_item(item.id) is None
        assert await store.delete_item(item.id) is False

    async def test_delete_blocked_by_history(self, store):
        item = await store.create_item(Item(item_code="USED", description="x"))
        warehouse = await store.create_warehouse(Warehouse(name="W"))
        await _receive(item.id, warehouse.id)

        with pytest.raises(DeletionBlockedError):
            await store.delete_item(item.id)


class TestWarehouses:
    async def test_single_main_flag(self, store):
        first = await store.create_warehouse(Warehouse(name="First", is_main=True))
        second = await store.create_warehouse(Warehouse(name="Second", is_main=True))

        main = await store.get_main_warehouse()
        assert main.id == second.id
        assert (await store.get_warehouse(first.id)).is_main is False

    async def test_update_claims_main(self, store):
        first = await store.create_warehouse(Warehouse(name="First", is_main=True))
        second = await store.create_warehouse(Warehouse(name="Second"))
        second.is_main = True
        await store.update_warehouse(second)

        assert (await store.get_main_warehouse()).id == second.id
        assert (await store.get_warehouse(first.id)).is_main is False

    async def test_no_main(self, store):
        await store.create_warehouse(Warehouse(name="Only"))
        assert await store.get_main_warehouse() is None

    async def test_duplicate_name_ignores_case(self, store):
        await store.create_warehouse(Warehouse(name="Depot"))
        with pytest.raises(DuplicateEntityError):
            await store.create_warehouse(Warehouse(name="depot"))

    async def test_list_puts_main_first(self, store):
        await store.create_warehouse(Warehouse(name="Alpha"))
        await store.create_warehouse(Warehouse(name="Zulu", is_main=True))

        names = [w.name for w in await store.list_warehouses()]
        assert names == ["Zulu", "Alpha"]

    async def test_delete_blocked_by_stock(self, store):
        item = await store.create_item(Item(item_code="S", description="x"))
        warehouse = await store.create_warehouse(Warehouse(name="Stocked"))
        await _receive(item.id, warehouse.id)

        with pytest.raises(DeletionBlockedError):
            await store.delete_warehouse(warehouse.id)

    async def test_delete_empty(self, store):
        warehouse = await store.create_warehouse(Warehouse(name="Empty"))
        assert await store.delete_warehouse(warehouse.id) is True


class TestSuppliers:
    async def test_create_get_list(self, store):
        supplier = await store.create_supplier(
            Supplier(name="Acme", contact_email="sales@acme.test")
        )
        fetched = await store.get_supplier(supplier.id)
        assert fetched.contact_email == "sales@acme.test"
        assert [s.name for s in await store.list_suppliers()] == ["Acme"]

    async def test_duplicate_name(self, store):
        await store.create_supplier(Supplier(name="Acme"))
        with pytest.raises(DuplicateEntityError):
            await store.create_supplier(Supplier(name="ACME"))
