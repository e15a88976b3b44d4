"""Mocked stores and a recording coordinator for use case tests."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.core.entities.catalog import Item, Supplier, Warehouse
from src.core.entities.common import ZERO
from src.core.entities.inventory import MovementRecord


class RecordingCoordinator:
    """
    Stand-in for MovementCoordinator.

    Prices outbound lines at `outbound_cost`, resolves `cost_from_line`
    against earlier records and hands the records to `on_applied` like the
    real coordinator does inside its transaction.
    """

    def __init__(self, outbound_cost: Decimal = Decimal("12")):
        self.outbound_cost = outbound_cost
        self.session = AsyncMock()
        self.batches: list[list] = []
        self.error: Exception | None = None

    async def apply_movements(self, requests, acting_user_id, on_applied=None):
        self.batches.append(list(requests))
        if self.error is not None:
            raise self.error

        records = []
        for index, request in enumerate(requests):
            if request.kind.is_outbound:
                cost = self.outbound_cost
            elif request.cost_from_line is not None:
                cost = records[request.cost_from_line].unit_cost
            else:
                cost = request.unit_cost or ZERO
            records.append(
                MovementRecord(
                    item_id=request.item_id,
                    warehouse_id=request.warehouse_id,
                    sequence=index + 1,
                    kind=request.kind,
                    quantity=request.quantity_delta,
                    unit_cost=cost,
                    total_value=request.quantity_delta * cost,
                    reference_id=request.reference_id,
                    balance_quantity=ZERO,
                    balance_value=ZERO,
                    created_by=acting_user_id,
                )
            )

        if on_applied is not None:
            await on_applied(self.session, records)
        return records


@pytest.fixture
def supplier() -> Supplier:
    return Supplier(id="sup-1", name="Acme Fasteners")


@pytest.fixture
def item() -> Item:
    return Item(id="item-1", item_code="BOLT-M8", description="Hex bolt M8")


@pytest.fixture
def main_warehouse() -> Warehouse:
    return Warehouse(id="wh-main", name="Main Store", is_main=True)


@pytest.fixture
def site_warehouse() -> Warehouse:
    return Warehouse(id="wh-site", name="Site A")


@pytest.fixture
def catalog_store(supplier, item, main_warehouse, site_warehouse):
    warehouses = {w.id: w for w in (main_warehouse, site_warehouse)}
    store = AsyncMock()
    store.get_supplier.side_effect = lambda sid: supplier if sid == supplier.id else None
    store.get_item.side_effect = lambda iid: item if iid == item.id else None
    store.get_warehouse.side_effect = warehouses.get
    store.get_main_warehouse.return_value = main_warehouse
    return store


@pytest.fixture
def document_store():
    store = AsyncMock()
    # create_* return the document they were given
    for name in (
        "create_item_entry",
        "create_purchase",
        "create_transfer",
        "create_withdrawal",
        "create_adjustment",
    ):
        getattr(store, name).side_effect = lambda doc, session=None: doc
    return store


@pytest.fixture
def ledger_store():
    store = AsyncMock()
    store.get_balance.return_value = None
    return store


@pytest.fixture
def coordinator() -> RecordingCoordinator:
    return RecordingCoordinator()


@pytest.fixture
def numbering():
    service = AsyncMock()
    service.next_number.return_value = "DOC-2024-001"
    return service


@pytest.fixture
def deps(catalog_store, document_store, ledger_store, coordinator, numbering) -> dict:
    """Keyword arguments accepted by every LedgerUseCase."""
    return {
        "catalog_store": catalog_store,
        "document_store": document_store,
        "ledger_store": ledger_store,
        "coordinator": coordinator,
        "numbering": numbering,
    }
