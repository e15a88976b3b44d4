"""Tests for MovementCoordinator against an in-memory ledger."""

from contextlib import asynccontextmanager
from decimal import Decimal

import pytest

from src.core.entities.catalog import Item, Warehouse
from src.core.entities.inventory import (
    Balance,
    MovementKind,
    MovementRecord,
    MovementRequest,
)
from src.core.exceptions import (
    ConcurrencyConflictError,
    InsufficientStockError,
    InvalidMovementRequestError,
    UnknownItemOrWarehouseError,
)
from src.core.services.movement_coordinator import MovementCoordinator

D = Decimal


class FakeSession:
    """Working copy of the fake store; committed only when the block exits cleanly."""

    def __init__(self, store: "FakeLedgerStore"):
        self.store = store
        self.balances = dict(store.balances)
        self.movements: list[MovementRecord] = []

    async def get_item(self, item_id):
        return self.store.items.get(item_id)

    async def get_warehouse(self, warehouse_id):
        return self.store.warehouses.get(warehouse_id)

    async def get_balance(self, item_id, warehouse_id):
        return self.balances.get((item_id, warehouse_id))

    async def save_balance(self, balance: Balance, expected_version: int) -> None:
        if self.store.conflicts_remaining > 0:
            self.store.conflicts_remaining -= 1
            raise ConcurrencyConflictError(balance.item_id, balance.warehouse_id)
        current = self.balances.get(balance.key)
        if (current.version if current else 0) != expected_version:
            raise ConcurrencyConflictError(balance.item_id, balance.warehouse_id)
        self.balances[balance.key] = balance

    async def append_movement(self, record, created_by):
        saved = record.model_copy(
            update={
                "id": len(self.store.movements) + len(self.movements) + 1,
                "created_by": created_by,
            }
        )
        self.movements.append(saved)
        return saved


class FakeLedgerStore:
    def __init__(self):
        self.items = {
            "bolt": Item(id="bolt", item_code="BOLT", description="Bolt"),
            "nut": Item(id="nut", item_code="NUT", description="Nut"),
        }
        self.warehouses = {
            "main": Warehouse(id="main", name="Main", is_main=True),
            "site": Warehouse(id="site", name="Site"),
        }
        self.balances: dict[tuple[str, str], Balance] = {}
        self.movements: list[MovementRecord] = []
        self.conflicts_remaining = 0
        self.sessions_opened = 0

    @asynccontextmanager
    async def session(self):
        self.sessions_opened += 1
        session = FakeSession(self)
        yield session
        self.balances = session.balances
        self.movements.extend(session.movements)


def receipt(item="bolt", warehouse="main", qty="100", cost="10") -> MovementRequest:
    return MovementRequest(
        item_id=item,
        warehouse_id=warehouse,
        kind=MovementKind.ITEM_ENTRY,
        quantity_delta=D(qty),
        unit_cost=D(cost),
    )


def withdrawal(item="bolt", warehouse="main", qty="10") -> MovementRequest:
    return MovementRequest(
        item_id=item,
        warehouse_id=warehouse,
        kind=MovementKind.WITHDRAWAL,
        quantity_delta=-D(qty),
    )


@pytest.fixture
def store() -> FakeLedgerStore:
    return FakeLedgerStore()


@pytest.fixture
def coordinator(store) -> MovementCoordinator:
    return MovementCoordinator(store, max_retries=3, retry_delay=0)


class TestApplyMovements:
    async def test_single_receipt(self, coordinator, store):
        records = await coordinator.apply_movements([receipt()], "alice")

        assert len(records) == 1
        assert records[0].created_by == "alice"
        assert records[0].sequence == 1
        balance = store.balances[("bolt", "main")]
        assert balance.quantity == D("100")
        assert balance.total_value == D("1000")
        assert len(store.movements) == 1

    async def test_lines_for_same_pair_see_earlier_lines(self, coordinator, store):
        records = await coordinator.apply_movements(
            [receipt(qty="10"), withdrawal(qty="5")], "alice"
        )

        assert [r.sequence for r in records] == [1, 2]
        balance = store.balances[("bolt", "main")]
        assert balance.quantity == D("5")
        assert balance.version == 2

    async def test_failed_line_rolls_back_whole_batch(self, coordinator, store):
        await coordinator.apply_movements([receipt(qty="10")], "alice")

        with pytest.raises(InsufficientStockError) as exc_info:
            await coordinator.apply_movements(
                [receipt(item="nut", qty="5"), withdrawal(qty="50")], "alice"
            )

        assert exc_info.value.line == 1
        assert ("nut", "main") not in store.balances
        assert store.balances[("bolt", "main")].quantity == D("10")
        assert len(store.movements) == 1

    async def test_unknown_item(self, coordinator, store):
        with pytest.raises(UnknownItemOrWarehouseError) as exc_info:
            await coordinator.apply_movements([receipt(item="ghost")], "alice")
        assert exc_info.value.line == 0
        assert store.movements == []

    async def test_unknown_warehouse(self, coordinator):
        with pytest.raises(UnknownItemOrWarehouseError) as exc_info:
            await coordinator.apply_movements([receipt(warehouse="nowhere")], "alice")
        assert exc_info.value.details["entity"] == "warehouse"

    async def test_empty_batch_rejected(self, coordinator):
        with pytest.raises(InvalidMovementRequestError):
            await coordinator.apply_movements([], "alice")

    async def test_acting_user_required(self, coordinator):
        with pytest.raises(InvalidMovementRequestError):
            await coordinator.apply_movements([receipt()], "  ")


class TestOnApplied:
    async def test_callback_receives_records(self, coordinator):
        seen = []

        async def on_applied(session, records):
            seen.extend(records)

        records = await coordinator.apply_movements([receipt()], "alice", on_applied)
        assert seen == records

    async def test_callback_failure_rolls_back(self, coordinator, store):
        async def on_applied(session, records):
            raise InsufficientStockError("bolt", "main", D("1"), D("0"))

        with pytest.raises(InsufficientStockError):
            await coordinator.apply_movements([receipt()], "alice", on_applied)
        assert store.balances == {}
        assert store.movements == []


class TestCostFromLine:
    async def test_inbound_priced_from_outbound_line(self, coordinator, store):
        await coordinator.apply_movements(
            [receipt(qty="100", cost="10"), receipt(qty="50", cost="16")], "alice"
        )
        transfer_in = MovementRequest(
            item_id="bolt",
            warehouse_id="site",
            kind=MovementKind.TRANSFER_IN,
            quantity_delta=D("30"),
            cost_from_line=0,
        )
        transfer_out = withdrawal(qty="30").model_copy(
            update={"kind": MovementKind.TRANSFER_OUT}
        )

        records = await coordinator.apply_movements(
            [transfer_out, transfer_in], "alice"
        )

        assert records[1].unit_cost == D("12")
        assert store.balances[("bolt", "site")].total_value == D("360")
        assert store.balances[("bolt", "main")].quantity == D("120")

    async def test_reference_to_later_line_rejected(self, coordinator):
        transfer_in = MovementRequest(
            item_id="bolt",
            warehouse_id="site",
            kind=MovementKind.TRANSFER_IN,
            quantity_delta=D("1"),
            cost_from_line=1,
        )
        with pytest.raises(InvalidMovementRequestError):
            await coordinator.apply_movements([transfer_in, receipt()], "alice")

    async def test_reference_to_inbound_line_rejected(self, coordinator):
        transfer_in = MovementRequest(
            item_id="bolt",
            warehouse_id="site",
            kind=MovementKind.TRANSFER_IN,
            quantity_delta=D("1"),
            cost_from_line=0,
        )
        with pytest.raises(InvalidMovementRequestError):
            await coordinator.apply_movements([receipt(), transfer_in], "alice")


class TestRetries:
    async def test_conflicts_are_retried(self, coordinator, store):
        store.conflicts_remaining = 2

        records = await coordinator.apply_movements([receipt()], "alice")

        assert len(records) == 1
        assert store.sessions_opened == 3
        assert store.balances[("bolt", "main")].quantity == D("100")

    async def test_conflict_surfaces_after_retry_limit(self, store):
        coordinator = MovementCoordinator(store, max_retries=2, retry_delay=0)
        store.conflicts_remaining = 10

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            await coordinator.apply_movements([receipt()], "alice")

        assert exc_info.value.details["attempts"] == 3
        assert store.sessions_opened == 3
        assert store.movements == []

    async def test_domain_errors_are_not_retried(self, coordinator, store):
        with pytest.raises(InsufficientStockError):
            await coordinator.apply_movements([withdrawal()], "alice")
        assert store.sessions_opened == 1
