"""
Abstract interface for the inventory ledger.

The ledger is the append-only movement history plus the current-balance
cache derived from it. All writes go through an `ILedgerSession`, a unit
of work bound to a single exclusive write transaction: everything written
in the session commits together or not at all.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from decimal import Decimal

from src.core.entities.catalog import Item, Warehouse
from src.core.entities.inventory import Balance, MovementKind, MovementRecord


class ILedgerSession(ABC):
    """Reads and writes inside one write transaction."""

    @abstractmethod
    async def get_item(self, item_id: str) -> Item | None:
        """Get item by ID inside the transaction."""

    @abstractmethod
    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        """Get warehouse by ID inside the transaction."""

    @abstractmethod
    async def get_balance(self, item_id: str, warehouse_id: str) -> Balance | None:
        """Get the current balance, or None if the pair never had a movement."""

    @abstractmethod
    async def save_balance(self, balance: Balance, expected_version: int) -> None:
        """
        Persist a balance with compare-and-swap on its version.

        `expected_version` is the version read before the change; 0 means the
        row must not exist yet. Raises ConcurrencyConflictError when the
        stored row no longer matches.
        """

    @abstractmethod
    async def append_movement(
        self, record: MovementRecord, created_by: str
    ) -> MovementRecord:
        """Append a ledger row and return it with its assigned ID."""


class ILedgerStore(ABC):
    """Interface for ledger reads and the write session factory."""

    @abstractmethod
    def session(self) -> AbstractAsyncContextManager[ILedgerSession]:
        """Open an exclusive write session; commits on clean exit."""

    @abstractmethod
    async def get_balance(self, item_id: str, warehouse_id: str) -> Balance | None:
        """Get the committed balance of one pair."""

    @abstractmethod
    async def list_balances(
        self,
        warehouse_id: str | None = None,
        item_id: str | None = None,
        include_zero: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Balance]:
        """List balances, optionally filtered by warehouse or item.

        `include_zero=False` leaves out pairs whose quantity is zero.
        """

    @abstractmethod
    async def list_low_stock(
        self, warehouse_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[Balance]:
        """List balances at or below their item's reorder level."""

    @abstractmethod
    async def list_movements(
        self,
        item_id: str | None = None,
        warehouse_id: str | None = None,
        kind: MovementKind | None = None,
        reference_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[MovementRecord]:
        """List ledger rows, newest first."""

    @abstractmethod
    async def get_pair_history(
        self, item_id: str, warehouse_id: str
    ) -> list[MovementRecord]:
        """All ledger rows of one pair in sequence order."""

    @abstractmethod
    async def list_movements_between(
        self,
        start: datetime,
        end: datetime,
        item_id: str | None = None,
        warehouse_id: str | None = None,
    ) -> list[MovementRecord]:
        """Ledger rows with start <= created_at < end, oldest first."""

    @abstractmethod
    async def list_pairs(self) -> list[tuple[str, str]]:
        """Every item/warehouse pair that has a balance or a ledger row."""

    @abstractmethod
    async def get_reorder_levels(self) -> dict[str, Decimal]:
        """Reorder level keyed by item ID for items that define one."""
