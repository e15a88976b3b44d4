"""
Abstract interface for catalog storage.

Defines the contract for item, warehouse and supplier CRUD. Deletion is
refused while inventory or ledger history references the entity.
"""

from abc import ABC, abstractmethod

from src.core.entities.catalog import Item, Supplier, Warehouse


class ICatalogStore(ABC):
    """Interface for items, warehouses and suppliers."""

    # Items

    @abstractmethod
    async def create_item(self, item: Item) -> Item:
        """Create a new item. Raises DuplicateEntityError on a taken item code."""

    @abstractmethod
    async def get_item(self, item_id: str) -> Item | None:
        """Get item by ID."""

    @abstractmethod
    async def get_item_by_code(self, item_code: str) -> Item | None:
        """Get item by its unique code."""

    @abstractmethod
    async def update_item(self, item: Item) -> Item:
        """
        Update an existing item.

        Raises ItemNotFoundError for an unknown id and ValidationError when
        the code changes on an item that already has movements.
        """

    @abstractmethod
    async def delete_item(self, item_id: str) -> bool:
        """Delete an item. Raises DeletionBlockedError if it has stock or history."""

    @abstractmethod
    async def list_items(
        self, search: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[Item]:
        """List items, optionally filtered by code or description."""

    # Warehouses

    @abstractmethod
    async def create_warehouse(self, warehouse: Warehouse) -> Warehouse:
        """Create a warehouse. Flagging it main clears the flag elsewhere."""

    @abstractmethod
    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        """Get warehouse by ID."""

    @abstractmethod
    async def get_main_warehouse(self) -> Warehouse | None:
        """Get the warehouse flagged as main, if any."""

    @abstractmethod
    async def update_warehouse(self, warehouse: Warehouse) -> Warehouse:
        """Update an existing warehouse."""

    @abstractmethod
    async def delete_warehouse(self, warehouse_id: str) -> bool:
        """Delete a warehouse. Raises DeletionBlockedError if it holds stock or history."""

    @abstractmethod
    async def list_warehouses(self) -> list[Warehouse]:
        """List all warehouses, main first."""

    # Suppliers

    @abstractmethod
    async def create_supplier(self, supplier: Supplier) -> Supplier:
        """Create a supplier."""

    @abstractmethod
    async def get_supplier(self, supplier_id: str) -> Supplier | None:
        """Get supplier by ID."""

    @abstractmethod
    async def list_suppliers(self, limit: int = 100, offset: int = 0) -> list[Supplier]:
        """List suppliers by name."""
