"""SQLite implementation of catalog storage."""

import aiosqlite

from src.config import get_logger
from src.core.entities.catalog import CostingMethod, Item, Supplier, Warehouse
from src.core.entities.common import utcnow
from src.core.exceptions import (
    DeletionBlockedError,
    DuplicateEntityError,
    ItemNotFoundError,
    ValidationError,
)
from src.core.interfaces.catalog_store import ICatalogStore
from src.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_exclusive_transaction,
    get_transaction,
)
from src.infrastructure.storage.sqlite.rows import (
    dec,
    is_foreign_key_violation,
    is_unique_violation,
    to_dec,
    to_ts_or_now,
    ts,
)

logger = get_logger(__name__)


class SQLiteCatalogStore(ICatalogStore):
    """SQLite implementation of item, warehouse and supplier storage."""

    # ---------------------------------------------------------------- items

    async def create_item(self, item: Item) -> Item:
        """Create a new item."""
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO items (
                        id, item_code, description, unit_of_measure, standard_cost,
                        costing_method, reorder_level, min_level, max_level,
                        supplier_id, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.id,
                        item.item_code,
                        item.description,
                        item.unit_of_measure,
                        dec(item.standard_cost),
                        item.costing_method.value,
                        dec(item.reorder_level),
                        dec(item.min_level),
                        dec(item.max_level),
                        item.supplier_id,
                        ts(item.created_at),
                        ts(item.updated_at),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError("item", "item_code", item.item_code) from e
            raise
        logger.info("item_created", item_id=item.id, item_code=item.item_code)
        return item

    async def get_item(self, item_id: str) -> Item | None:
        """Get item by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM items WHERE id = ?", (item_id,))
            row = await cursor.fetchone()
            return self._row_to_item(row) if row else None

    async def get_item_by_code(self, item_code: str) -> Item | None:
        """Get item by its unique code."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM items WHERE item_code = ?", (item_code.strip(),)
            )
            row = await cursor.fetchone()
            return self._row_to_item(row) if row else None

    async def update_item(self, item: Item) -> Item:
        """
        Update an existing item.

        The code check and the write share one locked transaction, so a
        movement committed meanwhile cannot slip past the frozen-code rule.
        """
        item.updated_at = utcnow()
        try:
            async with get_exclusive_transaction() as conn:
                cursor = await conn.execute(
                    "SELECT item_code FROM items WHERE id = ?", (item.id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    raise ItemNotFoundError(item.id)
                if row["item_code"] != item.item_code and await self._has_movements(
                    conn, item.id
                ):
                    raise ValidationError(
                        "item_code",
                        "item code cannot change once movements exist",
                        item.item_code,
                    )
                await conn.execute(
                    """
                    UPDATE items SET
                        item_code = ?, description = ?, unit_of_measure = ?,
                        standard_cost = ?, costing_method = ?, reorder_level = ?,
                        min_level = ?, max_level = ?, supplier_id = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        item.item_code,
                        item.description,
                        item.unit_of_measure,
                        dec(item.standard_cost),
                        item.costing_method.value,
                        dec(item.reorder_level),
                        dec(item.min_level),
                        dec(item.max_level),
                        item.supplier_id,
                        ts(item.updated_at),
                        item.id,
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError("item", "item_code", item.item_code) from e
            raise
        logger.info("item_updated", item_id=item.id)
        return item

    async def delete_item(self, item_id: str) -> bool:
        """Delete an item without stock or history."""
        try:
            async with get_transaction() as conn:
                if await self._has_ledger_rows(conn, "item_id", item_id):
                    raise DeletionBlockedError(
                        "item", item_id, "item has inventory or movement history"
                    )
                cursor = await conn.execute("DELETE FROM items WHERE id = ?", (item_id,))
                deleted = cursor.rowcount > 0
        except aiosqlite.IntegrityError as e:
            if is_foreign_key_violation(e):
                raise DeletionBlockedError(
                    "item", item_id, "item is referenced by documents"
                ) from e
            raise
        if deleted:
            logger.info("item_deleted", item_id=item_id)
        return deleted

    async def list_items(
        self, search: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[Item]:
        """List items ordered by code."""
        async with get_connection() as conn:
            if search:
                pattern = f"%{search.strip()}%"
                cursor = await conn.execute(
                    """
                    SELECT * FROM items
                    WHERE item_code LIKE ? OR description LIKE ?
                    ORDER BY item_code
                    LIMIT ? OFFSET ?
                    """,
                    (pattern, pattern, limit, offset),
                )
            else:
                cursor = await conn.execute(
                    "SELECT * FROM items ORDER BY item_code LIMIT ? OFFSET ?",
                    (limit, offset),
                )
            rows = await cursor.fetchall()
            return [self._row_to_item(row) for row in rows]

    # ----------------------------------------------------------- warehouses

    async def create_warehouse(self, warehouse: Warehouse) -> Warehouse:
        """Create a warehouse, moving the main flag if it claims it."""
        try:
            async with get_transaction() as conn:
                if warehouse.is_main:
                    await conn.execute(
                        "UPDATE warehouses SET is_main = 0 WHERE is_main = 1"
                    )
                await conn.execute(
                    """
                    INSERT INTO warehouses (
                        id, name, location, description, is_main,
                        default_costing_method, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        warehouse.id,
                        warehouse.name,
                        warehouse.location,
                        warehouse.description,
                        int(warehouse.is_main),
                        warehouse.default_costing_method.value,
                        ts(warehouse.created_at),
                        ts(warehouse.updated_at),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError("warehouse", "name", warehouse.name) from e
            raise
        logger.info(
            "warehouse_created", warehouse_id=warehouse.id, is_main=warehouse.is_main
        )
        return warehouse

    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        """Get warehouse by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM warehouses WHERE id = ?", (warehouse_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_warehouse(row) if row else None

    async def get_main_warehouse(self) -> Warehouse | None:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM warehouses WHERE is_main = 1")
            row = await cursor.fetchone()
            return self._row_to_warehouse(row) if row else None

    async def update_warehouse(self, warehouse: Warehouse) -> Warehouse:
        """Update a warehouse, moving the main flag if it claims it."""
        warehouse.updated_at = utcnow()
        try:
            async with get_transaction() as conn:
                if warehouse.is_main:
                    await conn.execute(
                        "UPDATE warehouses SET is_main = 0 WHERE is_main = 1 AND id != ?",
                        (warehouse.id,),
                    )
                await conn.execute(
                    """
                    UPDATE warehouses SET
                        name = ?, location = ?, description = ?, is_main = ?,
                        default_costing_method = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        warehouse.name,
                        warehouse.location,
                        warehouse.description,
                        int(warehouse.is_main),
                        warehouse.default_costing_method.value,
                        ts(warehouse.updated_at),
                        warehouse.id,
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError("warehouse", "name", warehouse.name) from e
            raise
        logger.info("warehouse_updated", warehouse_id=warehouse.id)
        return warehouse

    async def delete_warehouse(self, warehouse_id: str) -> bool:
        """Delete a warehouse without stock or history."""
        try:
            async with get_transaction() as conn:
                if await self._has_ledger_rows(conn, "warehouse_id", warehouse_id):
                    raise DeletionBlockedError(
                        "warehouse",
                        warehouse_id,
                        "warehouse has inventory or movement history",
                    )
                cursor = await conn.execute(
                    "DELETE FROM warehouses WHERE id = ?", (warehouse_id,)
                )
                deleted = cursor.rowcount > 0
        except aiosqlite.IntegrityError as e:
            if is_foreign_key_violation(e):
                raise DeletionBlockedError(
                    "warehouse", warehouse_id, "warehouse is referenced by documents"
                ) from e
            raise
        if deleted:
            logger.info("warehouse_deleted", warehouse_id=warehouse_id)
        return deleted

    async def list_warehouses(self) -> list[Warehouse]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM warehouses ORDER BY is_main DESC, name"
            )
            rows = await cursor.fetchall()
            return [self._row_to_warehouse(row) for row in rows]

    # ------------------------------------------------------------ suppliers

    async def create_supplier(self, supplier: Supplier) -> Supplier:
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO suppliers (id, name, contact_email, phone, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        supplier.id,
                        supplier.name,
                        supplier.contact_email,
                        supplier.phone,
                        ts(supplier.created_at),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError("supplier", "name", supplier.name) from e
            raise
        logger.info("supplier_created", supplier_id=supplier.id)
        return supplier

    async def get_supplier(self, supplier_id: str) -> Supplier | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM suppliers WHERE id = ?", (supplier_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_supplier(row) if row else None

    async def list_suppliers(self, limit: int = 100, offset: int = 0) -> list[Supplier]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM suppliers ORDER BY name LIMIT ? OFFSET ?",
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_supplier(row) for row in rows]

    # -------------------------------------------------------------- helpers

    @staticmethod
    async def _has_movements(conn: aiosqlite.Connection, item_id: str) -> bool:
        cursor = await conn.execute(
            "SELECT 1 FROM inventory_movements WHERE item_id = ? LIMIT 1", (item_id,)
        )
        return await cursor.fetchone() is not None

    @staticmethod
    async def _has_ledger_rows(
        conn: aiosqlite.Connection, column: str, value: str
    ) -> bool:
        for table in ("current_inventory", "inventory_movements"):
            cursor = await conn.execute(
                f"SELECT 1 FROM {table} WHERE {column} = ? LIMIT 1", (value,)
            )
            if await cursor.fetchone() is not None:
                return True
        return False

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> Item:
        """Convert a database row to an Item entity."""
        return Item(
            id=row["id"],
            item_code=row["item_code"],
            description=row["description"],
            unit_of_measure=row["unit_of_measure"],
            standard_cost=to_dec(row["standard_cost"]),
            costing_method=CostingMethod(row["costing_method"]),
            reorder_level=to_dec(row["reorder_level"]),
            min_level=to_dec(row["min_level"]),
            max_level=to_dec(row["max_level"]),
            supplier_id=row["supplier_id"],
            created_at=to_ts_or_now(row["created_at"]),
            updated_at=to_ts_or_now(row["updated_at"]),
        )

    @staticmethod
    def _row_to_warehouse(row: aiosqlite.Row) -> Warehouse:
        """Convert a database row to a Warehouse entity."""
        return Warehouse(
            id=row["id"],
            name=row["name"],
            location=row["location"],
            description=row["description"],
            is_main=bool(row["is_main"]),
            default_costing_method=CostingMethod(row["default_costing_method"]),
            created_at=to_ts_or_now(row["created_at"]),
            updated_at=to_ts_or_now(row["updated_at"]),
        )

    @staticmethod
    def _row_to_supplier(row: aiosqlite.Row) -> Supplier:
        return Supplier(
            id=row["id"],
            name=row["name"],
            contact_email=row["contact_email"],
            phone=row["phone"],
            created_at=to_ts_or_now(row["created_at"]),
        )
