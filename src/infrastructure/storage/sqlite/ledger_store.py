"""
SQLite implementation of the inventory ledger.

Write sessions run inside BEGIN IMMEDIATE, so the connection holds the
database write lock for the whole batch. Balance rows are still written
with a version compare-and-swap, and ledger rows are unique per
(item, warehouse, sequence); either check failing raises
ConcurrencyConflictError so the coordinator can retry.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal

import aiosqlite

from src.config import get_logger
from src.core.entities.catalog import CostingMethod, Item, Warehouse
from src.core.entities.inventory import Balance, MovementKind, MovementRecord
from src.core.exceptions import ConcurrencyConflictError, PersistenceError
from src.core.interfaces.ledger_store import ILedgerSession, ILedgerStore
from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from src.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_exclusive_transaction,
    is_lock_error,
)
from src.infrastructure.storage.sqlite.rows import (
    dec,
    is_unique_violation,
    to_dec,
    to_ts_or_now,
    ts,
)

logger = get_logger(__name__)


def row_to_balance(row: aiosqlite.Row) -> Balance:
    """Convert a current_inventory row to a Balance."""
    return Balance(
        item_id=row["item_id"],
        warehouse_id=row["warehouse_id"],
        quantity=to_dec(row["quantity"]),
        total_value=to_dec(row["total_value"]),
        avg_unit_cost=to_dec(row["avg_unit_cost"]),
        version=row["version"],
        updated_at=to_ts_or_now(row["updated_at"]),
    )


def row_to_movement(row: aiosqlite.Row) -> MovementRecord:
    """Convert an inventory_movements row to a MovementRecord."""
    return MovementRecord(
        id=row["id"],
        item_id=row["item_id"],
        warehouse_id=row["warehouse_id"],
        sequence=row["sequence"],
        kind=MovementKind(row["kind"]),
        quantity=to_dec(row["quantity"]),
        unit_cost=to_dec(row["unit_cost"]),
        total_value=to_dec(row["total_value"]),
        reference_id=row["reference_id"],
        notes=row["notes"],
        cost_method=CostingMethod(row["cost_method"]),
        balance_quantity=to_dec(row["balance_quantity"]),
        balance_value=to_dec(row["balance_value"]),
        created_by=row["created_by"],
        created_at=to_ts_or_now(row["created_at"]),
    )


class SQLiteLedgerSession(ILedgerSession):
    """Ledger session bound to one connection inside an exclusive transaction."""

    def __init__(self, conn: aiosqlite.Connection):
        self.conn = conn

    async def get_item(self, item_id: str) -> Item | None:
        cursor = await self.conn.execute("SELECT * FROM items WHERE id = ?", (item_id,))
        row = await cursor.fetchone()
        return SQLiteCatalogStore._row_to_item(row) if row else None

    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        cursor = await self.conn.execute(
            "SELECT * FROM warehouses WHERE id = ?", (warehouse_id,)
        )
        row = await cursor.fetchone()
        return SQLiteCatalogStore._row_to_warehouse(row) if row else None

    async def get_balance(self, item_id: str, warehouse_id: str) -> Balance | None:
        cursor = await self.conn.execute(
            "SELECT * FROM current_inventory WHERE item_id = ? AND warehouse_id = ?",
            (item_id, warehouse_id),
        )
        row = await cursor.fetchone()
        return row_to_balance(row) if row else None

    async def save_balance(self, balance: Balance, expected_version: int) -> None:
        """Insert the first balance of a pair, or compare-and-swap an existing one."""
        values = (
            dec(balance.quantity),
            dec(balance.total_value),
            dec(balance.avg_unit_cost),
            balance.version,
            ts(balance.updated_at),
        )
        if expected_version == 0:
            try:
                await self.conn.execute(
                    """
                    INSERT INTO current_inventory (
                        quantity, total_value, avg_unit_cost, version, updated_at,
                        item_id, warehouse_id
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (*values, balance.item_id, balance.warehouse_id),
                )
            except aiosqlite.IntegrityError as e:
                if is_unique_violation(e):
                    raise ConcurrencyConflictError(
                        balance.item_id, balance.warehouse_id, "balance row already exists"
                    ) from e
                raise
            return

        cursor = await self.conn.execute(
            """
            UPDATE current_inventory SET
                quantity = ?, total_value = ?, avg_unit_cost = ?,
                version = ?, updated_at = ?
            WHERE item_id = ? AND warehouse_id = ? AND version = ?
            """,
            (*values, balance.item_id, balance.warehouse_id, expected_version),
        )
        if cursor.rowcount != 1:
            raise ConcurrencyConflictError(balance.item_id, balance.warehouse_id)

    async def append_movement(
        self, record: MovementRecord, created_by: str
    ) -> MovementRecord:
        """Append a ledger row; a taken sequence means another writer got there first."""
        try:
            cursor = await self.conn.execute(
                """
                INSERT INTO inventory_movements (
                    item_id, warehouse_id, sequence, kind, quantity, unit_cost,
                    total_value, reference_id, notes, cost_method,
                    balance_quantity, balance_value, created_by, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.item_id,
                    record.warehouse_id,
                    record.sequence,
                    record.kind.value,
                    dec(record.quantity),
                    dec(record.unit_cost),
                    dec(record.total_value),
                    record.reference_id,
                    record.notes,
                    record.cost_method.value,
                    dec(record.balance_quantity),
                    dec(record.balance_value),
                    created_by,
                    ts(record.created_at),
                ),
            )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise ConcurrencyConflictError(
                    record.item_id, record.warehouse_id, "ledger sequence already taken"
                ) from e
            raise
        return record.model_copy(update={"id": cursor.lastrowid, "created_by": created_by})


class SQLiteLedgerStore(ILedgerStore):
    """SQLite implementation of ledger reads and write sessions."""

    @asynccontextmanager
    async def session(self) -> AsyncIterator[SQLiteLedgerSession]:
        """
        Open an exclusive write session.

        Lock timeouts surface as ConcurrencyConflictError; any other SQLite
        error surfaces as PersistenceError. Domain errors pass through.
        """
        try:
            async with get_exclusive_transaction() as conn:
                yield SQLiteLedgerSession(conn)
        except aiosqlite.Error as e:
            if is_lock_error(e):
                raise ConcurrencyConflictError(reason=str(e)) from e
            logger.error("ledger_session_failed", error=str(e))
            raise PersistenceError("ledger write", str(e)) from e

    async def get_balance(self, item_id: str, warehouse_id: str) -> Balance | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM current_inventory WHERE item_id = ? AND warehouse_id = ?",
                (item_id, warehouse_id),
            )
            row = await cursor.fetchone()
            return row_to_balance(row) if row else None

    async def list_balances(
        self,
        warehouse_id: str | None = None,
        item_id: str | None = None,
        include_zero: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Balance]:
        """List balances ordered by warehouse then item code."""
        clauses, params = self._filters(warehouse_id=warehouse_id, item_id=item_id)
        if not include_zero:
            nonzero = "CAST(ci.quantity AS REAL) <> 0"
            clauses = f"{clauses} AND {nonzero}" if clauses else f"WHERE {nonzero}"
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT ci.* FROM current_inventory ci
                JOIN items i ON i.id = ci.item_id
                {clauses}
                ORDER BY ci.warehouse_id, i.item_code
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_balance(row) for row in rows]

    async def list_low_stock(
        self, warehouse_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[Balance]:
        """List balances at or below their item's reorder level."""
        clauses, params = self._filters(warehouse_id=warehouse_id)
        condition = "i.reorder_level IS NOT NULL"
        where = f"{clauses} AND {condition}" if clauses else f"WHERE {condition}"
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT ci.*, i.reorder_level FROM current_inventory ci
                JOIN items i ON i.id = ci.item_id
                {where}
                ORDER BY ci.warehouse_id, i.item_code
                """,
                params,
            )
            rows = await cursor.fetchall()
        # Decimal comparison in Python; TEXT columns do not compare numerically
        low = [
            row_to_balance(row)
            for row in rows
            if Decimal(row["quantity"]) <= Decimal(row["reorder_level"])
        ]
        return low[offset : offset + limit]

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
        clauses, params = self._filters(
            prefix="",
            item_id=item_id,
            warehouse_id=warehouse_id,
            kind=kind.value if kind else None,
            reference_id=reference_id,
        )
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM inventory_movements
                {clauses}
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_movement(row) for row in rows]

    async def get_pair_history(
        self, item_id: str, warehouse_id: str
    ) -> list[MovementRecord]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM inventory_movements
                WHERE item_id = ? AND warehouse_id = ?
                ORDER BY sequence
                """,
                (item_id, warehouse_id),
            )
            rows = await cursor.fetchall()
            return [row_to_movement(row) for row in rows]

    async def list_movements_between(
        self,
        start: datetime,
        end: datetime,
        item_id: str | None = None,
        warehouse_id: str | None = None,
    ) -> list[MovementRecord]:
        clauses, params = self._filters(
            prefix="", item_id=item_id, warehouse_id=warehouse_id
        )
        period = "created_at >= ? AND created_at < ?"
        where = f"{clauses} AND {period}" if clauses else f"WHERE {period}"
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM inventory_movements
                {where}
                ORDER BY created_at, id
                """,
                (*params, ts(start), ts(end)),
            )
            rows = await cursor.fetchall()
            return [row_to_movement(row) for row in rows]

    async def list_pairs(self) -> list[tuple[str, str]]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT item_id, warehouse_id FROM current_inventory
                UNION
                SELECT DISTINCT item_id, warehouse_id FROM inventory_movements
                ORDER BY item_id, warehouse_id
                """
            )
            rows = await cursor.fetchall()
            return [(row[0], row[1]) for row in rows]

    async def get_reorder_levels(self) -> dict[str, Decimal]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT id, reorder_level FROM items WHERE reorder_level IS NOT NULL"
            )
            rows = await cursor.fetchall()
            return {row["id"]: Decimal(row["reorder_level"]) for row in rows}

    @staticmethod
    def _filters(prefix: str = "ci.", **filters: str | None) -> tuple[str, list]:
        """Build a WHERE clause from the non-None keyword filters."""
        clauses = []
        params = []
        for column, value in filters.items():
            if value is not None:
                clauses.append(f"{prefix}{column} = ?")
                params.append(value)
        return ("WHERE " + " AND ".join(clauses) if clauses else ""), params
