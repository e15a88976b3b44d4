"""
SQLite implementation of inventory document storage.

Every write accepts an optional ledger session; with one, the statements
run on the session's connection and commit with the movements.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from src.config import get_logger
from src.core.entities.common import utcnow
from src.core.entities.documents import (
    Adjustment,
    AdjustmentLine,
    AdjustmentType,
    ItemEntry,
    Purchase,
    PurchaseLine,
    PurchaseStatus,
    Transfer,
    TransferLine,
    TransferStatus,
    Withdrawal,
    WithdrawalLine,
    WithdrawalStatus,
)
from src.core.exceptions import DocumentStateError, DuplicateEntityError
from src.core.interfaces.document_store import IDocumentStore
from src.core.interfaces.ledger_store import ILedgerSession
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from src.infrastructure.storage.sqlite.rows import (
    dec,
    is_unique_violation,
    to_dec,
    to_ts,
    to_ts_or_now,
    ts,
)

logger = get_logger(__name__)


@asynccontextmanager
async def _writer(session: ILedgerSession | None) -> AsyncIterator[aiosqlite.Connection]:
    """Connection for a write: the session's, or a fresh transaction."""
    if session is not None:
        yield session.conn
        return
    async with get_transaction() as conn:
        yield conn


def _guarded(sql: str, params: list, expected_status: str | None) -> tuple[str, list]:
    """Append a status guard to an UPDATE ... WHERE id = ? statement."""
    if expected_status is None:
        return sql, params
    return f"{sql.rstrip()} AND status = ?", [*params, expected_status]


def _check_transition(
    cursor: aiosqlite.Cursor,
    document_type: str,
    document_id: str,
    expected_status: str | None,
) -> None:
    if expected_status is not None and cursor.rowcount != 1:
        raise DocumentStateError(
            document_type, document_id, f"other than {expected_status}", "update"
        )


class SQLiteDocumentStore(IDocumentStore):
    """SQLite implementation of inventory document storage."""

    # --------------------------------------------------------- item entries

    async def create_item_entry(
        self, entry: ItemEntry, session: ILedgerSession | None = None
    ) -> ItemEntry:
        async with _writer(session) as conn:
            await conn.execute(
                """
                INSERT INTO item_entries (
                    id, item_id, warehouse_id, supplier_id, quantity, landed_cost,
                    total_value, purchase_reference, notes, created_by, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.item_id,
                    entry.warehouse_id,
                    entry.supplier_id,
                    dec(entry.quantity),
                    dec(entry.landed_cost),
                    dec(entry.total_value),
                    entry.purchase_reference,
                    entry.notes,
                    entry.created_by,
                    ts(entry.created_at),
                ),
            )
        logger.info("item_entry_saved", entry_id=entry.id)
        return entry

    async def get_item_entry(self, entry_id: str) -> ItemEntry | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM item_entries WHERE id = ?", (entry_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_item_entry(row) if row else None

    async def list_item_entries(
        self,
        item_id: str | None = None,
        warehouse_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ItemEntry]:
        clauses = []
        params: list = []
        if item_id:
            clauses.append("item_id = ?")
            params.append(item_id)
        if warehouse_id:
            clauses.append("warehouse_id = ?")
            params.append(warehouse_id)
        where = "WHERE " + " AND ".join(clauses) if clauses else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM item_entries {where}
                ORDER BY created_at DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_item_entry(row) for row in rows]

    # ------------------------------------------------------------ purchases

    async def create_purchase(
        self, purchase: Purchase, session: ILedgerSession | None = None
    ) -> Purchase:
        """Persist a purchase header and its lines."""
        try:
            async with _writer(session) as conn:
                await conn.execute(
                    """
                    INSERT INTO purchases (
                        id, purchase_number, supplier_id, status, total_cost, notes,
                        warehouse_id, created_by, approved_by, approved_at,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        purchase.id,
                        purchase.purchase_number,
                        purchase.supplier_id,
                        purchase.status.value,
                        dec(purchase.total_cost),
                        purchase.notes,
                        purchase.warehouse_id,
                        purchase.created_by,
                        purchase.approved_by,
                        ts(purchase.approved_at),
                        ts(purchase.created_at),
                        ts(purchase.updated_at),
                    ),
                )
                await conn.executemany(
                    """
                    INSERT INTO purchase_lines (
                        id, purchase_id, line_no, item_id, quantity, unit_cost, total_cost
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            line.id,
                            purchase.id,
                            line_no,
                            line.item_id,
                            dec(line.quantity),
                            dec(line.unit_cost),
                            dec(line.total_cost),
                        )
                        for line_no, line in enumerate(purchase.lines, start=1)
                    ],
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError(
                    "purchase", "purchase_number", purchase.purchase_number
                ) from e
            raise
        logger.info(
            "purchase_saved",
            purchase_id=purchase.id,
            purchase_number=purchase.purchase_number,
            lines=len(purchase.lines),
        )
        return purchase

    async def update_purchase(
        self,
        purchase: Purchase,
        session: ILedgerSession | None = None,
        expected_status: str | None = None,
    ) -> Purchase:
        purchase.updated_at = utcnow()
        async with _writer(session) as conn:
            sql, params = _guarded(
                """
                UPDATE purchases SET
                    status = ?, warehouse_id = ?, approved_by = ?, approved_at = ?,
                    notes = ?, updated_at = ?
                WHERE id = ?
                """,
                [
                    purchase.status.value,
                    purchase.warehouse_id,
                    purchase.approved_by,
                    ts(purchase.approved_at),
                    purchase.notes,
                    ts(purchase.updated_at),
                    purchase.id,
                ],
                expected_status,
            )
            cursor = await conn.execute(sql, params)
            _check_transition(cursor, "purchase", purchase.id, expected_status)
        logger.info(
            "purchase_updated", purchase_id=purchase.id, status=purchase.status.value
        )
        return purchase

    async def get_purchase(self, purchase_id: str) -> Purchase | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM purchases WHERE id = ?", (purchase_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            lines = await self._fetch_lines(conn, "purchase_lines", "purchase_id", purchase_id)
            return self._row_to_purchase(row, lines)

    async def list_purchases(
        self, status: PurchaseStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[Purchase]:
        async with get_connection() as conn:
            rows = await self._fetch_headers(
                conn, "purchases", status.value if status else None, limit, offset
            )
            return [
                self._row_to_purchase(
                    row,
                    await self._fetch_lines(conn, "purchase_lines", "purchase_id", row["id"]),
                )
                for row in rows
            ]

    async def delete_purchase(self, purchase_id: str) -> bool:
        return await self._delete(
            "purchases", "purchase", purchase_id, PurchaseStatus.RECEIVED.value
        )

    # ------------------------------------------------------------ transfers

    async def create_transfer(
        self, transfer: Transfer, session: ILedgerSession | None = None
    ) -> Transfer:
        """Persist a transfer header and its lines."""
        try:
            async with _writer(session) as conn:
                await conn.execute(
                    """
                    INSERT INTO transfers (
                        id, transfer_number, from_warehouse_id, to_warehouse_id, status,
                        notes, created_by, approved_by, approved_at, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        transfer.id,
                        transfer.transfer_number,
                        transfer.from_warehouse_id,
                        transfer.to_warehouse_id,
                        transfer.status.value,
                        transfer.notes,
                        transfer.created_by,
                        transfer.approved_by,
                        ts(transfer.approved_at),
                        ts(transfer.created_at),
                        ts(transfer.updated_at),
                    ),
                )
                await conn.executemany(
                    """
                    INSERT INTO transfer_lines (
                        id, transfer_id, line_no, item_id, quantity, unit_cost
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            line.id,
                            transfer.id,
                            line_no,
                            line.item_id,
                            dec(line.quantity),
                            dec(line.unit_cost),
                        )
                        for line_no, line in enumerate(transfer.lines, start=1)
                    ],
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError(
                    "transfer", "transfer_number", transfer.transfer_number
                ) from e
            raise
        logger.info(
            "transfer_saved",
            transfer_id=transfer.id,
            transfer_number=transfer.transfer_number,
            lines=len(transfer.lines),
        )
        return transfer

    async def update_transfer(
        self,
        transfer: Transfer,
        session: ILedgerSession | None = None,
        expected_status: str | None = None,
    ) -> Transfer:
        transfer.updated_at = utcnow()
        async with _writer(session) as conn:
            sql, params = _guarded(
                """
                UPDATE transfers SET
                    status = ?, approved_by = ?, approved_at = ?, notes = ?, updated_at = ?
                WHERE id = ?
                """,
                [
                    transfer.status.value,
                    transfer.approved_by,
                    ts(transfer.approved_at),
                    transfer.notes,
                    ts(transfer.updated_at),
                    transfer.id,
                ],
                expected_status,
            )
            cursor = await conn.execute(sql, params)
            _check_transition(cursor, "transfer", transfer.id, expected_status)
            await conn.executemany(
                "UPDATE transfer_lines SET unit_cost = ? WHERE id = ?",
                [(dec(line.unit_cost), line.id) for line in transfer.lines],
            )
        logger.info(
            "transfer_updated", transfer_id=transfer.id, status=transfer.status.value
        )
        return transfer

    async def get_transfer(self, transfer_id: str) -> Transfer | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM transfers WHERE id = ?", (transfer_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            lines = await self._fetch_lines(conn, "transfer_lines", "transfer_id", transfer_id)
            return self._row_to_transfer(row, lines)

    async def list_transfers(
        self, status: TransferStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[Transfer]:
        async with get_connection() as conn:
            rows = await self._fetch_headers(
                conn, "transfers", status.value if status else None, limit, offset
            )
            return [
                self._row_to_transfer(
                    row,
                    await self._fetch_lines(conn, "transfer_lines", "transfer_id", row["id"]),
                )
                for row in rows
            ]

    async def delete_transfer(self, transfer_id: str) -> bool:
        return await self._delete(
            "transfers", "transfer", transfer_id, TransferStatus.COMPLETED.value
        )

    # ---------------------------------------------------------- withdrawals

    async def create_withdrawal(
        self, withdrawal: Withdrawal, session: ILedgerSession | None = None
    ) -> Withdrawal:
        """Persist a withdrawal header and its lines."""
        try:
            async with _writer(session) as conn:
                await conn.execute(
                    """
                    INSERT INTO withdrawals (
                        id, withdrawal_number, warehouse_id, purpose, status,
                        requested_by, approved_by, approved_at, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        withdrawal.id,
                        withdrawal.withdrawal_number,
                        withdrawal.warehouse_id,
                        withdrawal.purpose,
                        withdrawal.status.value,
                        withdrawal.requested_by,
                        withdrawal.approved_by,
                        ts(withdrawal.approved_at),
                        ts(withdrawal.created_at),
                        ts(withdrawal.updated_at),
                    ),
                )
                await conn.executemany(
                    """
                    INSERT INTO withdrawal_lines (
                        id, withdrawal_id, line_no, item_id, quantity, unit_cost, total_value
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            line.id,
                            withdrawal.id,
                            line_no,
                            line.item_id,
                            dec(line.quantity),
                            dec(line.unit_cost),
                            dec(line.total_value),
                        )
                        for line_no, line in enumerate(withdrawal.lines, start=1)
                    ],
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError(
                    "withdrawal", "withdrawal_number", withdrawal.withdrawal_number
                ) from e
            raise
        logger.info(
            "withdrawal_saved",
            withdrawal_id=withdrawal.id,
            withdrawal_number=withdrawal.withdrawal_number,
            lines=len(withdrawal.lines),
        )
        return withdrawal

    async def update_withdrawal(
        self,
        withdrawal: Withdrawal,
        session: ILedgerSession | None = None,
        expected_status: str | None = None,
    ) -> Withdrawal:
        withdrawal.updated_at = utcnow()
        async with _writer(session) as conn:
            sql, params = _guarded(
                """
                UPDATE withdrawals SET
                    status = ?, approved_by = ?, approved_at = ?, updated_at = ?
                WHERE id = ?
                """,
                [
                    withdrawal.status.value,
                    withdrawal.approved_by,
                    ts(withdrawal.approved_at),
                    ts(withdrawal.updated_at),
                    withdrawal.id,
                ],
                expected_status,
            )
            cursor = await conn.execute(sql, params)
            _check_transition(cursor, "withdrawal", withdrawal.id, expected_status)
            await conn.executemany(
                "UPDATE withdrawal_lines SET unit_cost = ?, total_value = ? WHERE id = ?",
                [
                    (dec(line.unit_cost), dec(line.total_value), line.id)
                    for line in withdrawal.lines
                ],
            )
        logger.info(
            "withdrawal_updated",
            withdrawal_id=withdrawal.id,
            status=withdrawal.status.value,
        )
        return withdrawal

    async def get_withdrawal(self, withdrawal_id: str) -> Withdrawal | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM withdrawals WHERE id = ?", (withdrawal_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            lines = await self._fetch_lines(
                conn, "withdrawal_lines", "withdrawal_id", withdrawal_id
            )
            return self._row_to_withdrawal(row, lines)

    async def list_withdrawals(
        self,
        status: WithdrawalStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Withdrawal]:
        async with get_connection() as conn:
            rows = await self._fetch_headers(
                conn, "withdrawals", status.value if status else None, limit, offset
            )
            return [
                self._row_to_withdrawal(
                    row,
                    await self._fetch_lines(
                        conn, "withdrawal_lines", "withdrawal_id", row["id"]
                    ),
                )
                for row in rows
            ]

    async def delete_withdrawal(self, withdrawal_id: str) -> bool:
        return await self._delete(
            "withdrawals", "withdrawal", withdrawal_id, WithdrawalStatus.COMPLETED.value
        )

    # ---------------------------------------------------------- adjustments

    async def create_adjustment(
        self, adjustment: Adjustment, session: ILedgerSession | None = None
    ) -> Adjustment:
        """Persist an adjustment header and its lines."""
        try:
            async with _writer(session) as conn:
                await conn.execute(
                    """
                    INSERT INTO adjustments (
                        id, adjustment_number, warehouse_id, adjustment_type, reason,
                        notes, adjusted_by, adjusted_at, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        adjustment.id,
                        adjustment.adjustment_number,
                        adjustment.warehouse_id,
                        adjustment.adjustment_type.value,
                        adjustment.reason,
                        adjustment.notes,
                        adjustment.adjusted_by,
                        ts(adjustment.adjusted_at),
                        ts(adjustment.created_at),
                    ),
                )
                await conn.executemany(
                    """
                    INSERT INTO adjustment_lines (
                        id, adjustment_id, line_no, item_id, system_quantity,
                        actual_quantity, adjustment_quantity, unit_cost, total_adjustment
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            line.id,
                            adjustment.id,
                            line_no,
                            line.item_id,
                            dec(line.system_quantity),
                            dec(line.actual_quantity),
                            dec(line.adjustment_quantity),
                            dec(line.unit_cost),
                            dec(line.total_adjustment),
                        )
                        for line_no, line in enumerate(adjustment.lines, start=1)
                    ],
                )
        except aiosqlite.IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateEntityError(
                    "adjustment", "adjustment_number", adjustment.adjustment_number
                ) from e
            raise
        logger.info(
            "adjustment_saved",
            adjustment_id=adjustment.id,
            adjustment_number=adjustment.adjustment_number,
            lines=len(adjustment.lines),
        )
        return adjustment

    async def get_adjustment(self, adjustment_id: str) -> Adjustment | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM adjustments WHERE id = ?", (adjustment_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            lines = await self._fetch_lines(
                conn, "adjustment_lines", "adjustment_id", adjustment_id
            )
            return self._row_to_adjustment(row, lines)

    async def list_adjustments(
        self, warehouse_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[Adjustment]:
        async with get_connection() as conn:
            if warehouse_id:
                cursor = await conn.execute(
                    """
                    SELECT * FROM adjustments WHERE warehouse_id = ?
                    ORDER BY created_at DESC LIMIT ? OFFSET ?
                    """,
                    (warehouse_id, limit, offset),
                )
            else:
                cursor = await conn.execute(
                    "SELECT * FROM adjustments ORDER BY created_at DESC LIMIT ? OFFSET ?",
                    (limit, offset),
                )
            rows = await cursor.fetchall()
            return [
                self._row_to_adjustment(
                    row,
                    await self._fetch_lines(
                        conn, "adjustment_lines", "adjustment_id", row["id"]
                    ),
                )
                for row in rows
            ]

    # -------------------------------------------------------------- helpers

    @staticmethod
    async def _fetch_headers(
        conn: aiosqlite.Connection,
        table: str,
        status: str | None,
        limit: int,
        offset: int,
    ) -> list[aiosqlite.Row]:
        if status:
            cursor = await conn.execute(
                f"SELECT * FROM {table} WHERE status = ? "
                "ORDER BY created_at DESC LIMIT ? OFFSET ?",
                (status, limit, offset),
            )
        else:
            cursor = await conn.execute(
                f"SELECT * FROM {table} ORDER BY created_at DESC LIMIT ? OFFSET ?",
                (limit, offset),
            )
        return list(await cursor.fetchall())

    @staticmethod
    async def _fetch_lines(
        conn: aiosqlite.Connection, table: str, parent_column: str, parent_id: str
    ) -> list[aiosqlite.Row]:
        cursor = await conn.execute(
            f"SELECT * FROM {table} WHERE {parent_column} = ? ORDER BY line_no",
            (parent_id,),
        )
        return list(await cursor.fetchall())

    @staticmethod
    async def _delete(
        table: str, document_type: str, document_id: str, protected_status: str
    ) -> bool:
        """Delete a document unless it has reached its protected status."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                f"DELETE FROM {table} WHERE id = ? AND status <> ?",
                (document_id, protected_status),
            )
            deleted = cursor.rowcount > 0
            if not deleted:
                cursor = await conn.execute(
                    f"SELECT status FROM {table} WHERE id = ?", (document_id,)
                )
                row = await cursor.fetchone()
                if row is not None:
                    raise DocumentStateError(
                        document_type, document_id, row["status"], "delete"
                    )
        if deleted:
            logger.info("document_deleted", table=table, document_id=document_id)
        return deleted

    @staticmethod
    def _row_to_item_entry(row: aiosqlite.Row) -> ItemEntry:
        return ItemEntry(
            id=row["id"],
            item_id=row["item_id"],
            warehouse_id=row["warehouse_id"],
            supplier_id=row["supplier_id"],
            quantity=to_dec(row["quantity"]),
            landed_cost=to_dec(row["landed_cost"]),
            purchase_reference=row["purchase_reference"],
            notes=row["notes"],
            created_by=row["created_by"],
            created_at=to_ts_or_now(row["created_at"]),
        )

    @staticmethod
    def _row_to_purchase(row: aiosqlite.Row, lines: list[aiosqlite.Row]) -> Purchase:
        return Purchase(
            id=row["id"],
            purchase_number=row["purchase_number"],
            supplier_id=row["supplier_id"],
            status=PurchaseStatus(row["status"]),
            total_cost=to_dec(row["total_cost"]),
            notes=row["notes"],
            warehouse_id=row["warehouse_id"],
            created_by=row["created_by"],
            approved_by=row["approved_by"],
            approved_at=to_ts(row["approved_at"]),
            lines=[
                PurchaseLine(
                    id=line["id"],
                    item_id=line["item_id"],
                    quantity=to_dec(line["quantity"]),
                    unit_cost=to_dec(line["unit_cost"]),
                )
                for line in lines
            ],
            created_at=to_ts_or_now(row["created_at"]),
            updated_at=to_ts_or_now(row["updated_at"]),
        )

    @staticmethod
    def _row_to_transfer(row: aiosqlite.Row, lines: list[aiosqlite.Row]) -> Transfer:
        return Transfer(
            id=row["id"],
            transfer_number=row["transfer_number"],
            from_warehouse_id=row["from_warehouse_id"],
            to_warehouse_id=row["to_warehouse_id"],
            status=TransferStatus(row["status"]),
            notes=row["notes"],
            created_by=row["created_by"],
            approved_by=row["approved_by"],
            approved_at=to_ts(row["approved_at"]),
            lines=[
                TransferLine(
                    id=line["id"],
                    item_id=line["item_id"],
                    quantity=to_dec(line["quantity"]),
                    unit_cost=to_dec(line["unit_cost"]),
                )
                for line in lines
            ],
            created_at=to_ts_or_now(row["created_at"]),
            updated_at=to_ts_or_now(row["updated_at"]),
        )

    @staticmethod
    def _row_to_withdrawal(row: aiosqlite.Row, lines: list[aiosqlite.Row]) -> Withdrawal:
        return Withdrawal(
            id=row["id"],
            withdrawal_number=row["withdrawal_number"],
            warehouse_id=row["warehouse_id"],
            purpose=row["purpose"],
            status=WithdrawalStatus(row["status"]),
            requested_by=row["requested_by"],
            approved_by=row["approved_by"],
            approved_at=to_ts(row["approved_at"]),
            lines=[
                WithdrawalLine(
                    id=line["id"],
                    item_id=line["item_id"],
                    quantity=to_dec(line["quantity"]),
                    unit_cost=to_dec(line["unit_cost"]),
                )
                for line in lines
            ],
            created_at=to_ts_or_now(row["created_at"]),
            updated_at=to_ts_or_now(row["updated_at"]),
        )

    @staticmethod
    def _row_to_adjustment(row: aiosqlite.Row, lines: list[aiosqlite.Row]) -> Adjustment:
        return Adjustment(
            id=row["id"],
            adjustment_number=row["adjustment_number"],
            warehouse_id=row["warehouse_id"],
            adjustment_type=AdjustmentType(row["adjustment_type"]),
            reason=row["reason"],
            notes=row["notes"],
            adjusted_by=row["adjusted_by"],
            adjusted_at=to_ts_or_now(row["adjusted_at"]),
            lines=[
                AdjustmentLine(
                    id=line["id"],
                    item_id=line["item_id"],
                    system_quantity=to_dec(line["system_quantity"]),
                    actual_quantity=to_dec(line["actual_quantity"]),
                    unit_cost=to_dec(line["unit_cost"]),
                )
                for line in lines
            ],
            created_at=to_ts_or_now(row["created_at"]),
        )
