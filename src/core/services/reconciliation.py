"""
Ledger reconciliation and cost reporting.

Replays the append-only ledger against the current-balance cache, and
derives monthly weighted-average summaries and inventory statistics from
ledger rows and balances.
"""

from calendar import monthrange
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from itertools import groupby

from src.config import get_logger
from src.core.entities.common import ZERO, quantize_cost, quantize_value
from src.core.entities.inventory import (
    Balance,
    InventoryStats,
    MovementRecord,
    PeriodSummary,
    ReconciliationResult,
)
from src.core.exceptions import ValidationError
from src.core.interfaces.ledger_store import ILedgerStore
from src.core.services.valuation import check_balance_invariant, replay_movements

logger = get_logger(__name__)


def reconcile_history(
    item_id: str,
    warehouse_id: str,
    history: list[MovementRecord],
    balance: Balance | None,
    tolerance: Decimal = Decimal("0.01"),
) -> ReconciliationResult:
    """
    Compare a pair's ledger rows (in sequence order) with its cached balance.

    Checks that sequences are contiguous from 1, that every snapshot equals
    the previous snapshot plus the row's delta, and that the final snapshot
    matches the cached balance and its version.
    """
    issues: list[str] = []
    running_quantity = ZERO
    running_value = ZERO

    for expected_sequence, record in enumerate(history, start=1):
        if record.sequence != expected_sequence:
            issues.append(
                f"sequence gap: expected {expected_sequence}, found {record.sequence}"
            )
        running_quantity += record.quantity
        running_value += record.total_value
        if record.balance_quantity != running_quantity:
            issues.append(
                f"sequence {record.sequence}: snapshot quantity "
                f"{record.balance_quantity} != replayed {running_quantity}"
            )
        if record.balance_value != running_value:
            issues.append(
                f"sequence {record.sequence}: snapshot value "
                f"{record.balance_value} != replayed {running_value}"
            )
        if record.balance_quantity < ZERO or record.balance_value < ZERO:
            issues.append(f"sequence {record.sequence}: negative balance snapshot")

    replayed = replay_movements(history)

    if balance is None:
        if history:
            issues.append("ledger rows exist but no current balance")
    elif replayed is None:
        issues.append("current balance exists without ledger rows")
    else:
        if balance.quantity != replayed.quantity:
            issues.append(
                f"balance quantity {balance.quantity} != ledger {replayed.quantity}"
            )
        if abs(balance.total_value - replayed.total_value) > tolerance:
            issues.append(
                f"balance value {balance.total_value} != ledger {replayed.total_value}"
            )
        if balance.version != replayed.version:
            issues.append(
                f"balance version {balance.version} != last sequence {replayed.version}"
            )
    if balance is not None:
        issues.extend(check_balance_invariant(balance, tolerance))

    return ReconciliationResult(
        item_id=item_id,
        warehouse_id=warehouse_id,
        movement_count=len(history),
        ledger_quantity=running_quantity,
        ledger_value=running_value,
        balance_quantity=balance.quantity if balance else None,
        balance_value=balance.total_value if balance else None,
        issues=issues,
    )


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """UTC start (inclusive) and end (exclusive) of a calendar month."""
    if not 1 <= month <= 12:
        raise ValidationError("month", "must be between 1 and 12", month)
    start = datetime(year, month, 1, tzinfo=UTC)
    days = monthrange(year, month)[1]
    return start, start + timedelta(days=days)


def summarize_period(
    year: int, month: int, records: list[MovementRecord]
) -> list[PeriodSummary]:
    """
    Build monthly summaries from the period's ledger rows, oldest first.

    Opening balance is the first row's snapshot minus its delta; closing is
    the last row's snapshot. Totals are the absolute net quantity and value
    moved in the period.
    """
    ordered = sorted(
        records, key=lambda r: (r.item_id, r.warehouse_id, r.sequence)
    )
    summaries: list[PeriodSummary] = []
    for (item_id, warehouse_id), group in groupby(
        ordered, key=lambda r: (r.item_id, r.warehouse_id)
    ):
        rows = list(group)
        first, last = rows[0], rows[-1]
        net_quantity = sum((r.quantity for r in rows), ZERO)
        net_value = sum((r.total_value for r in rows), ZERO)
        closing_quantity = last.balance_quantity
        closing_value = last.balance_value
        summaries.append(
            PeriodSummary(
                item_id=item_id,
                warehouse_id=warehouse_id,
                year=year,
                month=month,
                movement_count=len(rows),
                opening_quantity=first.balance_quantity - first.quantity,
                opening_value=first.balance_value - first.total_value,
                closing_quantity=closing_quantity,
                closing_value=closing_value,
                total_quantity=abs(net_quantity),
                total_value=abs(net_value),
                weighted_avg_cost=(
                    quantize_cost(closing_value / closing_quantity)
                    if closing_quantity > ZERO
                    else ZERO
                ),
            )
        )
    return summaries


def compute_stats(
    balances: list[Balance], reorder_levels: dict[str, Decimal]
) -> InventoryStats:
    """Aggregate value and stock-level counts over a list of balances."""
    total_value = sum((b.total_value for b in balances), ZERO)
    low_stock = sum(
        1
        for b in balances
        if b.item_id in reorder_levels and b.quantity <= reorder_levels[b.item_id]
    )
    out_of_stock = sum(1 for b in balances if b.quantity == ZERO)
    return InventoryStats(
        total_lines=len(balances),
        total_value=total_value,
        low_stock_lines=low_stock,
        out_of_stock_lines=out_of_stock,
        average_value=(
            quantize_value(total_value / len(balances)) if balances else ZERO
        ),
        warehouse_count=len({b.warehouse_id for b in balances}),
    )


class ReconciliationService:
    """
    Ledger-backed reporting.

    Required interfaces for DI:
    - ILedgerStore: ledger rows and cached balances
    """

    STATS_PAGE_SIZE = 1000

    def __init__(self, ledger_store: ILedgerStore, tolerance: Decimal | None = None):
        self._store = ledger_store
        self._tolerance = tolerance if tolerance is not None else Decimal("0.01")

    async def reconcile_pair(self, item_id: str, warehouse_id: str) -> ReconciliationResult:
        """Replay one pair's ledger and compare it with the cached balance."""
        history = await self._store.get_pair_history(item_id, warehouse_id)
        balance = await self._store.get_balance(item_id, warehouse_id)
        result = reconcile_history(
            item_id, warehouse_id, history, balance, self._tolerance
        )
        if not result.reconciled:
            logger.warning(
                "ledger_mismatch",
                item_id=item_id,
                warehouse_id=warehouse_id,
                issues=result.issues,
            )
        return result

    async def reconcile_all(self) -> list[ReconciliationResult]:
        """Reconcile every pair that has a balance or ledger rows."""
        results = []
        for item_id, warehouse_id in await self._store.list_pairs():
            results.append(await self.reconcile_pair(item_id, warehouse_id))
        logger.info(
            "ledger_reconciled",
            pairs=len(results),
            mismatched=sum(1 for r in results if not r.reconciled),
        )
        return results

    async def monthly_summary(
        self,
        year: int,
        month: int,
        item_id: str | None = None,
        warehouse_id: str | None = None,
    ) -> list[PeriodSummary]:
        """Monthly weighted-average summaries for pairs that moved in the month."""
        start, end = month_bounds(year, month)
        records = await self._store.list_movements_between(
            start, end, item_id=item_id, warehouse_id=warehouse_id
        )
        return summarize_period(year, month, records)

    async def inventory_stats(self, warehouse_id: str | None = None) -> InventoryStats:
        """Aggregate statistics over all current balances."""
        balances: list[Balance] = []
        offset = 0
        while True:
            page = await self._store.list_balances(
                warehouse_id=warehouse_id, limit=self.STATS_PAGE_SIZE, offset=offset
            )
            balances.extend(page)
            if len(page) < self.STATS_PAGE_SIZE:
                break
            offset += self.STATS_PAGE_SIZE
        reorder_levels = await self._store.get_reorder_levels()
        return compute_stats(balances, reorder_levels)
