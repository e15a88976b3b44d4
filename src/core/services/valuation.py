"""
Weighted-average valuation engine.

Pure functions: given the current balance of one item/warehouse pair and a
movement request, compute the next balance and the ledger entry to append.
No I/O. Invalid requests raise typed inventory exceptions.

Rules:
- Inbound (entry, receipt, opening balance, transfer-in): value grows by
  quantity x supplied cost; average = value / quantity.
- Outbound (withdrawal, transfer-out): priced at the current average,
  which stays unchanged; a caller-supplied cost is rejected.
- Adjustment: quantity moves by actual - system and the whole balance is
  re-based onto the supplied cost.
- Revaluation: quantity unchanged, balance re-based onto the supplied cost.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.core.entities.catalog import CostingMethod
from src.core.entities.common import (
    COST_EXP,
    ZERO,
    quantize_cost,
    quantize_quantity,
    quantize_value,
    utcnow,
)
from src.core.entities.inventory import (
    Balance,
    MovementKind,
    MovementRecord,
    MovementRequest,
)
from src.core.exceptions import InsufficientStockError, InvalidMovementRequestError


@dataclass(frozen=True)
class ValuationResult:
    """Next balance and the ledger entry describing the change."""

    balance: Balance
    record: MovementRecord


def validate_request(request: MovementRequest) -> None:
    """Check the shape of a request for its kind. Raises InvalidMovementRequestError."""
    kind = request.kind
    # Checked at ledger precision: a delta that rounds to zero moves nothing.
    delta = quantize_quantity(request.quantity_delta)

    if delta == ZERO and kind != MovementKind.REVALUATION:
        raise InvalidMovementRequestError(
            "quantity_delta must be non-zero at 4 decimal places",
            kind=kind.value,
            quantity_delta=str(request.quantity_delta),
        )
    if request.unit_cost is not None and request.unit_cost < ZERO:
        raise InvalidMovementRequestError(
            "unit_cost must be >= 0", unit_cost=str(request.unit_cost)
        )

    if kind.is_inbound:
        if delta < ZERO:
            raise InvalidMovementRequestError(
                "inbound movements require a positive quantity",
                kind=kind.value,
                quantity_delta=str(delta),
            )
        if request.unit_cost is None:
            raise InvalidMovementRequestError(
                "inbound movements require a unit cost", kind=kind.value
            )
    elif kind.is_outbound:
        if delta > ZERO:
            raise InvalidMovementRequestError(
                "outbound movements require a negative quantity",
                kind=kind.value,
                quantity_delta=str(delta),
            )
        if request.unit_cost is not None:
            raise InvalidMovementRequestError(
                "outbound movements are priced at the current average cost",
                kind=kind.value,
            )
    elif kind == MovementKind.ADJUSTMENT:
        if request.system_quantity is None or request.actual_quantity is None:
            raise InvalidMovementRequestError(
                "adjustments require system and actual quantities"
            )
        if request.actual_quantity < ZERO:
            raise InvalidMovementRequestError(
                "actual quantity must be >= 0",
                actual_quantity=str(request.actual_quantity),
            )
        if request.actual_quantity - request.system_quantity != request.quantity_delta:
            raise InvalidMovementRequestError(
                "quantity_delta must equal actual minus system quantity",
                quantity_delta=str(request.quantity_delta),
                system_quantity=str(request.system_quantity),
                actual_quantity=str(request.actual_quantity),
            )
        if request.unit_cost is None:
            raise InvalidMovementRequestError("adjustments require a unit cost")
    elif kind == MovementKind.REVALUATION:
        if delta != ZERO:
            raise InvalidMovementRequestError(
                "revaluations must not change quantity", quantity_delta=str(delta)
            )
        if request.unit_cost is None:
            raise InvalidMovementRequestError("revaluations require a unit cost")


def apply_movement(
    balance: Balance | None,
    request: MovementRequest,
    *,
    strict_counts: bool = True,
    default_cost_method: CostingMethod = CostingMethod.WEIGHTED_AVERAGE,
) -> ValuationResult:
    """
    Apply one movement to a balance.

    Args:
        balance: Current balance of the pair, None if it never had stock
        request: Movement to apply
        strict_counts: Reject adjustments whose system quantity differs
            from the current balance quantity
        default_cost_method: Recorded when the request names none

    Returns:
        ValuationResult with the new balance (version + 1) and the ledger
        entry whose sequence equals the new version

    Raises:
        InvalidMovementRequestError: Malformed request
        InsufficientStockError: Quantity would go negative
    """
    validate_request(request)

    if balance is None:
        current = Balance(item_id=request.item_id, warehouse_id=request.warehouse_id)
    elif balance.key != (request.item_id, request.warehouse_id):
        raise InvalidMovementRequestError(
            "balance does not belong to the requested item and warehouse",
            balance_item_id=balance.item_id,
            balance_warehouse_id=balance.warehouse_id,
        )
    else:
        current = balance

    delta = quantize_quantity(request.quantity_delta)
    kind = request.kind

    if kind.is_inbound:
        unit_cost = quantize_cost(request.unit_cost)
        new_quantity = current.quantity + delta
        new_value = quantize_value(current.total_value + delta * unit_cost)
        new_avg = quantize_cost(new_value / new_quantity) if new_quantity > ZERO else ZERO

    elif kind.is_outbound:
        requested = -delta
        if requested > current.quantity:
            raise InsufficientStockError(
                request.item_id, request.warehouse_id, requested, current.quantity
            )
        unit_cost = current.avg_unit_cost
        new_quantity = current.quantity + delta
        if new_quantity == ZERO:
            new_value = ZERO
        else:
            new_value = min(
                quantize_value(new_quantity * unit_cost), current.total_value
            )
        new_avg = current.avg_unit_cost

    elif kind == MovementKind.ADJUSTMENT:
        system_quantity = quantize_quantity(request.system_quantity)
        if strict_counts and system_quantity != current.quantity:
            raise InvalidMovementRequestError(
                "system quantity does not match the current balance",
                system_quantity=str(system_quantity),
                current_quantity=str(current.quantity),
            )
        new_quantity = current.quantity + delta
        if new_quantity < ZERO:
            raise InsufficientStockError(
                request.item_id, request.warehouse_id, -delta, current.quantity
            )
        unit_cost = quantize_cost(request.unit_cost)
        new_value = quantize_value(new_quantity * unit_cost)
        new_avg = unit_cost

    else:  # REVALUATION
        unit_cost = quantize_cost(request.unit_cost)
        new_quantity = current.quantity
        new_value = quantize_value(new_quantity * unit_cost)
        new_avg = unit_cost

    now = utcnow()
    new_balance = Balance(
        item_id=request.item_id,
        warehouse_id=request.warehouse_id,
        quantity=new_quantity,
        total_value=new_value,
        avg_unit_cost=new_avg,
        version=current.version + 1,
        updated_at=now,
    )
    record = MovementRecord(
        item_id=request.item_id,
        warehouse_id=request.warehouse_id,
        sequence=new_balance.version,
        kind=kind,
        quantity=delta,
        unit_cost=unit_cost,
        total_value=new_value - current.total_value,
        reference_id=request.reference_id,
        notes=request.notes,
        cost_method=request.cost_method or default_cost_method,
        balance_quantity=new_quantity,
        balance_value=new_value,
        created_at=now,
    )
    return ValuationResult(balance=new_balance, record=record)


def check_balance_invariant(
    balance: Balance, tolerance: Decimal = Decimal("0.01")
) -> list[str]:
    """
    Check a balance against the valuation invariants.

    Returns a list of human-readable issues, empty when the balance holds.
    """
    issues: list[str] = []
    if balance.quantity < ZERO:
        issues.append(f"negative quantity {balance.quantity}")
    if balance.total_value < ZERO:
        issues.append(f"negative value {balance.total_value}")
    if balance.quantity == ZERO:
        if balance.total_value != ZERO:
            issues.append(f"zero quantity carries value {balance.total_value}")
    elif abs(balance.total_value - balance.implied_value) > (
        tolerance + balance.quantity * COST_EXP
    ):
        issues.append(
            f"value {balance.total_value} differs from quantity x average "
            f"{quantize_value(balance.implied_value)}"
        )
    return issues


def replay_movements(records: list[MovementRecord]) -> Balance | None:
    """
    Rebuild a balance from its ledger rows, oldest first.

    Quantity and value are the sums of the signed deltas; the average cost
    follows the same rules the engine applied when each row was written.
    Returns None for an empty history.
    """
    if not records:
        return None

    quantity = ZERO
    value = ZERO
    avg = ZERO
    for record in records:
        quantity += record.quantity
        value += record.total_value
        if record.kind.is_inbound:
            avg = quantize_cost(value / quantity) if quantity > ZERO else ZERO
        elif not record.kind.is_outbound:
            avg = record.unit_cost

    last = records[-1]
    return Balance(
        item_id=last.item_id,
        warehouse_id=last.warehouse_id,
        quantity=quantity,
        total_value=value,
        avg_unit_cost=avg,
        version=last.sequence,
        updated_at=last.created_at,
    )
