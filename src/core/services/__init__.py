"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.document_numbers import (
    DocumentNumberService,
    format_document_number,
)
from src.core.services.movement_coordinator import MovementCoordinator, OnApplied
from src.core.services.reconciliation import (
    ReconciliationService,
    compute_stats,
    month_bounds,
    reconcile_history,
    summarize_period,
)
from src.core.services.valuation import (
    ValuationResult,
    apply_movement,
    check_balance_invariant,
    replay_movements,
    validate_request,
)

__all__ = [
    # Valuation
    "ValuationResult",
    "apply_movement",
    "check_balance_invariant",
    "replay_movements",
    "validate_request",
    # Coordinator
    "MovementCoordinator",
    "OnApplied",
    # Numbering
    "DocumentNumberService",
    "format_document_number",
    # Reconciliation
    "ReconciliationService",
    "compute_stats",
    "month_bounds",
    "reconcile_history",
    "summarize_period",
]
