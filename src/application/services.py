"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.config import get_settings
from src.core.services import (
    DocumentNumberService,
    MovementCoordinator,
    ReconciliationService,
)

if TYPE_CHECKING:
    from src.core.interfaces import ILedgerStore, ISequenceStore


# Singleton service instances
_movement_coordinator: MovementCoordinator | None = None
_document_number_service: DocumentNumberService | None = None
_reconciliation_service: ReconciliationService | None = None


async def get_movement_coordinator(
    ledger_store: "ILedgerStore | None" = None,
) -> MovementCoordinator:
    """
    Get or create MovementCoordinator instance.

    Retry limits and adjustment strictness come from LEDGER_* settings.

    Args:
        ledger_store: Optional ledger store override

    Returns:
        Configured MovementCoordinator
    """
    global _movement_coordinator

    if _movement_coordinator is not None and ledger_store is None:
        return _movement_coordinator

    # Lazy import infrastructure to avoid circular imports
    from src.infrastructure.storage.sqlite import get_ledger_store

    ledger = get_settings().ledger
    service = MovementCoordinator(
        ledger_store=ledger_store or await get_ledger_store(),
        max_retries=ledger.max_retries,
        retry_delay=ledger.retry_delay,
        retry_multiplier=ledger.retry_multiplier,
        strict_adjustment_counts=ledger.strict_adjustment_counts,
    )

    if ledger_store is None:
        _movement_coordinator = service

    return service


async def get_document_number_service(
    sequence_store: "ISequenceStore | None" = None,
) -> DocumentNumberService:
    """Get or create DocumentNumberService instance."""
    global _document_number_service

    if _document_number_service is not None and sequence_store is None:
        return _document_number_service

    from src.infrastructure.storage.sqlite import get_sequence_store

    service = DocumentNumberService(
        sequence_store=sequence_store or await get_sequence_store(),
        padding=get_settings().ledger.number_padding,
    )

    if sequence_store is None:
        _document_number_service = service

    return service


async def get_reconciliation_service(
    ledger_store: "ILedgerStore | None" = None,
) -> ReconciliationService:
    """
    Get or create ReconciliationService instance.

    Args:
        ledger_store: Optional ledger store override

    Returns:
        ReconciliationService using LEDGER_VALUE_TOLERANCE
    """
    global _reconciliation_service

    if _reconciliation_service is not None and ledger_store is None:
        return _reconciliation_service

    from src.infrastructure.storage.sqlite import get_ledger_store

    service = ReconciliationService(
        ledger_store=ledger_store or await get_ledger_store(),
        tolerance=get_settings().ledger.value_tolerance,
    )

    if ledger_store is None:
        _reconciliation_service = service

    return service


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _movement_coordinator
    global _document_number_service
    global _reconciliation_service

    _movement_coordinator = None
    _document_number_service = None
    _reconciliation_service = None


__all__ = [
    # Factory functions
    "get_movement_coordinator",
    "get_document_number_service",
    "get_reconciliation_service",
    # Reset
    "reset_services",
]
