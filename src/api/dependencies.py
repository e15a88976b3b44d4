"""
Dependency injection container for FastAPI.

Provides stores, services and use cases to route handlers.
"""

from fastapi import Header

from src.application.services import get_reconciliation_service
from src.application.use_cases import (
    CreateAdjustmentUseCase,
    ManageCatalogUseCase,
    PostOpeningBalanceUseCase,
    PurchaseWorkflowUseCase,
    RecordItemEntryUseCase,
    RevalueStockUseCase,
    TransferWorkflowUseCase,
    WithdrawalWorkflowUseCase,
)
from src.core.exceptions import ValidationError
from src.core.services import ReconciliationService
from src.infrastructure.storage.sqlite import (
    SQLiteCatalogStore,
    SQLiteDocumentStore,
    SQLiteLedgerStore,
    get_catalog_store,
    get_document_store,
    get_ledger_store,
)


async def get_acting_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    """Acting user for mutating requests, taken from the X-User-Id header."""
    if x_user_id is None or not x_user_id.strip():
        raise ValidationError("X-User-Id", "acting user header is required")
    return x_user_id.strip()


# Store dependencies
async def get_cat_store() -> SQLiteCatalogStore:
    """Get catalog store."""
    return await get_catalog_store()


async def get_ledger() -> SQLiteLedgerStore:
    """Get ledger store."""
    return await get_ledger_store()


async def get_doc_store() -> SQLiteDocumentStore:
    """Get document store."""
    return await get_document_store()


# Service dependencies
async def get_reconciliation() -> ReconciliationService:
    """Get reconciliation service."""
    return await get_reconciliation_service()


# Use case dependencies
def get_catalog_use_case() -> ManageCatalogUseCase:
    return ManageCatalogUseCase()


def get_item_entry_use_case() -> RecordItemEntryUseCase:
    return RecordItemEntryUseCase()


def get_purchase_use_case() -> PurchaseWorkflowUseCase:
    return PurchaseWorkflowUseCase()


def get_transfer_use_case() -> TransferWorkflowUseCase:
    return TransferWorkflowUseCase()


def get_withdrawal_use_case() -> WithdrawalWorkflowUseCase:
    return WithdrawalWorkflowUseCase()


def get_adjustment_use_case() -> CreateAdjustmentUseCase:
    return CreateAdjustmentUseCase()


def get_opening_balance_use_case() -> PostOpeningBalanceUseCase:
    return PostOpeningBalanceUseCase()


def get_revaluation_use_case() -> RevalueStockUseCase:
    return RevalueStockUseCase()
