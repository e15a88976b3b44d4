"""Application use cases."""

from src.application.use_cases.adjustments import AdjustmentResult, CreateAdjustmentUseCase
from src.application.use_cases.base import LedgerUseCase
from src.application.use_cases.catalog import ManageCatalogUseCase
from src.application.use_cases.opening_balances import (
    MovementBatchResult,
    PostOpeningBalanceUseCase,
    RevalueStockUseCase,
)
from src.application.use_cases.purchases import PurchaseResult, PurchaseWorkflowUseCase
from src.application.use_cases.record_item_entry import (
    ItemEntryResult,
    RecordItemEntryUseCase,
)
from src.application.use_cases.transfers import TransferResult, TransferWorkflowUseCase
from src.application.use_cases.withdrawals import (
    WithdrawalResult,
    WithdrawalWorkflowUseCase,
)

__all__ = [
    "LedgerUseCase",
    "ManageCatalogUseCase",
    "RecordItemEntryUseCase",
    "ItemEntryResult",
    "PurchaseWorkflowUseCase",
    "PurchaseResult",
    "TransferWorkflowUseCase",
    "TransferResult",
    "WithdrawalWorkflowUseCase",
    "WithdrawalResult",
    "CreateAdjustmentUseCase",
    "AdjustmentResult",
    "PostOpeningBalanceUseCase",
    "RevalueStockUseCase",
    "MovementBatchResult",
]
