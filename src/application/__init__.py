"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers that change stock.
"""

from src.application.services import (
    get_document_number_service,
    get_movement_coordinator,
    get_reconciliation_service,
    reset_services,
)
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

__all__ = [
    # Use Cases
    "ManageCatalogUseCase",
    "RecordItemEntryUseCase",
    "PurchaseWorkflowUseCase",
    "TransferWorkflowUseCase",
    "WithdrawalWorkflowUseCase",
    "CreateAdjustmentUseCase",
    "PostOpeningBalanceUseCase",
    "RevalueStockUseCase",
    # Service factories
    "get_movement_coordinator",
    "get_document_number_service",
    "get_reconciliation_service",
    "reset_services",
]
