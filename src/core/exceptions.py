"""
Domain exceptions for the Stockledger application.

Provides specific exception types for different error scenarios.
"""

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """Base exception for all Stockledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def at_line(
        self,
        line: int,
        item_id: str | None = None,
        warehouse_id: str | None = None,
    ) -> "LedgerError":
        """Annotate the error with the batch line that caused it."""
        self.details["line"] = line
        if item_id is not None:
            self.details["item_id"] = item_id
        if warehouse_id is not None:
            self.details["warehouse_id"] = warehouse_id
        return self

    @property
    def line(self) -> int | None:
        return self.details.get("line")

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Inventory Exceptions
class InventoryError(LedgerError):
    """Base exception for movement and valuation errors."""

    pass


class InsufficientStockError(InventoryError):
    """Movement would drive quantity or value below zero."""

    def __init__(
        self,
        item_id: str,
        warehouse_id: str,
        requested: Decimal,
        available: Decimal,
    ):
        super().__init__(
            f"Insufficient stock for item {item_id} in warehouse {warehouse_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "warehouse_id": warehouse_id,
                "requested": str(requested),
                "available": str(available),
            },
        )


class UnknownItemOrWarehouseError(InventoryError):
    """A movement references an item or warehouse that does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"Unknown {entity}: {entity_id}",
            code="UNKNOWN_ITEM_OR_WAREHOUSE",
            details={"entity": entity, "entity_id": entity_id},
        )


class InvalidMovementRequestError(InventoryError):
    """Movement request is malformed for its kind."""

    def __init__(self, reason: str, **details: Any):
        super().__init__(
            f"Invalid movement request: {reason}",
            code="INVALID_MOVEMENT_REQUEST",
            details={"reason": reason, **details},
        )


class ConcurrencyConflictError(InventoryError):
    """Balance row changed underneath the transaction."""

    def __init__(
        self,
        item_id: str | None = None,
        warehouse_id: str | None = None,
        reason: str = "balance version changed",
    ):
        target = (
            f"item {item_id} in warehouse {warehouse_id}"
            if item_id is not None
            else "inventory ledger"
        )
        super().__init__(
            f"Concurrent update on {target}: {reason}",
            code="CONCURRENCY_CONFLICT",
            details={
                "item_id": item_id,
                "warehouse_id": warehouse_id,
                "reason": reason,
            },
        )


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class PersistenceError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="PERSISTENCE_FAILURE",
            details={"operation": operation, "error": error},
        )


class NotFoundError(StorageError):
    """Entity not found in storage."""

    entity = "entity"

    def __init__(self, entity_id: str):
        super().__init__(
            f"{self.entity.capitalize()} not found: {entity_id}",
            code=f"{self.entity.upper()}_NOT_FOUND",
            details={f"{self.entity}_id": entity_id},
        )


class ItemNotFoundError(NotFoundError):
    """Item not found in catalog."""

    entity = "item"


class WarehouseNotFoundError(NotFoundError):
    """Warehouse not found."""

    entity = "warehouse"


class SupplierNotFoundError(NotFoundError):
    """Supplier not found."""

    entity = "supplier"


class DocumentNotFoundError(StorageError):
    """Inventory document not found."""

    def __init__(self, document_type: str, document_id: str):
        super().__init__(
            f"{document_type} not found: {document_id}",
            code="DOCUMENT_NOT_FOUND",
            details={"document_type": document_type, "document_id": document_id},
        )


class DuplicateEntityError(StorageError):
    """Entity with the same unique key already exists."""

    def __init__(self, entity: str, field: str, value: str):
        super().__init__(
            f"{entity} with {field} '{value}' already exists",
            code="DUPLICATE_ENTITY",
            details={"entity": entity, "field": field, "value": value},
        )


class MigrationError(StorageError):
    """A schema migration failed or an applied migration was modified."""

    def __init__(self, version: str, reason: str):
        super().__init__(
            f"Migration v{version} {reason}",
            code="MIGRATION_FAILED",
            details={"version": version, "reason": reason},
        )


class DeletionBlockedError(StorageError):
    """Entity is referenced by inventory or movement history."""

    def __init__(self, entity: str, entity_id: str, reason: str):
        super().__init__(
            f"Cannot delete {entity} {entity_id}: {reason}",
            code="DELETION_BLOCKED",
            details={"entity": entity, "entity_id": entity_id, "reason": reason},
        )


# Document workflow Exceptions
class DocumentStateError(LedgerError):
    """Operation not allowed in the document's current status."""

    def __init__(self, document_type: str, document_id: str, status: str, action: str):
        super().__init__(
            f"Cannot {action} {document_type} {document_id} in status {status}",
            code="INVALID_DOCUMENT_STATE",
            details={
                "document_type": document_type,
                "document_id": document_id,
                "status": status,
                "action": action,
            },
        )


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
