"""Tests for domain exceptions."""

from decimal import Decimal

from src.core.exceptions import (
    ConcurrencyConflictError,
    DocumentStateError,
    InsufficientStockError,
    InventoryError,
    ItemNotFoundError,
    LedgerError,
    NotFoundError,
    ValidationError,
    WarehouseNotFoundError,
)


class TestLedgerError:
    def test_default_code_is_class_name(self):
        error = LedgerError("boom")
        assert error.code == "LedgerError"
        assert error.details == {}
        assert str(error) == "boom"

    def test_to_dict(self):
        error = LedgerError("boom", code="X", details={"a": 1})
        assert error.to_dict() == {"error": "X", "message": "boom", "details": {"a": 1}}

    def test_at_line_annotates_details(self):
        error = InsufficientStockError("i", "w", Decimal("5"), Decimal("2"))
        returned = error.at_line(3, "i", "w")
        assert returned is error
        assert error.line == 3
        assert error.details["item_id"] == "i"


class TestInventoryErrors:
    def test_insufficient_stock(self):
        error = InsufficientStockError("i", "w", Decimal("60"), Decimal("40"))
        assert isinstance(error, InventoryError)
        assert error.code == "INSUFFICIENT_STOCK"
        assert error.details["requested"] == "60"
        assert error.details["available"] == "40"

    def test_concurrency_conflict_without_pair(self):
        error = ConcurrencyConflictError(reason="database is locked")
        assert "inventory ledger" in error.message
        assert error.details["reason"] == "database is locked"


class TestNotFound:
    def test_codes_follow_entity(self):
        assert ItemNotFoundError("x").code == "ITEM_NOT_FOUND"
        assert WarehouseNotFoundError("x").code == "WAREHOUSE_NOT_FOUND"
        assert ItemNotFoundError("x").details == {"item_id": "x"}
        assert isinstance(ItemNotFoundError("x"), NotFoundError)


def test_document_state_error_details():
    error = DocumentStateError("purchase", "p1", "RECEIVED", "approve")
    assert error.code == "INVALID_DOCUMENT_STATE"
    assert error.details["status"] == "RECEIVED"
    assert "Cannot approve purchase p1" in error.message


def test_validation_error_truncates_value():
    error = ValidationError("field", "bad", "x" * 500)
    assert len(error.details["value"]) == 100
