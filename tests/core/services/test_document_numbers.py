"""Tests for document number generation."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from src.core.entities.documents import DocumentType
from src.core.exceptions import ValidationError
from src.core.services.document_numbers import (
    DocumentNumberService,
    format_document_number,
)


class TestFormatting:
    def test_format_pads_sequence(self):
        assert format_document_number("TRF", 2024, 7) == "TRF-2024-007"

    def test_format_grows_past_padding(self):
        assert format_document_number("PO", 2024, 1234) == "PO-2024-1234"


class TestDocumentNumberService:
    async def test_next_number_uses_prefix_and_year(self):
        store = AsyncMock()
        store.next_value.return_value = 3
        service = DocumentNumberService(store)

        number = await service.next_number(
            DocumentType.PURCHASE, now=datetime(2024, 5, 1, tzinfo=UTC)
        )

        assert number == "PO-2024-003"
        store.next_value.assert_awaited_once_with("PO", 2024)

    async def test_padding_is_configurable(self):
        store = AsyncMock()
        store.next_value.return_value = 12
        service = DocumentNumberService(store, padding=5)

        number = await service.next_number(
            DocumentType.ADJUSTMENT, now=datetime(2025, 1, 1, tzinfo=UTC)
        )
        assert number == "ADJ-2025-00012"

    async def test_unnumbered_type_rejected(self):
        store = AsyncMock()
        service = DocumentNumberService(store)

        with pytest.raises(ValidationError):
            await service.next_number(DocumentType.ITEM_ENTRY)
        store.next_value.assert_not_awaited()
