"""
Document number generation.

Numbers have the form PREFIX-YEAR-NNN (e.g. PO-2024-001). Each
(prefix, year) pair has its own counter, incremented atomically by the
sequence store, so concurrent callers never receive the same number.
A number consumed by an operation that later fails is not reissued.
"""

from datetime import datetime

from src.config import get_logger
from src.core.entities.common import utcnow
from src.core.entities.documents import DocumentType
from src.core.exceptions import ValidationError
from src.core.interfaces.numbering import ISequenceStore

logger = get_logger(__name__)


def format_document_number(prefix: str, year: int, value: int, padding: int = 3) -> str:
    """Format e.g. ('TRF', 2024, 7) as 'TRF-2024-007'."""
    return f"{prefix}-{year}-{value:0{padding}d}"


class DocumentNumberService:
    """Issues unique, per-year document numbers."""

    def __init__(self, sequence_store: ISequenceStore, padding: int = 3):
        self._store = sequence_store
        self._padding = padding

    async def next_number(
        self, document_type: DocumentType, now: datetime | None = None
    ) -> str:
        """
        Issue the next number for a document type.

        Raises:
            ValidationError: The document type has no number prefix
        """
        prefix = document_type.prefix
        if prefix is None:
            raise ValidationError(
                "document_type", "document type is not numbered", document_type.value
            )
        year = (now or utcnow()).year
        value = await self._store.next_value(prefix, year)
        number = format_document_number(prefix, year, value, self._padding)
        logger.debug("document_number_issued", number=number)
        return number
