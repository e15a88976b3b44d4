"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.catalog_store import ICatalogStore
from src.core.interfaces.document_store import IDocumentStore
from src.core.interfaces.ledger_store import ILedgerSession, ILedgerStore
from src.core.interfaces.numbering import ISequenceStore

__all__ = [
    # Storage interfaces
    "ICatalogStore",
    "IDocumentStore",
    "ILedgerSession",
    "ILedgerStore",
    "ISequenceStore",
]
