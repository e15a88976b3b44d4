"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_exclusive_transaction,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.document_store import SQLiteDocumentStore
from src.infrastructure.storage.sqlite.ledger_store import (
    SQLiteLedgerSession,
    SQLiteLedgerStore,
)
from src.infrastructure.storage.sqlite.sequence_store import SQLiteSequenceStore

# Singleton instances
_catalog_store: SQLiteCatalogStore | None = None
_ledger_store: SQLiteLedgerStore | None = None
_document_store: SQLiteDocumentStore | None = None
_sequence_store: SQLiteSequenceStore | None = None


async def get_catalog_store() -> SQLiteCatalogStore:
    """Get singleton catalog store instance."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = SQLiteCatalogStore()
    return _catalog_store


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_document_store() -> SQLiteDocumentStore:
    """Get singleton document store instance."""
    global _document_store
    if _document_store is None:
        _document_store = SQLiteDocumentStore()
    return _document_store


async def get_sequence_store() -> SQLiteSequenceStore:
    """Get singleton sequence store instance."""
    global _sequence_store
    if _sequence_store is None:
        _sequence_store = SQLiteSequenceStore()
    return _sequence_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_exclusive_transaction",
    # Store classes
    "SQLiteCatalogStore",
    "SQLiteDocumentStore",
    "SQLiteLedgerSession",
    "SQLiteLedgerStore",
    "SQLiteSequenceStore",
    # Factory functions
    "get_catalog_store",
    "get_document_store",
    "get_ledger_store",
    "get_sequence_store",
]
