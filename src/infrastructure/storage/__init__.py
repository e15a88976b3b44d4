"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteCatalogStore,
    SQLiteDocumentStore,
    SQLiteLedgerStore,
    SQLiteSequenceStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteCatalogStore",
    "SQLiteDocumentStore",
    "SQLiteLedgerStore",
    "SQLiteSequenceStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
