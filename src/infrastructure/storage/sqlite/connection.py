"""
Async SQLite connection pool with aiosqlite.

Ledger writes go through `exclusive_transaction`, which issues
BEGIN IMMEDIATE and so holds the database write lock from the first
statement. Catalog and document writes use the ordinary deferred
`transaction`. Reads just `acquire` a connection.
"""

import asyncio
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

_LOCK_MESSAGES = ("database is locked", "database is busy", "database table is locked")

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout={busy_timeout}",
)


def is_lock_error(error: BaseException) -> bool:
    """Whether an SQLite error means another writer holds the lock."""
    if not isinstance(error, sqlite3.OperationalError):
        return False
    text = str(error).lower()
    return any(msg in text for msg in _LOCK_MESSAGES)


async def _open(db_path: Path, busy_timeout: int) -> aiosqlite.Connection:
    conn = await aiosqlite.connect(db_path)
    for pragma in _PRAGMAS:
        await conn.execute(pragma.format(busy_timeout=busy_timeout))
    conn.row_factory = aiosqlite.Row
    return conn


class ConnectionPool:
    """Fixed-size pool of WAL-mode connections to one database file."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return bool(self._connections)

    @property
    def in_use(self) -> int:
        """Connections currently checked out."""
        return len(self._connections) - self._idle.qsize()

    async def initialize(self) -> None:
        async with self._lock:
            if self._connections:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await _open(self.db_path, self.busy_timeout)
                self._connections.append(conn)
                self._idle.put_nowait(conn)

            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _release(self, conn: aiosqlite.Connection) -> None:
        # A caller that bailed out mid-transaction must not hand the lock on.
        if conn.in_transaction:
            logger.warning("connection_returned_in_transaction", db_path=str(self.db_path))
            await conn.rollback()
        self._idle.put_nowait(conn)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Check a connection out of the pool.

        Usage:
            async with pool.acquire() as conn:
                await conn.execute(...)
        """
        if not self.initialized:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        finally:
            await self._release(conn)

    @asynccontextmanager
    async def _scoped(self, begin: str | None) -> AsyncIterator[aiosqlite.Connection]:
        async with self.acquire() as conn:
            if begin:
                await conn.execute(begin)
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    def transaction(self):
        """Deferred transaction: committed on success, rolled back on error."""
        return self._scoped(None)

    def exclusive_transaction(self):
        """
        Transaction opened with BEGIN IMMEDIATE.

        Reads made inside see no concurrent writes. Waiting for the lock is
        bounded by `busy_timeout`, after which SQLite reports it as busy.
        """
        return self._scoped("BEGIN IMMEDIATE")

    async def close(self) -> None:
        async with self._lock:
            while self._connections:
                await self._connections.pop().close()
            while not self._idle.empty():
                self._idle.get_nowait()
            logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the process-wide pool from storage settings."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn


@asynccontextmanager
async def get_exclusive_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Connection holding the database write lock until the block exits."""
    pool = await get_pool()
    async with pool.exclusive_transaction() as conn:
        yield conn
