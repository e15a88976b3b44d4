"""SQLite implementation of document number counters."""

from src.core.interfaces.numbering import ISequenceStore
from src.infrastructure.storage.sqlite.connection import get_transaction


class SQLiteSequenceStore(ISequenceStore):
    """Counters in `document_sequences`, one row per (prefix, year)."""

    async def next_value(self, prefix: str, year: int) -> int:
        # Single statement: the increment and the read cannot interleave
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO document_sequences (prefix, year, last_value)
                VALUES (?, ?, 1)
                ON CONFLICT (prefix, year)
                DO UPDATE SET last_value = last_value + 1
                RETURNING last_value
                """,
                (prefix, year),
            )
            row = await cursor.fetchone()
            await cursor.close()
        return row[0]
