"""
Versioned schema migrations for the ledger database.

Migrations are `vNNN_name.sql` scripts next to this module. Each one runs
once, in version order, and is recorded in `schema_migrations` with a
checksum of its text. A changed checksum for an applied version stops the
run. The database file is copied aside before pending migrations run and
copied back if any of them fails.
"""

import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings
from src.core.exceptions import MigrationError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = (
    "schema_migrations",
    "suppliers",
    "items",
    "warehouses",
    "current_inventory",
    "inventory_movements",
    "document_sequences",
    "item_entries",
    "purchases",
    "purchase_lines",
    "transfers",
    "transfer_lines",
    "withdrawals",
    "withdrawal_lines",
    "adjustments",
    "adjustment_lines",
)

APPEND_ONLY_TRIGGERS = ("trg_movements_no_update", "trg_movements_no_delete")


@dataclass(frozen=True)
class MigrationInfo:
    """A migration script on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(
            version=match.group(1), name=match.group(2), path=path, checksum=digest
        )


@dataclass
class MigrationResult:
    """Outcome of running one migration script."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration scripts in version order; misnamed files are skipped."""
    found = []
    for path in sorted(directory.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(found, key=lambda m: int(m.version))


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their recorded checksums."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied, key=int) if applied else None


async def _run_script(
    conn: aiosqlite.Connection, migration: MigrationInfo
) -> MigrationResult:
    started = time.perf_counter()
    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        elapsed = int((time.perf_counter() - started) * 1000)
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.perf_counter() - started) * 1000),
            error=str(e),
        )

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed,
    )
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed,
    )


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.info("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database schema up to date.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Copy an existing database aside first

    Returns:
        Results of the migrations that ran; empty when already current

    Raises:
        MigrationError: A script failed or an applied script changed
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            applied = await get_applied_migrations(conn)
            for migration in discover_migrations():
                recorded = applied.get(migration.version)
                if recorded == migration.checksum:
                    continue
                if recorded is not None:
                    raise MigrationError(migration.version, "changed after it was applied")

                result = await _run_script(conn, migration)
                results.append(result)
                if not result.success:
                    raise MigrationError(migration.version, f"failed: {result.error}")
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None:
        backup_path.unlink()
    logger.info("database_initialized", db_path=str(db_path), applied=len(results))
    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Current version plus applied and pending versions."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)
        current = await get_current_version(conn)

    return {
        "exists": True,
        "current_version": current,
        "applied_migrations": sorted(applied, key=int),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Check SQLite integrity, foreign keys, required tables and the
    append-only triggers on the movement ledger.
    """
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = len(await cursor.fetchall())

        cursor = await conn.execute("SELECT type, name FROM sqlite_master")
        objects = {(row[0], row[1]) for row in await cursor.fetchall()}

    missing_tables = [t for t in REQUIRED_TABLES if ("table", t) not in objects]
    missing_triggers = [t for t in APPEND_ONLY_TRIGGERS if ("trigger", t) not in objects]

    return [
        {
            "check": "integrity",
            "status": "PASS" if integrity == "ok" else "FAIL",
            "result": integrity,
        },
        {
            "check": "foreign_keys",
            "status": "PASS" if not fk_violations else "FAIL",
            "violations": fk_violations,
        },
        {
            "check": "required_tables",
            "status": "PASS" if not missing_tables else "FAIL",
            "missing": missing_tables,
        },
        {
            "check": "append_only_ledger",
            "status": "PASS" if not missing_triggers else "FAIL",
            "missing": missing_triggers,
        },
    ]


def main() -> None:
    """CLI entry point: migrate, or report status / integrity."""
    import argparse

    parser = argparse.ArgumentParser(description="Stockledger database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Show migration status")
    parser.add_argument("--verify", action="store_true", help="Verify schema integrity")
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    args = parser.parse_args()

    if args.status:
        status = asyncio.run(get_migration_status(args.db_path))
        for key, value in status.items():
            print(f"{key}: {value}")
    elif args.verify:
        for check in asyncio.run(verify_schema_integrity(args.db_path)):
            print(f"[{check['status']}] {check['check']}")
    else:
        results = asyncio.run(
            initialize_database(args.db_path, create_backup_before=not args.no_backup)
        )
        for r in results:
            print(f"[{'OK' if r.success else 'FAILED'}] v{r.version}_{r.name} ({r.execution_time_ms}ms)")
        if not results:
            print("Schema is up to date")


if __name__ == "__main__":
    main()
