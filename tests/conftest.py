"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import src.infrastructure.storage.sqlite as sqlite_stores
from src.application.services import reset_services
from src.config import reset_settings
from src.core.entities.catalog import Item, Supplier, Warehouse
from src.infrastructure.storage.sqlite import close_pool
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


def _reset_singletons() -> None:
    sqlite_stores._catalog_store = None
    sqlite_stores._ledger_store = None
    sqlite_stores._document_store = None
    sqlite_stores._sequence_store = None
    reset_services()


@pytest.fixture
def db_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point settings at a temporary database file."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STORAGE_DB_NAME", "ledger_test.db")
    monkeypatch.setenv("STORAGE_POOL_SIZE", "3")
    monkeypatch.setenv("LEDGER_RETRY_DELAY", "0")
    reset_settings()
    yield tmp_path / "ledger_test.db"
    reset_settings()


@pytest_asyncio.fixture
async def ledger_db(db_path: Path) -> AsyncGenerator[Path, None]:
    """Migrated temporary database with fresh store and service singletons."""
    await close_pool()
    _reset_singletons()
    await initialize_database(db_path, create_backup_before=False)
    yield db_path
    await close_pool()
    _reset_singletons()


@pytest_asyncio.fixture
async def async_client(ledger_db: Path) -> AsyncGenerator[AsyncClient, None]:
    """Async API client acting as user 'tester'."""
    from src.api.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": "tester"},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def catalog(ledger_db: Path) -> dict:
    """A supplier, two items and two warehouses (the first is main)."""
    store = await sqlite_stores.get_catalog_store()
    supplier = await store.create_supplier(Supplier(name="Acme Fasteners"))
    bolt = await store.create_item(
        Item(
            item_code="BOLT-M8",
            description="Hex bolt M8 x 40",
            supplier_id=supplier.id,
            reorder_level=Decimal("20"),
        )
    )
    nut = await store.create_item(Item(item_code="NUT-M8", description="Hex nut M8"))
    main = await store.create_warehouse(Warehouse(name="Main Store", is_main=True))
    site = await store.create_warehouse(Warehouse(name="Site A"))
    return {
        "supplier": supplier,
        "bolt": bolt,
        "nut": nut,
        "main": main,
        "site": site,
    }
