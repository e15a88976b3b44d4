"""Shared store and service accessors for ledger use cases."""

from src.core.interfaces import ICatalogStore, IDocumentStore, ILedgerStore
from src.core.services import DocumentNumberService, MovementCoordinator


class LedgerUseCase:
    """
    Base for use cases that read the catalog and post movements.

    Every dependency is optional; missing ones are resolved lazily from the
    infrastructure singletons on first use.
    """

    def __init__(
        self,
        catalog_store: ICatalogStore | None = None,
        document_store: IDocumentStore | None = None,
        ledger_store: ILedgerStore | None = None,
        coordinator: MovementCoordinator | None = None,
        numbering: DocumentNumberService | None = None,
    ):
        self._catalog_store = catalog_store
        self._document_store = document_store
        self._ledger_store = ledger_store
        self._coordinator = coordinator
        self._numbering = numbering

    async def _get_catalog_store(self) -> ICatalogStore:
        if self._catalog_store is None:
            from src.infrastructure.storage.sqlite import get_catalog_store

            self._catalog_store = await get_catalog_store()
        return self._catalog_store

    async def _get_document_store(self) -> IDocumentStore:
        if self._document_store is None:
            from src.infrastructure.storage.sqlite import get_document_store

            self._document_store = await get_document_store()
        return self._document_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from src.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_coordinator(self) -> MovementCoordinator:
        if self._coordinator is None:
            from src.application.services import get_movement_coordinator

            self._coordinator = await get_movement_coordinator()
        return self._coordinator

    async def _get_numbering(self) -> DocumentNumberService:
        if self._numbering is None:
            from src.application.services import get_document_number_service

            self._numbering = await get_document_number_service()
        return self._numbering
