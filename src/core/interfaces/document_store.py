"""
Abstract interface for inventory document storage.

Writes accept an optional ledger session. When given, the document is
written inside that session's transaction so it commits together with
the movements it produced.
"""

from abc import ABC, abstractmethod

from src.core.entities.documents import (
    Adjustment,
    ItemEntry,
    Purchase,
    PurchaseStatus,
    Transfer,
    TransferStatus,
    Withdrawal,
    WithdrawalStatus,
)
from src.core.interfaces.ledger_store import ILedgerSession


class IDocumentStore(ABC):
    """Interface for item entries, purchases, transfers, withdrawals and adjustments."""

    # Item entries

    @abstractmethod
    async def create_item_entry(
        self, entry: ItemEntry, session: ILedgerSession | None = None
    ) -> ItemEntry:
        """Persist an item entry."""

    @abstractmethod
    async def get_item_entry(self, entry_id: str) -> ItemEntry | None:
        """Get item entry by ID."""

    @abstractmethod
    async def list_item_entries(
        self,
        item_id: str | None = None,
        warehouse_id: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ItemEntry]:
        """List item entries, newest first."""

    # Purchases

    @abstractmethod
    async def create_purchase(
        self, purchase: Purchase, session: ILedgerSession | None = None
    ) -> Purchase:
        """Persist a purchase with its lines."""

    @abstractmethod
    async def update_purchase(
        self,
        purchase: Purchase,
        session: ILedgerSession | None = None,
        expected_status: str | None = None,
    ) -> Purchase:
        """
        Update purchase header fields (status, approval, receiving warehouse).

        With `expected_status`, the update only applies while the stored
        status still matches; otherwise DocumentStateError is raised.
        """

    @abstractmethod
    async def get_purchase(self, purchase_id: str) -> Purchase | None:
        """Get purchase with lines by ID."""

    @abstractmethod
    async def list_purchases(
        self, status: PurchaseStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[Purchase]:
        """List purchases, newest first."""

    @abstractmethod
    async def delete_purchase(self, purchase_id: str) -> bool:
        """
        Delete a purchase and its lines.

        Raises:
            DocumentStateError: The purchase has been received
        """

    # Transfers

    @abstractmethod
    async def create_transfer(
        self, transfer: Transfer, session: ILedgerSession | None = None
    ) -> Transfer:
        """Persist a transfer with its lines."""

    @abstractmethod
    async def update_transfer(
        self,
        transfer: Transfer,
        session: ILedgerSession | None = None,
        expected_status: str | None = None,
    ) -> Transfer:
        """
        Update transfer header and line unit costs.

        With `expected_status`, the update only applies while the stored
        status still matches; otherwise DocumentStateError is raised.
        """

    @abstractmethod
    async def get_transfer(self, transfer_id: str) -> Transfer | None:
        """Get transfer with lines by ID."""

    @abstractmethod
    async def list_transfers(
        self, status: TransferStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[Transfer]:
        """List transfers, newest first."""

    @abstractmethod
    async def delete_transfer(self, transfer_id: str) -> bool:
        """
        Delete a transfer and its lines.

        Raises:
            DocumentStateError: The transfer has been completed
        """

    # Withdrawals

    @abstractmethod
    async def create_withdrawal(
        self, withdrawal: Withdrawal, session: ILedgerSession | None = None
    ) -> Withdrawal:
        """Persist a withdrawal with its lines."""

    @abstractmethod
    async def update_withdrawal(
        self,
        withdrawal: Withdrawal,
        session: ILedgerSession | None = None,
        expected_status: str | None = None,
    ) -> Withdrawal:
        """
        Update withdrawal header and line costs.

        With `expected_status`, the update only applies while the stored
        status still matches; otherwise DocumentStateError is raised.
        """

    @abstractmethod
    async def get_withdrawal(self, withdrawal_id: str) -> Withdrawal | None:
        """Get withdrawal with lines by ID."""

    @abstractmethod
    async def list_withdrawals(
        self,
        status: WithdrawalStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Withdrawal]:
        """List withdrawals, newest first."""

    @abstractmethod
    async def delete_withdrawal(self, withdrawal_id: str) -> bool:
        """
        Delete a withdrawal and its lines.

        Raises:
            DocumentStateError: The withdrawal has been completed
        """

    # Adjustments

    @abstractmethod
    async def create_adjustment(
        self, adjustment: Adjustment, session: ILedgerSession | None = None
    ) -> Adjustment:
        """Persist an adjustment with its lines."""

    @abstractmethod
    async def get_adjustment(self, adjustment_id: str) -> Adjustment | None:
        """Get adjustment with lines by ID."""

    @abstractmethod
    async def list_adjustments(
        self, warehouse_id: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[Adjustment]:
        """List adjustments, newest first."""
