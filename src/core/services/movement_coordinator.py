"""
Movement coordinator.

Applies a batch of movement requests atomically: every line is valued
against the latest committed balance (or the in-batch result for pairs the
batch already touched), ledger rows and balances are written in one
exclusive transaction, and the whole batch rolls back if any line fails.

Version conflicts on balance rows are retried with exponential back-off
up to a configured limit; all other errors surface to the caller.
"""

from collections.abc import Awaitable, Callable, Sequence

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_logger
from src.core.entities.catalog import Item
from src.core.entities.inventory import Balance, MovementRecord, MovementRequest
from src.core.exceptions import (
    ConcurrencyConflictError,
    InvalidMovementRequestError,
    LedgerError,
    UnknownItemOrWarehouseError,
)
from src.core.interfaces.ledger_store import ILedgerSession, ILedgerStore
from src.core.services.valuation import apply_movement

logger = get_logger(__name__)

OnApplied = Callable[[ILedgerSession, list[MovementRecord]], Awaitable[None]]


class MovementCoordinator:
    """
    Single entry point for changing stock.

    Required interfaces for DI:
    - ILedgerStore: session factory over the ledger and balance cache
    """

    DEFAULT_MAX_RETRIES = 3
    DEFAULT_RETRY_DELAY = 0.05
    DEFAULT_RETRY_MULTIPLIER = 2.0

    def __init__(
        self,
        ledger_store: ILedgerStore,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        retry_multiplier: float | None = None,
        strict_adjustment_counts: bool = True,
    ):
        """
        Initialize coordinator.

        Args:
            ledger_store: Ledger storage providing write sessions
            max_retries: Retries after a concurrency conflict. Default 3.
            retry_delay: First back-off delay in seconds. Default 0.05.
            retry_multiplier: Back-off growth per retry. Default 2.0.
            strict_adjustment_counts: Reject adjustments counted against a
                stale system quantity
        """
        self._store = ledger_store
        self._max_retries = (
            max_retries if max_retries is not None else self.DEFAULT_MAX_RETRIES
        )
        self._retry_delay = (
            retry_delay if retry_delay is not None else self.DEFAULT_RETRY_DELAY
        )
        self._retry_multiplier = (
            retry_multiplier
            if retry_multiplier is not None
            else self.DEFAULT_RETRY_MULTIPLIER
        )
        self._strict_counts = strict_adjustment_counts

    async def apply_movements(
        self,
        requests: Sequence[MovementRequest],
        acting_user_id: str,
        on_applied: OnApplied | None = None,
    ) -> list[MovementRecord]:
        """
        Apply a batch of movements atomically.

        Args:
            requests: Ordered movement requests; lines for the same pair
                see the effect of earlier lines
            acting_user_id: User recorded on every ledger row
            on_applied: Optional callback run inside the transaction after
                all lines are applied, used to persist the source document

        Returns:
            Ledger records in request order

        Raises:
            InvalidMovementRequestError: Empty batch, missing user or malformed line
            UnknownItemOrWarehouseError: Line references a missing item or warehouse
            InsufficientStockError: Line would drive stock negative
            ConcurrencyConflictError: Conflicts persisted past the retry limit
            PersistenceError: Storage failure
        """
        if not acting_user_id or not acting_user_id.strip():
            raise InvalidMovementRequestError("acting user is required")
        if not requests:
            raise InvalidMovementRequestError("batch contains no movements")

        attempts = 0
        try:
            async for attempt in self._retrying():
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    records = await self._apply_once(
                        requests, acting_user_id, on_applied
                    )
        except ConcurrencyConflictError as e:
            e.details["attempts"] = attempts
            logger.warning(
                "movement_batch_conflict",
                attempts=attempts,
                lines=len(requests),
                user_id=acting_user_id,
            )
            raise
        except LedgerError as e:
            logger.info(
                "movement_batch_rejected",
                error=e.code,
                line=e.line,
                lines=len(requests),
                user_id=acting_user_id,
            )
            raise

        logger.info(
            "movement_batch_committed",
            lines=len(records),
            attempts=attempts,
            user_id=acting_user_id,
        )
        return records

    def _retrying(self) -> AsyncRetrying:
        """Retry policy for version conflicts: exponential back-off, then re-raise."""
        return AsyncRetrying(
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(
                multiplier=self._retry_delay, exp_base=self._retry_multiplier
            ),
            retry=retry_if_exception_type(ConcurrencyConflictError),
            before_sleep=self._log_retry,
            reraise=True,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "movement_conflict_retry",
            attempt=retry_state.attempt_number,
            delay=retry_state.next_action.sleep if retry_state.next_action else None,
            reason=error.details.get("reason") if isinstance(error, LedgerError) else None,
        )

    async def _apply_once(
        self,
        requests: Sequence[MovementRequest],
        acting_user_id: str,
        on_applied: OnApplied | None,
    ) -> list[MovementRecord]:
        async with self._store.session() as session:
            working: dict[tuple[str, str], Balance | None] = {}
            items: dict[str, Item] = {}
            warehouses: set[str] = set()
            records: list[MovementRecord] = []

            for index, request in enumerate(requests):
                try:
                    item = await self._load_item(session, request.item_id, items)
                    await self._check_warehouse(session, request.warehouse_id, warehouses)
                    request = self._resolve_cost(request, index, records)

                    key = (request.item_id, request.warehouse_id)
                    if key not in working:
                        working[key] = await session.get_balance(*key)
                    previous = working[key]

                    result = apply_movement(
                        previous,
                        request,
                        strict_counts=self._strict_counts,
                        default_cost_method=item.costing_method,
                    )
                    record = await session.append_movement(
                        result.record, created_by=acting_user_id
                    )
                    await session.save_balance(
                        result.balance,
                        expected_version=previous.version if previous else 0,
                    )
                except ConcurrencyConflictError:
                    raise
                except LedgerError as e:
                    raise e.at_line(index, request.item_id, request.warehouse_id)

                working[key] = result.balance
                records.append(record)

            if on_applied is not None:
                await on_applied(session, records)
            return records

    @staticmethod
    async def _load_item(
        session: ILedgerSession, item_id: str, cache: dict[str, Item]
    ) -> Item:
        if item_id not in cache:
            item = await session.get_item(item_id)
            if item is None:
                raise UnknownItemOrWarehouseError("item", item_id)
            cache[item_id] = item
        return cache[item_id]

    @staticmethod
    async def _check_warehouse(
        session: ILedgerSession, warehouse_id: str, seen: set[str]
    ) -> None:
        if warehouse_id in seen:
            return
        if await session.get_warehouse(warehouse_id) is None:
            raise UnknownItemOrWarehouseError("warehouse", warehouse_id)
        seen.add(warehouse_id)

    @staticmethod
    def _resolve_cost(
        request: MovementRequest, index: int, records: list[MovementRecord]
    ) -> MovementRequest:
        """Price a line from an earlier outbound line of the same batch."""
        source_index = request.cost_from_line
        if source_index is None:
            return request
        if request.unit_cost is not None:
            raise InvalidMovementRequestError(
                "cost_from_line and unit_cost are mutually exclusive"
            )
        if not request.kind.is_inbound:
            raise InvalidMovementRequestError(
                "cost_from_line applies to inbound movements only",
                kind=request.kind.value,
            )
        if not 0 <= source_index < index:
            raise InvalidMovementRequestError(
                "cost_from_line must reference an earlier line",
                cost_from_line=source_index,
            )
        source = records[source_index]
        if not source.kind.is_outbound:
            raise InvalidMovementRequestError(
                "cost_from_line must reference an outbound line",
                cost_from_line=source_index,
            )
        return request.model_copy(
            update={"unit_cost": source.unit_cost, "cost_from_line": None}
        )
