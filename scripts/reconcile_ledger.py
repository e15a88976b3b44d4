#!/usr/bin/env python3
"""
Ledger reconciliation CLI.

Replays the movement ledger of every item/warehouse pair (or one pair) and
compares it with the cached balances. Exits with status 1 when any pair
does not reconcile.

Usage (from the repository root):
    python -m scripts.reconcile_ledger
    python -m scripts.reconcile_ledger --item ITEM_ID --warehouse WAREHOUSE_ID
    python -m scripts.reconcile_ledger --db-path data/stockledger.db --json
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from src.config import configure_logging, reset_settings
from src.core.entities.inventory import ReconciliationResult


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Stockledger ledger reconciliation")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--item", help="Reconcile a single item (requires --warehouse)")
    parser.add_argument("--warehouse", help="Warehouse of the single pair")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    args = parser.parse_args(argv)
    if bool(args.item) != bool(args.warehouse):
        parser.error("--item and --warehouse must be given together")
    return args


def _use_database(db_path: Path) -> None:
    os.environ["STORAGE_DATA_DIR"] = str(db_path.parent)
    os.environ["STORAGE_DB_NAME"] = db_path.name
    reset_settings()


async def reconcile(args: argparse.Namespace) -> list[ReconciliationResult]:
    from src.application.services import get_reconciliation_service
    from src.infrastructure.storage.sqlite import close_pool

    service = await get_reconciliation_service()
    try:
        if args.item:
            return [await service.reconcile_pair(args.item, args.warehouse)]
        return await service.reconcile_all()
    finally:
        await close_pool()


def _print_results(results: list[ReconciliationResult], as_json: bool) -> None:
    if as_json:
        payload = [
            {**r.model_dump(mode="json"), "reconciled": r.reconciled} for r in results
        ]
        print(json.dumps(payload, indent=2))
        return

    for r in results:
        mark = "OK  " if r.reconciled else "FAIL"
        print(
            f"[{mark}] item={r.item_id} warehouse={r.warehouse_id} "
            f"movements={r.movement_count} qty={r.ledger_quantity} value={r.ledger_value}"
        )
        for issue in r.issues:
            print(f"       {issue}")
    failed = sum(1 for r in results if not r.reconciled)
    print(f"{len(results)} pairs checked, {failed} mismatched")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.db_path:
        _use_database(args.db_path)
    configure_logging()

    results = asyncio.run(reconcile(args))
    _print_results(results, args.json)
    return 0 if all(r.reconciled for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
