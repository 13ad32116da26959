"""
inventory-ledger command line.

Usage:
    inventory-ledger --secret 0000 list --category part
    inventory-ledger --secret 0000 add-item --type part --name widget --code x1 --initial-quantity 3
    inventory-ledger --secret 1111 add-txn ITEM_ID --type consumption --quantity 1 --serial SN-1
    inventory-ledger --secret 0000 export --category part --directory exports/
    inventory-ledger --secret 0000 configure-backup --client-id local
    inventory-ledger --secret 0000 backup

The secret may also be given through INVENTORY_SECRET. Every command opens
the configured database, logs in with the secret and runs one operation.
Failures are printed to stderr as ``ERROR [<code>]: <message>`` and the
process exits with status 1.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

import yaml

from inventory_config import get_active_config
from inventory_kernel.domain.dtos import ItemDraft, TransactionDraft
from inventory_kernel.domain.stock import stock_of
from inventory_kernel.domain.values import parse_timestamp
from inventory_kernel.logging_config import configure_logging
from inventory_services.application import InventoryApplication

SECRET_ENV_VAR = "INVENTORY_SECRET"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="inventory-ledger",
        description="Inventory ledger: items, stock movements, export and backup.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", default=None, help="YAML file overlaid on the defaults")
    parser.add_argument(
        "--secret",
        default=os.environ.get(SECRET_ENV_VAR),
        help=f"Role secret (default: ${SECRET_ENV_VAR})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List items of one category")
    p.add_argument("--category", required=True, choices=("part", "product"))
    p.add_argument("--query", default="")

    sub.add_parser("stats", help="Item count and total stock per category")

    p = sub.add_parser("add-item", help="Register a new item")
    p.add_argument("--type", required=True, choices=("part", "product"))
    p.add_argument("--name", required=True)
    p.add_argument("--code", default="")
    p.add_argument("--drawing-number", default="")
    p.add_argument("--spec", default="")
    p.add_argument("--unit-price", default="0")
    p.add_argument("--remarks", default="")
    p.add_argument("--initial-quantity", type=int, default=0)

    p = sub.add_parser("update-item", help="Change fields of an item")
    p.add_argument("item_id")
    p.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Field to change (repeatable), e.g. --set spec=M6",
    )

    p = sub.add_parser("add-txn", help="Record a stock movement")
    p.add_argument("item_id")
    p.add_argument("--type", required=True, choices=("purchase", "consumption"))
    p.add_argument("--quantity", required=True)
    p.add_argument("--date", default=None, help="ISO-8601 timestamp (default: now)")
    p.add_argument("--remarks", default="")
    p.add_argument("--serial", default="")

    p = sub.add_parser("delete-txn", help="Remove one stock movement")
    p.add_argument("item_id")
    p.add_argument("transaction_id")

    p = sub.add_parser("delete-item", help="Permanently delete an item and its history")
    p.add_argument("item_id")
    p.add_argument(
        "--confirm-secret",
        default=None,
        help="Secret re-entered for the delete (default: --secret)",
    )

    p = sub.add_parser("export", help="Write a category view as CSV")
    p.add_argument("--category", required=True, choices=("part", "product"))
    p.add_argument("--query", default="")
    p.add_argument("--directory", default=".")

    sub.add_parser("backup", help="Upload a full backup")

    p = sub.add_parser("configure-backup", help="Save the backup destination")
    p.add_argument("--client-id", required=True)
    p.add_argument("--folder-id", default="")

    return parser.parse_args(argv)


def _parse_assignments(assignments: list[str]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"expected FIELD=VALUE, got {assignment!r}")
        fields[name.strip()] = value
    return fields


def _dispatch(app: InventoryApplication, args: argparse.Namespace) -> Any:
    command = args.command

    if command == "list":
        for item in app.search(args.category, args.query):
            print(
                f"{item.id}\t{item.code or '-'}\t{item.name}\t"
                f"{item.drawing_number or '-'}\t{stock_of(item)}"
            )
        return None

    if command == "stats":
        for category, totals in app.stats().items():
            print(f"{category.value}\titems={totals.item_count}\tstock={totals.total_stock}")
        return None

    if command == "add-item":
        draft = ItemDraft(
            type=args.type,
            name=args.name,
            code=args.code,
            drawing_number=args.drawing_number,
            spec=args.spec,
            unit_price=args.unit_price,
            remarks=args.remarks,
        )
        item = app.create_item(draft, args.initial_quantity)
        print(item.id)
        return item

    if command == "update-item":
        item = app.update_item(args.item_id, _parse_assignments(args.assignments))
        print(item.id)
        return item

    if command == "add-txn":
        when = parse_timestamp(args.date) if args.date else app.clock.now()
        draft = TransactionDraft(
            type=args.type,
            quantity=args.quantity,
            date=when,
            remarks=args.remarks,
            serial_number=args.serial,
        )
        txn = app.add_transaction(args.item_id, draft)
        print(txn.id)
        return txn

    if command == "delete-txn":
        app.delete_transaction(args.item_id, args.transaction_id)
        return None

    if command == "delete-item":
        confirm = args.confirm_secret if args.confirm_secret is not None else args.secret
        app.delete_item(args.item_id, confirm or "")
        return None

    if command == "export":
        path = app.export(args.category, args.query, args.directory)
        print(path)
        return path

    if command == "backup":
        file_id = app.backup()
        print(file_id)
        return file_id

    if command == "configure-backup":
        return app.save_backup_config(args.client_id, args.folder_id)

    raise ValueError(f"unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        config = get_active_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1

    if not args.secret:
        print(f"ERROR: No secret given (use --secret or ${SECRET_ENV_VAR})", file=sys.stderr)
        return 1

    app = InventoryApplication.open(config)
    result = app.run(lambda: app.login(args.secret))
    if result.ok:
        try:
            result = app.run(lambda: _dispatch(app, args))
        except ValueError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
    if not result.ok:
        print(f"ERROR [{result.notice.code}]: {result.notice.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
