"""
Pure domain layer.

This module contains immutable records and the pure functions over them
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (injected instead)
- I/O
"""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.credentials import CredentialCheck, Role, StaticSecretCheck
from inventory_kernel.domain.dtos import (
    BackupDestination,
    Item,
    ItemDraft,
    Transaction,
    TransactionDraft,
)
from inventory_kernel.domain.identifiers import (
    ITEM_PREFIX,
    TRANSACTION_PREFIX,
    generate_id,
)
from inventory_kernel.domain.merge import merge_item, merge_transaction
from inventory_kernel.domain.stock import (
    CategoryTotals,
    category_totals,
    stock_of,
    stock_of_transactions,
)
from inventory_kernel.domain.validation import (
    ensure_unique_identity,
    is_duplicate_code,
    is_duplicate_drawing_number,
    is_duplicate_serial_number,
    used_serial_numbers,
)
from inventory_kernel.domain.values import ItemType, TransactionType

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # Credentials
    "CredentialCheck",
    "Role",
    "StaticSecretCheck",
    # Records
    "BackupDestination",
    "Item",
    "ItemDraft",
    "Transaction",
    "TransactionDraft",
    "ItemType",
    "TransactionType",
    # Identifiers
    "ITEM_PREFIX",
    "TRANSACTION_PREFIX",
    "generate_id",
    # Stock
    "CategoryTotals",
    "category_totals",
    "stock_of",
    "stock_of_transactions",
    # Validation
    "ensure_unique_identity",
    "is_duplicate_code",
    "is_duplicate_drawing_number",
    "is_duplicate_serial_number",
    "used_serial_numbers",
    # Merge
    "merge_item",
    "merge_transaction",
]
