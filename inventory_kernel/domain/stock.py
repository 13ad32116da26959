"""
Stock -- Derivation of current stock from transaction history.

Responsibility:
    ``stock_of`` is the single source of truth for "current stock". No
    other component computes or caches it. ``category_totals`` rolls the
    derived figures up per category for dashboard counters.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    STOCK_DERIVED -- stock = sum(purchase) - sum(consumption), computed on
                     every read. The fold is a plain signed sum, so it does
                     not depend on transaction order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from inventory_kernel.domain.dtos import Item, Transaction
from inventory_kernel.domain.values import ItemType


def stock_of_transactions(transactions: Iterable[Transaction]) -> int:
    """Signed total of a transaction sequence; empty -> 0."""
    total = 0
    for txn in transactions:
        total += txn.signed_quantity
    return total


def stock_of(item: Item) -> int:
    """
    Current stock of an item.

    Postconditions:
        - Returns 0 for an item with no transactions.
        - May be negative when consumption exceeds purchases.
    """
    return stock_of_transactions(item.transactions)


@dataclass(frozen=True)
class CategoryTotals:
    """Item count and summed stock for one category."""

    item_count: int = 0
    total_stock: int = 0


def category_totals(items: Iterable[Item]) -> dict[ItemType, CategoryTotals]:
    """Per-category item count and summed derived stock."""
    counts = {category: 0 for category in ItemType}
    stocks = {category: 0 for category in ItemType}
    for item in items:
        counts[item.type] += 1
        stocks[item.type] += stock_of(item)
    return {
        category: CategoryTotals(item_count=counts[category], total_stock=stocks[category])
        for category in ItemType
    }
