"""
Module: inventory_kernel.selectors.item_selector
Responsibility: Read-only search and roll-ups over the item corpus.
    ``filter_items`` narrows a snapshot by category and free-text query;
    ItemSelector binds the same reads to a live store.
Architecture position: Kernel > Selectors.  May import from domain/ and
    services/ (read access only).  Selectors NEVER mutate the store.

Invariants enforced:
    - Category first: a view for one category never yields an item of the
      other, whatever the query.
    - Order preserved: results keep the store order (newest first).
    - Stock is derived through domain.stock, never cached here.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from inventory_kernel.domain.dtos import Item
from inventory_kernel.domain.stock import CategoryTotals, category_totals
from inventory_kernel.domain.validation import used_serial_numbers
from inventory_kernel.domain.values import ItemType
from inventory_kernel.services.inventory_store import InventoryStore


class ItemView:
    """
    Lazy, restartable filtered view over a corpus snapshot.

    Contract:
        Each iteration re-applies the filter to the snapshot captured at
        construction, so the view can be iterated any number of times and
        always yields the same items in the same order.
    """

    def __init__(self, items: Iterable[Item], category: ItemType, query: str = ""):
        self._items = tuple(items)
        self.category = ItemType(category)
        self.query = (query or "").strip().casefold()

    def _matches(self, item: Item) -> bool:
        if item.type is not self.category:
            return False
        if not self.query:
            return True
        if self.query in item.name.casefold() or self.query in item.code.casefold():
            return True
        if self.category is ItemType.PRODUCT:
            return any(
                self.query in txn.serial_number.casefold()
                for txn in item.transactions
                if txn.serial_number
            )
        return False

    def __iter__(self) -> Iterator[Item]:
        return (item for item in self._items if self._matches(item))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"ItemView(category={self.category.value!r}, query={self.query!r})"


def filter_items(
    items: Iterable[Item],
    category: ItemType | str,
    query: str | None = "",
) -> ItemView:
    """
    Narrow items to one category, then to a case-folded substring query.

    The query matches name or code; for products it also matches any
    transaction serial number. A blank query keeps the whole category.
    """
    return ItemView(items, ItemType(category), query or "")


class ItemSelector:
    """
    Read-only queries bound to a store.

    Contract:
        Every call reads the store's current snapshot once; results are
        consistent with that single snapshot.
    """

    def __init__(self, store: InventoryStore):
        self.store = store

    def filter(self, category: ItemType | str, query: str | None = "") -> ItemView:
        return filter_items(self.store.items(), category, query)

    def category_totals(self) -> dict[ItemType, CategoryTotals]:
        return category_totals(self.store.items())

    def used_serial_numbers(self) -> frozenset[str]:
        return used_serial_numbers(self.store.items())
