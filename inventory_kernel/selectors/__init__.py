"""Read-only selectors over the item corpus."""

from inventory_kernel.selectors.item_selector import (
    ItemSelector,
    ItemView,
    filter_items,
)

__all__ = ["ItemSelector", "ItemView", "filter_items"]
