"""Kernel services: the single-writer item store and persisted state."""

from inventory_kernel.services.inventory_store import (
    DEFAULT_INITIAL_QUANTITY_REMARK,
    InventoryStore,
    StoreListener,
)
from inventory_kernel.services.state_repository import (
    DEFAULT_BACKUP_CONFIG_KEY,
    DEFAULT_ITEMS_KEY,
    StateRepository,
)

__all__ = [
    "DEFAULT_BACKUP_CONFIG_KEY",
    "DEFAULT_INITIAL_QUANTITY_REMARK",
    "DEFAULT_ITEMS_KEY",
    "InventoryStore",
    "StateRepository",
    "StoreListener",
]
