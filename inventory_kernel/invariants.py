"""
Kernel Invariants Contract.

These invariants are structural law for the inventory ledger. No
configuration value may switch them off.

This module only declares them. Enforcement is distributed across the
stock calculator, the duplicate validator, the DTO constructors and
InventoryStore.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    STOCK_DERIVED = "stock_derived"
    """Stock equals purchases minus consumptions over the transaction list.
    No field stores stock. Enforced by domain.stock being the only reader."""

    CODE_UNIQUE = "code_unique"
    """Item codes are unique case-insensitively at creation time. Blank
    codes never collide. Enforced by domain.validation."""

    DRAWING_NUMBER_UNIQUE = "drawing_number_unique"
    """Drawing numbers are unique case-insensitively when present.
    Enforced by domain.validation."""

    TOTAL_OWNERSHIP = "total_ownership"
    """Transactions live inside their item. Deleting the item deletes its
    history. Enforced by the Item DTO holding the transaction tuple."""

    POSITIVE_QUANTITY = "positive_quantity"
    """Quantities are positive magnitudes; direction comes from type.
    Enforced by Transaction.__post_init__."""

    ATOMIC_SNAPSHOT = "atomic_snapshot"
    """Each mutation is one replacement of the corpus tuple under the
    store's writer lock."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "inventory_services",
    "inventory_config",
)
