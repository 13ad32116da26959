"""
Validation -- Duplicate identity checks against the item corpus.

Responsibility:
    Case-insensitive uniqueness checks for item codes and drawing numbers,
    and the serial-number bookkeeping callers use for advisory checks on
    transactions. All functions are pure reads: they never mutate the
    corpus and never reserve a candidate value.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    CODE_UNIQUE           -- via ensure_unique_identity()
    DRAWING_NUMBER_UNIQUE -- via ensure_unique_identity()

Failure modes:
    - DuplicateCodeError / DuplicateDrawingNumberError from
      ensure_unique_identity(). Blank candidates never fail.

Serial numbers:
    The store does NOT reject duplicate serial numbers. Callers that want
    the check (the application layer does, before add/update) use
    ``is_duplicate_serial_number``.
"""

from __future__ import annotations

from collections.abc import Iterable

from inventory_kernel.domain.dtos import Item
from inventory_kernel.domain.values import is_blank
from inventory_kernel.exceptions import (
    DuplicateCodeError,
    DuplicateDrawingNumberError,
)


def _matches_any(candidate: str | None, values: Iterable[str]) -> bool:
    if is_blank(candidate):
        return False
    wanted = candidate.strip().upper()
    return any(value.strip().upper() == wanted for value in values if value)


def is_duplicate_code(candidate: str | None, items: Iterable[Item]) -> bool:
    """True iff a non-blank candidate equals some item's code, ignoring case."""
    return _matches_any(candidate, (item.code for item in items))


def is_duplicate_drawing_number(candidate: str | None, items: Iterable[Item]) -> bool:
    """True iff a non-blank candidate equals some item's drawing number, ignoring case."""
    return _matches_any(candidate, (item.drawing_number for item in items))


def ensure_unique_identity(
    code: str | None,
    drawing_number: str | None,
    items: Iterable[Item],
) -> None:
    """
    Reject a code or drawing number already present in the corpus.

    Raises:
        DuplicateCodeError: code collides (checked first).
        DuplicateDrawingNumberError: drawing number collides.
    """
    corpus = tuple(items)
    if is_duplicate_code(code, corpus):
        raise DuplicateCodeError(code)
    if is_duplicate_drawing_number(drawing_number, corpus):
        raise DuplicateDrawingNumberError(drawing_number)


def used_serial_numbers(items: Iterable[Item]) -> frozenset[str]:
    """Every serial number recorded on any transaction, uppercased."""
    return frozenset(
        txn.serial_number.upper()
        for item in items
        for txn in item.transactions
        if txn.serial_number
    )


def is_duplicate_serial_number(
    candidate: str | None,
    items: Iterable[Item],
    exclude: tuple[str, str] | None = None,
) -> bool:
    """
    True iff the candidate serial is already recorded, ignoring case.

    ``exclude`` is an ``(item_id, transaction_id)`` pair so an edit can
    keep its own serial. Transaction ids are only unique per item.
    """
    if is_blank(candidate):
        return False
    wanted = candidate.strip().upper()
    for item in items:
        for txn in item.transactions:
            if exclude is not None and (item.id, txn.id) == exclude:
                continue
            if txn.serial_number and txn.serial_number.upper() == wanted:
                return True
    return False
