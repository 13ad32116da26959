"""
Merge -- Partial-update semantics for items and transactions.

Responsibility:
    The one place that decides how a partial field mapping is folded into
    an existing Item or Transaction. Supplied fields replace the current
    values (after boundary normalization); unspecified fields are left
    untouched. Nothing is re-validated against the corpus: duplicate and
    required-field checks are the caller's job before calling update.

    InventoryStore takes the merge functions as constructor arguments, so
    a stricter variant can be swapped in without touching call sites.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - InvalidFieldError for unknown fields or fields that never change
      after creation (id, type, registration date, transaction list).
    - InvalidFieldError from the normalizers (negative price, bad quantity).
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import Any

from inventory_kernel.domain.dtos import Item, Transaction
from inventory_kernel.domain.values import (
    clean_text,
    normalize_identifier,
    parse_quantity,
    parse_timestamp,
    parse_transaction_type,
    parse_unit_price,
)
from inventory_kernel.exceptions import InvalidFieldError

ItemMerger = Callable[[Item, Mapping[str, Any]], Item]
TransactionMerger = Callable[[Transaction, Mapping[str, Any]], Transaction]

# Wire (camelCase) names accepted alongside attribute names.
_ALIASES: dict[str, str] = {
    "drawingNumber": "drawing_number",
    "unitPrice": "unit_price",
    "serialNumber": "serial_number",
    "registrationDate": "registration_date",
}

_ITEM_NORMALIZERS: dict[str, Callable[[Any], Any]] = {
    "code": normalize_identifier,
    "name": normalize_identifier,
    "drawing_number": clean_text,
    "spec": clean_text,
    "unit_price": parse_unit_price,
    "remarks": clean_text,
}
_ITEM_FIXED = frozenset({"id", "type", "registration_date", "transactions"})

_TRANSACTION_NORMALIZERS: dict[str, Callable[[Any], Any]] = {
    "type": parse_transaction_type,
    "quantity": parse_quantity,
    "date": parse_timestamp,
    "remarks": clean_text,
    "serial_number": clean_text,
}
_TRANSACTION_FIXED = frozenset({"id"})


def _normalize_fields(
    fields: Mapping[str, Any],
    normalizers: Mapping[str, Callable[[Any], Any]],
    fixed: frozenset[str],
) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for raw_name, value in fields.items():
        name = _ALIASES.get(raw_name, raw_name)
        if name in fixed:
            raise InvalidFieldError(name, value, "cannot be changed after creation")
        normalizer = normalizers.get(name)
        if normalizer is None:
            raise InvalidFieldError(name, value, "unknown field")
        changes[name] = normalizer(value)
    return changes


def merge_item(item: Item, fields: Mapping[str, Any]) -> Item:
    """Return ``item`` with the supplied fields replaced."""
    changes = _normalize_fields(fields, _ITEM_NORMALIZERS, _ITEM_FIXED)
    if not changes:
        return item
    return dataclasses.replace(item, **changes)


def merge_transaction(txn: Transaction, fields: Mapping[str, Any]) -> Transaction:
    """Return ``txn`` with the supplied fields replaced."""
    changes = _normalize_fields(fields, _TRANSACTION_NORMALIZERS, _TRANSACTION_FIXED)
    if not changes:
        return txn
    return dataclasses.replace(txn, **changes)
