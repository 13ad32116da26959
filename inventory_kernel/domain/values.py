"""
Values -- Enumerations and boundary normalizers for the ledger.

Responsibility:
    Defines the closed vocabularies (item categories, movement directions)
    and the functions that normalize raw input at the boundary: uppercase
    identifiers, trimmed free text, non-negative unit prices, positive
    quantities and ISO-8601 timestamps.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by dtos, validation, stock and merge.

Failure modes:
    - InvalidFieldError for negative prices, non-positive or non-integer
      quantities, and unparseable timestamps.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from inventory_kernel.exceptions import InvalidFieldError


class ItemType(str, Enum):
    """
    Category of a tracked item.

    Contract:
        Set at creation, never changed afterwards.
    """

    PART = "part"
    PRODUCT = "product"


class TransactionType(str, Enum):
    """
    Direction of a stock movement.

    Contract:
        PURCHASE adds its quantity to stock, CONSUMPTION subtracts it.
        The quantity itself is always a positive magnitude.
    """

    PURCHASE = "purchase"
    CONSUMPTION = "consumption"


def parse_item_type(value: Any) -> ItemType:
    """Coerce an item category; unknown values are rejected."""
    try:
        return ItemType(value)
    except ValueError:
        raise InvalidFieldError("type", value, "must be part or product")


def parse_transaction_type(value: Any) -> TransactionType:
    """Coerce a movement direction; unknown values are rejected."""
    try:
        return TransactionType(value)
    except ValueError:
        raise InvalidFieldError("type", value, "must be purchase or consumption")


def clean_text(value: Any) -> str:
    """Trim free text; None becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip()


def normalize_identifier(value: Any) -> str:
    """Trim and uppercase an identifier (code, name)."""
    return clean_text(value).upper()


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def parse_unit_price(value: Any) -> Decimal:
    """
    Parse a unit price.

    Postconditions:
        - Unparseable, empty or non-finite input yields ``Decimal("0")``.
        - Result is never negative.

    Raises:
        InvalidFieldError: If the parsed price is negative.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not price.is_finite():
        return Decimal("0")
    if price < 0:
        raise InvalidFieldError("unit_price", value, "must not be negative")
    return price


def parse_quantity(value: Any, field: str = "quantity") -> int:
    """
    Parse a transaction quantity.

    Raises:
        InvalidFieldError: If the value is not a positive whole number.
    """
    if isinstance(value, bool):
        raise InvalidFieldError(field, value, "must be a positive integer")
    if isinstance(value, int):
        quantity = value
    else:
        try:
            parsed = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidFieldError(field, value, "must be a positive integer")
        if not parsed.is_finite() or parsed != parsed.to_integral_value():
            raise InvalidFieldError(field, value, "must be a positive integer")
        quantity = int(parsed)
    if quantity <= 0:
        raise InvalidFieldError(field, value, "must be a positive integer")
    return quantity


def parse_timestamp(value: Any, field: str = "date") -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken to be UTC. Date-only strings become midnight.

    Raises:
        InvalidFieldError: If the value is not a datetime or ISO-8601 string.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise InvalidFieldError(field, value, "not an ISO-8601 timestamp")
    else:
        raise InvalidFieldError(field, value, "not an ISO-8601 timestamp")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision and ``Z``."""
    text = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def price_to_wire(value: Decimal) -> int | float:
    """JSON number for a unit price; integral prices stay integers."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)
