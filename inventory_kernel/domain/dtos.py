"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable records that make up the ledger: Transaction
    (one movement) and Item (identity fields plus its owned, ordered
    transaction history), and the drafts callers hand to the store.
    ``to_dict()`` / ``from_dict()`` convert to and from the camelCase wire
    shape used by persisted state and the backup payload.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    POSITIVE_QUANTITY -- Transaction rejects non-positive quantities.
    TOTAL_OWNERSHIP   -- Item holds its transactions as a tuple; there is no
                         other place a transaction can live.
    STOCK_DERIVED     -- Item has no stock field (see domain.stock).

Failure modes:
    - InvalidFieldError on bad quantity, price or timestamp.
    - KeyError / ValueError from ``from_dict`` on malformed wire data
      (callers loading persisted state treat these as "no prior state").

Data flow:
    ItemDraft -> InventoryStore.create_item -> Item -> Item.to_dict -> JSON
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from inventory_kernel.domain.values import (
    ItemType,
    TransactionType,
    clean_text,
    format_timestamp,
    normalize_identifier,
    parse_quantity,
    parse_item_type,
    parse_timestamp,
    parse_transaction_type,
    parse_unit_price,
    price_to_wire,
)


@dataclass(frozen=True)
class Transaction:
    """
    One recorded stock movement against an item.

    Contract:
        ``quantity`` is a positive magnitude; ``type`` carries direction.
        ``id`` is unique within the owning item.

    Guarantees:
        - quantity > 0 (validated in __post_init__)
        - type is always a TransactionType
        - date is an aware UTC datetime
    """

    id: str
    type: TransactionType
    quantity: int
    date: datetime
    remarks: str = ""
    serial_number: str = ""

    def __post_init__(self) -> None:
        # INVARIANT: POSITIVE_QUANTITY
        object.__setattr__(self, "type", parse_transaction_type(self.type))
        object.__setattr__(self, "quantity", parse_quantity(self.quantity))
        object.__setattr__(self, "date", parse_timestamp(self.date))
        object.__setattr__(self, "remarks", clean_text(self.remarks))
        object.__setattr__(self, "serial_number", clean_text(self.serial_number))

    @property
    def signed_quantity(self) -> int:
        """Quantity with the movement direction applied."""
        if self.type is TransactionType.PURCHASE:
            return self.quantity
        return -self.quantity

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "quantity": self.quantity,
            "date": format_timestamp(self.date),
            "remarks": self.remarks,
        }
        if self.serial_number:
            data["serialNumber"] = self.serial_number
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Transaction:
        return cls(
            id=str(data["id"]),
            type=TransactionType(data["type"]),
            quantity=data["quantity"],
            date=data["date"],
            remarks=data.get("remarks") or "",
            serial_number=data.get("serialNumber") or "",
        )


@dataclass(frozen=True)
class Item:
    """
    A tracked part or product with its owned transaction history.

    Contract:
        ``id``, ``type`` and ``registration_date`` never change after
        creation. ``transactions`` is ordered oldest first.

    Guarantees:
        - type is always an ItemType
        - transactions is always a tuple of Transaction
        - unit_price is a non-negative Decimal

    Non-goals:
        - Does NOT store stock. Use ``domain.stock.stock_of``.
        - Does NOT enforce code uniqueness; that needs the whole corpus.
    """

    id: str
    type: ItemType
    code: str
    name: str
    drawing_number: str = ""
    spec: str = ""
    unit_price: Decimal = Decimal("0")
    remarks: str = ""
    registration_date: datetime | None = None
    transactions: tuple[Transaction, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", parse_item_type(self.type))
        object.__setattr__(self, "transactions", tuple(self.transactions))
        if not isinstance(self.unit_price, Decimal):
            object.__setattr__(self, "unit_price", parse_unit_price(self.unit_price))
        if self.registration_date is not None:
            object.__setattr__(
                self,
                "registration_date",
                parse_timestamp(self.registration_date, "registration_date"),
            )

    def find_transaction(self, transaction_id: str) -> Transaction | None:
        for txn in self.transactions:
            if txn.id == transaction_id:
                return txn
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "code": self.code,
            "drawingNumber": self.drawing_number,
            "name": self.name,
            "spec": self.spec,
            "unitPrice": price_to_wire(self.unit_price),
            "remarks": self.remarks,
            "registrationDate": (
                format_timestamp(self.registration_date)
                if self.registration_date is not None
                else None
            ),
            "transactions": [t.to_dict() for t in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Item:
        return cls(
            id=str(data["id"]),
            type=ItemType(data["type"]),
            code=data.get("code") or "",
            name=data["name"],
            drawing_number=data.get("drawingNumber") or "",
            spec=data.get("spec") or "",
            unit_price=parse_unit_price(data.get("unitPrice")),
            remarks=data.get("remarks") or "",
            registration_date=data.get("registrationDate") or None,
            transactions=tuple(
                Transaction.from_dict(t) for t in data.get("transactions") or ()
            ),
        )


@dataclass(frozen=True)
class ItemDraft:
    """
    Caller input for item creation, normalized on construction.

    Code and name are trimmed and uppercased; drawing number and free text
    are trimmed; the unit price is parsed (unparseable -> 0). A blank name is
    NOT rejected here -- InventoryStore.create_item does that so the
    failure is reported by the operation that was refused.
    """

    type: ItemType
    name: str
    code: str = ""
    drawing_number: str = ""
    spec: str = ""
    unit_price: Any = 0
    remarks: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", parse_item_type(self.type))
        object.__setattr__(self, "name", normalize_identifier(self.name))
        object.__setattr__(self, "code", normalize_identifier(self.code))
        object.__setattr__(
            self, "drawing_number", clean_text(self.drawing_number)
        )
        object.__setattr__(self, "spec", clean_text(self.spec))
        object.__setattr__(self, "unit_price", parse_unit_price(self.unit_price))
        object.__setattr__(self, "remarks", clean_text(self.remarks))


@dataclass(frozen=True)
class TransactionDraft:
    """Caller input for a new transaction (the store assigns the id)."""

    type: TransactionType
    quantity: int
    date: datetime
    remarks: str = ""
    serial_number: str = ""

    def build(self, transaction_id: str) -> Transaction:
        return Transaction(
            id=transaction_id,
            type=self.type,
            quantity=self.quantity,
            date=self.date,
            remarks=self.remarks,
            serial_number=self.serial_number,
        )


@dataclass(frozen=True)
class BackupDestination:
    """
    Saved backup-transport settings.

    ``client_id`` identifies this application to the remote storage
    service; ``folder_id`` optionally names the destination folder.
    """

    client_id: str = ""
    folder_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "client_id", clean_text(self.client_id))
        object.__setattr__(self, "folder_id", clean_text(self.folder_id))

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id)

    def to_dict(self) -> dict[str, str]:
        return {"clientId": self.client_id, "folderId": self.folder_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BackupDestination:
        return cls(
            client_id=data.get("clientId") or "",
            folder_id=data.get("folderId") or "",
        )
